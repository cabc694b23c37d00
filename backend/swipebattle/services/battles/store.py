from datetime import datetime, timezone
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from swipebattle import db
from swipebattle.models import Battle
from .errors import StoreUnavailable


class OutcomeStore(Protocol):
    """Append-and-count access to past battle outcomes."""

    def count(self, winner_name: str, loser_name: str) -> int:
        ...

    def append(self, winner_name: str, loser_name: str, user_id: Optional[int] = None,
               timestamp: Optional[datetime] = None):
        ...


class SqlOutcomeStore:
    """Outcome store backed by the ``battles`` table.

    Counts are plain snapshots: a pick completing in another session between
    our count and our append is not seen, so two first-time matchups can both
    score as a tie.
    """

    def __init__(self, session=None):
        self.session = session or db.session

    def count(self, winner_name: str, loser_name: str) -> int:
        try:
            return (
                self.session.query(Battle)
                .filter_by(winner_name=winner_name, loser_name=loser_name)
                .count()
            )
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreUnavailable(f"count {winner_name!r} over {loser_name!r} failed: {exc}") from exc

    def append(self, winner_name: str, loser_name: str, user_id: Optional[int] = None,
               timestamp: Optional[datetime] = None) -> Battle:
        record = Battle(
            winner_name=winner_name,
            loser_name=loser_name,
            user_id=user_id,
            created_at=timestamp or datetime.now(timezone.utc),
        )
        try:
            self.session.add(record)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreUnavailable(f"append {winner_name!r} over {loser_name!r} failed: {exc}") from exc
        return record
