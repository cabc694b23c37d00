from swipebattle import db
from flask import current_app
from flask_login import UserMixin
from datetime import datetime, timezone
import json
import string
import random

from swipebattle.services.battles.candidate import Candidate
from swipebattle.services.battles.errors import InvalidInput
from swipebattle.services.battles.session import SessionState


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class BattleImage(db.Model):
    """Catalogue entry for a character that can be served in a pair."""
    __tablename__ = 'battle_image'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), unique=True, nullable=False, index=True)
    url = db.Column(db.String(512), nullable=False, default='')

    def to_candidate(self) -> Candidate:
        return Candidate(name=self.name, url=self.url or '')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'url': self.url,
        }


class Battle(db.Model):
    """One completed pick. Rows are only ever appended."""
    __tablename__ = 'battles'
    __table_args__ = (
        db.Index('ix_battles_winner_loser', 'winner_name', 'loser_name'),
    )
    id = db.Column(db.Integer, primary_key=True)
    winner_name = db.Column(db.String(128), nullable=False)
    loser_name = db.Column(db.String(128), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            'id': self.id,
            'winner_name': self.winner_name,
            'loser_name': self.loser_name,
            'user_id': self.user_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


def generate_session_code(length=6):
    """Generate a unique, short session code."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if not GameSession.query.filter_by(session_code=code).first():
            return code


class GameSession(db.Model):
    __tablename__ = 'game_session'
    id = db.Column(db.Integer, primary_key=True)
    session_code = db.Column(db.String(16), unique=True, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    phase = db.Column(db.String(16), nullable=False, default='start')  # start, playing, end, winners, stats
    return_phase = db.Column(db.String(16), nullable=True)  # phase to restore when leaving stats
    score = db.Column(db.Integer, nullable=False, default=0)
    current_round = db.Column(db.Integer, nullable=False, default=1)
    total_rounds = db.Column(db.Integer, nullable=False, default=10)
    session_winners = db.Column(db.Text, nullable=True)  # JSON-encoded list of {name, url}
    pick_in_flight = db.Column(db.Boolean, nullable=False, default=False)
    # Bumped on every state write; writers only update the version they read
    version = db.Column(db.Integer, nullable=False, default=0)

    def __init__(self, code_length=6, **kwargs):
        super(GameSession, self).__init__(**kwargs)
        if not self.session_code:
            self.session_code = generate_session_code(code_length)

    def to_state(self) -> SessionState:
        try:
            winners = [Candidate.from_dict(w) for w in json.loads(self.session_winners or '[]')]
        except (ValueError, InvalidInput) as exc:
            current_app.logger.error(
                f"[corrupt-winners] session={self.session_code} raw={self.session_winners!r} error={exc}"
            )
            winners = []
        return SessionState(
            total_rounds=self.total_rounds or 10,
            phase=self.phase or 'start',
            score=self.score or 0,
            current_round=self.current_round or 1,
            winners=winners,
            return_phase=self.return_phase,
            pick_in_flight=bool(self.pick_in_flight),
        )

    def state_columns(self, state: SessionState) -> dict:
        """Column values for ``state``, with the version moved past the one this row holds."""
        return {
            'phase': state.phase.value,
            'return_phase': state.return_phase.value if state.return_phase else None,
            'score': state.score,
            'current_round': state.current_round,
            'total_rounds': state.total_rounds,
            'session_winners': json.dumps([w.to_dict() for w in state.winners]),
            'pick_in_flight': state.pick_in_flight,
            'version': (self.version or 0) + 1,
        }

    def apply_state(self, state: SessionState) -> None:
        for column, value in self.state_columns(state).items():
            setattr(self, column, value)

    def to_dict(self):
        payload = self.to_state().to_dict()
        payload['id'] = self.id
        payload['session_code'] = self.session_code
        payload['user_id'] = self.user_id
        payload['version'] = self.version
        return payload
