import logging
from typing import Optional

from .candidate import Candidate, validate_matchup
from .store import OutcomeStore, SqlOutcomeStore

MAJORITY_POINTS = 100
UNDERDOG_POINTS = 25
EVEN_POINTS = 50
FALLBACK_POINTS = 50
UNSCORED_POINTS = 0

SCORING_BACKENDS = ('database', 'disabled')


def points_for(winner_wins: int, loser_wins: int) -> int:
    """Points for picking the winner given past head-to-head counts.

    Picking the side the crowd usually picks earns 100, the underdog 25, and
    an even record (including no history at all) 50.
    """
    if winner_wins > loser_wins:
        return MAJORITY_POINTS
    if winner_wins < loser_wins:
        return UNDERDOG_POINTS
    return EVEN_POINTS


def _valid_count(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


class PopularityScorer:
    """Turns one pick into points using how earlier players resolved the same matchup.

    With no store attached the scorer runs in "no popularity signal" mode and
    every pick is worth 0. With a store, any failure to count falls back to
    FALLBACK_POINTS so a backend hiccup never blocks play.
    """

    def __init__(self, store: Optional[OutcomeStore] = None, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    @property
    def configured(self) -> bool:
        return self.store is not None

    def score(self, winner: Candidate, loser: Candidate) -> int:
        validate_matchup(winner, loser)
        if self.store is None:
            return UNSCORED_POINTS
        try:
            winner_wins = self.store.count(winner.name, loser.name)
            loser_wins = self.store.count(loser.name, winner.name)
            if not (_valid_count(winner_wins) and _valid_count(loser_wins)):
                raise ValueError(f"malformed counts {winner_wins!r}/{loser_wins!r}")
        except Exception as exc:
            self.logger.warning(
                f"[score-fallback] winner={winner.name} loser={loser.name} points={FALLBACK_POINTS} error={exc}"
            )
            return FALLBACK_POINTS
        points = points_for(winner_wins, loser_wins)
        self.logger.info(
            f"[score] winner={winner.name} loser={loser.name} record={winner_wins}-{loser_wins} points={points}"
        )
        return points


def get_scorer(app) -> PopularityScorer:
    """Build the scorer selected by SCORING_BACKEND for the given app."""
    backend = (app.config.get('SCORING_BACKEND') or 'database').lower()
    if backend not in SCORING_BACKENDS:
        raise ValueError(f"Unknown SCORING_BACKEND {backend!r}; expected one of {', '.join(SCORING_BACKENDS)}")
    if backend == 'disabled':
        return PopularityScorer(None, logger=app.logger)
    return PopularityScorer(SqlOutcomeStore(), logger=app.logger)
