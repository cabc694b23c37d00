from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .candidate import Candidate
from .errors import InvalidInput, InvalidTransition, PickInFlight, StaleRound

DEFAULT_TOTAL_ROUNDS = 10


class Phase(str, Enum):
    START = 'start'
    PLAYING = 'playing'
    END = 'end'
    WINNERS = 'winners'
    STATS = 'stats'


@dataclass
class SessionState:
    """Phase, score, round and winners of one playthrough.

    Each transition is a single method; anything not listed below raises
    InvalidTransition and leaves the state untouched.

    start -> playing -> (playing)* -> end -> winners
    end | winners -> start (restart)
    any non-stats phase <-> stats (side view, data untouched)
    """
    total_rounds: int = DEFAULT_TOTAL_ROUNDS
    phase: Phase = Phase.START
    score: int = 0
    current_round: int = 1
    winners: List[Candidate] = field(default_factory=list)
    return_phase: Optional[Phase] = None
    pick_in_flight: bool = False

    def __post_init__(self):
        if self.total_rounds < 1:
            raise ValueError(f"total_rounds must be at least 1, got {self.total_rounds}")
        self.phase = Phase(self.phase)
        if self.return_phase is not None:
            self.return_phase = Phase(self.return_phase)

    def _require(self, action: str, *phases: Phase) -> None:
        if self.phase not in phases:
            raise InvalidTransition(action, self.phase.value)

    def start(self) -> None:
        self._require('start', Phase.START)
        self.score = 0
        self.current_round = 1
        self.winners = []
        self.pick_in_flight = False
        self.phase = Phase.PLAYING

    def begin_pick(self, expected_round: Optional[int] = None) -> None:
        """Mark a pick as being scored. Only one pick may be in flight at a time."""
        self._require('pick', Phase.PLAYING)
        if self.pick_in_flight:
            raise PickInFlight()
        if expected_round is not None and expected_round != self.current_round:
            raise StaleRound(expected_round, self.current_round)
        self.pick_in_flight = True

    def abandon_pick(self) -> None:
        self.pick_in_flight = False

    def complete_pick(self, winner: Candidate, points: int) -> None:
        self._require('complete a pick', Phase.PLAYING)
        if not self.pick_in_flight:
            raise InvalidTransition('complete a pick that was never started', self.phase.value)
        if isinstance(points, bool) or not isinstance(points, int) or points < 0:
            raise InvalidInput(f"Points must be a non-negative integer, got {points!r}")
        self.score += points
        self.winners.append(winner)
        self.pick_in_flight = False
        if self.current_round < self.total_rounds:
            self.current_round += 1
        else:
            self.phase = Phase.END

    def show_winners(self) -> None:
        self._require('show winners', Phase.END)
        if not self.winners:
            raise InvalidTransition('show winners without any winners', self.phase.value)
        self.phase = Phase.WINNERS

    def open_stats(self) -> None:
        if self.phase == Phase.STATS:
            raise InvalidTransition('open stats', self.phase.value)
        self.return_phase = self.phase
        self.phase = Phase.STATS

    def close_stats(self) -> None:
        self._require('close stats', Phase.STATS)
        self.phase = self.return_phase or Phase.START
        self.return_phase = None

    def restart(self) -> None:
        self._require('restart', Phase.END, Phase.WINNERS)
        self.score = 0
        self.current_round = 1
        self.winners = []
        self.pick_in_flight = False
        self.return_phase = None
        self.phase = Phase.START

    @property
    def completed_rounds(self) -> int:
        return len(self.winners)

    def to_dict(self) -> dict:
        return {
            'phase': self.phase.value,
            'score': self.score,
            'current_round': self.current_round,
            'total_rounds': self.total_rounds,
            'session_winners': [w.to_dict() for w in self.winners],
            'has_winners': bool(self.winners),
            'return_phase': self.return_phase.value if self.return_phase else None,
            'pick_in_flight': self.pick_in_flight,
        }
