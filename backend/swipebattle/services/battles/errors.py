"""Domain errors raised by the battle services.

The API layer maps these onto JSON error responses; ``StoreUnavailable`` is
recovered inside the scorer and never reaches a player.
"""


class BattleError(Exception):
    """Base class for battle domain errors."""


class InvalidInput(BattleError):
    """A caller passed a missing or malformed candidate pair."""


class InvalidTransition(BattleError):
    """The requested action is not allowed in the session's current phase."""

    def __init__(self, action: str, phase: str):
        super().__init__(f"Cannot {action} while session is in phase '{phase}'")
        self.action = action
        self.phase = phase


class PickRejected(BattleError):
    """A pick cannot be accepted right now."""


class PickInFlight(PickRejected):
    def __init__(self):
        super().__init__("A pick is already being scored for this session")


class StaleRound(PickRejected):
    def __init__(self, expected: int, actual: int):
        super().__init__(f"Pick was made for round {expected} but session is on round {actual}")
        self.expected = expected
        self.actual = actual


class StoreUnavailable(BattleError):
    """The outcome store could not answer a count or accept an append."""
