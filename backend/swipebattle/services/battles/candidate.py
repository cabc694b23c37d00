from dataclasses import dataclass
from typing import Any, Optional

from .errors import InvalidInput


@dataclass(frozen=True)
class Candidate:
    """One image that can appear in a battle. Identity is the name, not the url."""
    name: str
    url: str = ''

    @classmethod
    def from_dict(cls, data: Optional[Any]) -> 'Candidate':
        if not isinstance(data, dict):
            raise InvalidInput('Candidate must be an object with a name')
        name = data.get('name')
        if not isinstance(name, str) or not name.strip():
            raise InvalidInput('Candidate name is required')
        url = data.get('url') or ''
        if not isinstance(url, str):
            raise InvalidInput('Candidate url must be a string')
        return cls(name=name, url=url)

    def to_dict(self) -> dict:
        return {'name': self.name, 'url': self.url}


def validate_matchup(winner: Candidate, loser: Candidate) -> None:
    """Reject pairs that cannot be scored: missing identities or a candidate against itself."""
    if not isinstance(winner, Candidate) or not isinstance(loser, Candidate):
        raise InvalidInput('Winner and loser must both be candidates')
    if not winner.name or not loser.name:
        raise InvalidInput('Winner and loser names are required')
    if winner.name == loser.name:
        raise InvalidInput(f"Winner and loser must differ, got '{winner.name}' twice")
