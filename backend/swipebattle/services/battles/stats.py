from collections import Counter
from typing import Optional

from swipebattle.models import Battle, BattleImage


def format_win_rate(wins: int, losses: int) -> str:
    """Whole-percent win rate, halves rounded up (1 of 8 is "13%")."""
    total = wins + losses
    if total <= 0:
        return 'N/A'
    return f"{(200 * wins + total) // (2 * total)}%"


def _image_url(name: str) -> Optional[str]:
    image = BattleImage.query.filter_by(name=name).first()
    return image.url if image and image.url else None


def candidate_record(name: str) -> tuple:
    wins = Battle.query.filter_by(winner_name=name).count()
    losses = Battle.query.filter_by(loser_name=name).count()
    return wins, losses


def user_stats(user_id: int, limit: int = 5) -> dict:
    """Total picks by a user and their most-picked champions with global win rates.

    Every pick a user makes is recorded with them as the chooser, so the
    champions are simply the winners they picked most often. Ties keep the
    order in which the user first picked them.
    """
    choices = [
        row.winner_name
        for row in Battle.query.filter_by(user_id=user_id).order_by(Battle.id).all()
    ]
    total_games = len(choices)
    if total_games == 0:
        return {'total_games': 0, 'top_champions': []}

    top_champions = []
    for name, picks in Counter(choices).most_common(limit):
        wins, losses = candidate_record(name)
        top_champions.append({
            'name': name,
            'picks': picks,
            'win_rate': format_win_rate(wins, losses),
            'image_url': _image_url(name),
        })
    return {'total_games': total_games, 'top_champions': top_champions}


def candidate_profile(name: str) -> dict:
    wins, losses = candidate_record(name)
    return {
        'name': name,
        'image_url': _image_url(name),
        'wins': wins,
        'losses': losses,
        'total': wins + losses,
        'win_rate': format_win_rate(wins, losses),
    }
