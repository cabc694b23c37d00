import logging

import pytest
from sqlalchemy.exc import OperationalError

from swipebattle.services.battles.candidate import Candidate
from swipebattle.services.battles.errors import InvalidInput, StoreUnavailable
from swipebattle.services.battles.scoring import PopularityScorer, get_scorer, points_for
from swipebattle.services.battles.store import SqlOutcomeStore


A = Candidate(name='Aria', url='https://img/aria.png')
B = Candidate(name='Blaze', url='https://img/blaze.png')


class DictStore:
    """Outcome store keyed by (winner, loser) pairs."""

    def __init__(self, counts=None):
        self.counts = dict(counts or {})
        self.calls = []

    def count(self, winner_name, loser_name):
        self.calls.append((winner_name, loser_name))
        return self.counts.get((winner_name, loser_name), 0)

    def append(self, winner_name, loser_name, user_id=None, timestamp=None):
        key = (winner_name, loser_name)
        self.counts[key] = self.counts.get(key, 0) + 1


class BrokenStore:
    def __init__(self, fail_on_call=1):
        self.fail_on_call = fail_on_call
        self.calls = 0

    def count(self, winner_name, loser_name):
        self.calls += 1
        if self.calls >= self.fail_on_call:
            raise StoreUnavailable('connection refused')
        return 7

    def append(self, *args, **kwargs):
        raise StoreUnavailable('connection refused')


class MalformedStore:
    def __init__(self, value):
        self.value = value

    def count(self, winner_name, loser_name):
        return self.value

    def append(self, *args, **kwargs):
        pass


@pytest.mark.parametrize('winner_wins, loser_wins, expected', [
    (1, 0, 100),
    (12, 11, 100),
    (0, 1, 25),
    (3, 40, 25),
    (0, 0, 50),
    (9, 9, 50),
])
def test_points_for_decision_rule(winner_wins, loser_wins, expected):
    assert points_for(winner_wins, loser_wins) == expected


def test_first_matchup_scores_fifty():
    scorer = PopularityScorer(DictStore())
    assert scorer.score(A, B) == 50


def test_score_queries_both_directions():
    store = DictStore({('Aria', 'Blaze'): 2, ('Blaze', 'Aria'): 5})
    scorer = PopularityScorer(store)
    assert scorer.score(A, B) == 25
    assert store.calls == [('Aria', 'Blaze'), ('Blaze', 'Aria')]
    assert scorer.score(B, A) == 100


def test_url_does_not_affect_identity():
    store = DictStore({('Aria', 'Blaze'): 1})
    scorer = PopularityScorer(store)
    assert scorer.score(Candidate('Aria', 'https://elsewhere/a.png'), Candidate('Blaze')) == 100


@pytest.mark.parametrize('fail_on_call', [1, 2])
def test_store_failure_falls_back_to_fifty(fail_on_call, caplog):
    logger = logging.getLogger('tests.scoring')
    scorer = PopularityScorer(BrokenStore(fail_on_call=fail_on_call), logger=logger)
    with caplog.at_level(logging.WARNING, logger='tests.scoring'):
        assert scorer.score(A, B) == 50
    assert any('[score-fallback]' in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize('value', [None, -1, '3', 2.5, True])
def test_malformed_counts_fall_back_to_fifty(value):
    scorer = PopularityScorer(MalformedStore(value))
    assert scorer.score(A, B) == 50


def test_unconfigured_scorer_always_scores_zero():
    scorer = PopularityScorer(None)
    assert not scorer.configured
    assert scorer.score(A, B) == 0
    assert scorer.score(B, A) == 0


@pytest.mark.parametrize('store', [None, DictStore()])
def test_invalid_matchups_fail_fast(store):
    scorer = PopularityScorer(store)
    with pytest.raises(InvalidInput):
        scorer.score(A, Candidate(name='Aria', url='https://img/other.png'))
    with pytest.raises(InvalidInput):
        scorer.score(A, Candidate(name=''))
    with pytest.raises(InvalidInput):
        scorer.score(A, None)


def test_sql_store_counts_before_append(flask_app):
    store = SqlOutcomeStore()
    scorer = PopularityScorer(store)
    assert scorer.score(A, B) == 50
    store.append(A.name, B.name)
    assert store.count('Aria', 'Blaze') == 1
    assert store.count('Blaze', 'Aria') == 0
    assert scorer.score(A, B) == 100
    assert scorer.score(B, A) == 25


class ExplodingSession:
    def __init__(self):
        self.rolled_back = False

    def query(self, *args, **kwargs):
        raise OperationalError('SELECT count(*)', {}, Exception('database is locked'))

    def rollback(self):
        self.rolled_back = True


def test_sql_store_wraps_database_errors():
    session = ExplodingSession()
    store = SqlOutcomeStore(session=session)
    with pytest.raises(StoreUnavailable):
        store.count('Aria', 'Blaze')
    assert session.rolled_back
    assert PopularityScorer(store).score(A, B) == 50


def test_get_scorer_follows_config(flask_app):
    assert get_scorer(flask_app).configured
    flask_app.config['SCORING_BACKEND'] = 'disabled'
    assert not get_scorer(flask_app).configured
    flask_app.config['SCORING_BACKEND'] = 'carrier-pigeon'
    with pytest.raises(ValueError):
        get_scorer(flask_app)


def test_get_scorer_defaults_to_database(flask_app):
    flask_app.config.pop('SCORING_BACKEND')
    assert get_scorer(flask_app).configured
