import os
import sys
import pytest

# Ensure the backend root (containing the `swipebattle` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from swipebattle import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    TOTAL_ROUNDS = 5
    SCORING_BACKEND = 'database'
    STATS_TOP_CHAMPIONS = 5
    SESSION_CODE_LENGTH = 6


class UnscoredTestConfig(TestConfig):
    SCORING_BACKEND = 'disabled'


def _make_app(config_class):
    application = create_app(config_class)
    with application.app_context():
        # Ensure models are imported so tables are created
        import swipebattle.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def flask_app():
    yield from _make_app(TestConfig)


@pytest.fixture()
def unscored_app():
    yield from _make_app(UnscoredTestConfig)


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def user(flask_app):
    from swipebattle.models import User
    u = User(username='picker')
    db.session.add(u)
    db.session.commit()
    return u


@pytest.fixture()
def logged_in_client(flask_app, user):
    test_client = flask_app.test_client()
    # Flask-Login reads the user id from the session cookie
    with test_client.session_transaction() as sess:
        sess['_user_id'] = str(user.id)
        sess['_fresh'] = True
    return test_client


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
