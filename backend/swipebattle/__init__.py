from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

SEED_CANDIDATES = [
    ('Aria', 'https://placehold.co/400x600?text=Aria'),
    ('Blaze', 'https://placehold.co/400x600?text=Blaze'),
    ('Cinder', 'https://placehold.co/400x600?text=Cinder'),
    ('Dusk', 'https://placehold.co/400x600?text=Dusk'),
    ('Ember', 'https://placehold.co/400x600?text=Ember'),
    ('Frost', 'https://placehold.co/400x600?text=Frost'),
]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from swipebattle.main import main
    flask_app.register_blueprint(main)

    from swipebattle.api.battles import battles
    flask_app.register_blueprint(battles, url_prefix='/api/battles')

    from swipebattle.api.candidates import candidates
    flask_app.register_blueprint(candidates, url_prefix='/api/candidates')

    from swipebattle.api.stats import stats
    flask_app.register_blueprint(stats, url_prefix='/api/stats')

    from swipebattle.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    # Identity comes from the session cookie set by the external auth layer
    from swipebattle.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    scoring_backend = flask_app.config.get('SCORING_BACKEND', 'database')
    if scoring_backend == 'disabled':
        flask_app.logger.warning("Popularity scoring is disabled; every pick scores 0 points.")

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from swipebattle.models import User, BattleImage
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            for u in ['testuser1', 'testuser2', 'testuser3']:
                db.session.add(User(username=u))
            for name, url in SEED_CANDIDATES:
                db.session.add(BattleImage(name=name, url=url))

            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
