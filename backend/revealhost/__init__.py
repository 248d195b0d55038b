from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import os
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Import and register blueprints here
    from revealhost.main import main
    flask_app.register_blueprint(main)

    from revealhost.api.rounds import rounds
    flask_app.register_blueprint(rounds, url_prefix='/api/rounds')

    from revealhost.api.presentation import presentation
    flask_app.register_blueprint(presentation, url_prefix='/api/presentation')

    # One presenter per app: the host's clock, active round and display bridge
    from revealhost.services.store import RoundStore
    from revealhost.services.presentation import Presenter, HostRenderer, Notifier
    renderer = HostRenderer(socketio)
    flask_app.extensions['presenter'] = Presenter(
        store=RoundStore(flask_app.config),
        config=flask_app.config,
        render=renderer,
        paint_display=renderer.paint_display,
        notify=Notifier(socketio, flask_app.logger, flask_app.config.get('NOTICE_DURATION_MS', 2000)),
        spawn=socketio.start_background_task,
        sleep=socketio.sleep,
        logger=flask_app.logger,
    )

    # Register Socket.IO event handlers
    from revealhost.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from revealhost.models import HostSettings  # noqa: F401
        from revealhost.services.scoring import ensure_default_teams
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            ensure_default_teams()
            RoundStore(flask_app.config).settings_row()
            os.makedirs(flask_app.config['UPLOAD_FOLDER'], exist_ok=True)
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
