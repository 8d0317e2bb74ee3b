from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def _allowed_origins(config) -> list:
    return [o.strip() for o in (config.get('CORS_ORIGINS') or '').split(',') if o.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = _allowed_origins(flask_app.config)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from prediction_quiz.main import main
    flask_app.register_blueprint(main)

    from prediction_quiz.api.quiz import quiz
    flask_app.register_blueprint(quiz, url_prefix='/api')

    from prediction_quiz.api.admin import admin
    flask_app.register_blueprint(admin, url_prefix='/api/admin')

    try:
        from prediction_quiz.socketio_events import register_socketio_handlers
        register_socketio_handlers(testing=flask_app.config.get('TESTING', False))
    except ImportError as exc:
        flask_app.logger.warning(f"SocketIO events not loaded: {exc}")

    from prediction_quiz.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database with the admin account."""
        from prediction_quiz.services.quiz.controller import ensure_game_state
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            admin_user = User(username=flask_app.config['ADMIN_USERNAME'])
            admin_user.set_password(flask_app.config['ADMIN_PASSWORD'])
            db.session.add(admin_user)
            db.session.commit()
            ensure_game_state()
            click.echo('Database has been reset and seeded!')

    @click.command('create-admin')
    @click.argument('username')
    @click.password_option()
    def create_admin_command(username, password):
        """Adds an admin account."""
        with flask_app.app_context():
            if User.query.filter_by(username=username).first():
                raise click.ClickException(f"User {username!r} already exists")
            user = User(username=username)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            click.echo(f"Admin {username} created")

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(create_admin_command)

    return flask_app
