import os
import logging
from logging.handlers import RotatingFileHandler
from flask import Flask, g, get_flashed_messages, request
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager, current_user
from flask_wtf.csrf import CSRFProtect
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from config import Config

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(app):
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger('wanderlust').setLevel(level)

    log_file = app.config.get('LOG_FILE')
    if log_file:
        log_file_path = os.path.join(app.instance_path, log_file)
        # Rotate logs: 5 files, 5MB each
        file_handler = RotatingFileHandler(log_file_path, maxBytes=5 * 1024 * 1024, backupCount=5, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        file_handler.setLevel(level)
        logging.getLogger().addHandler(file_handler)
        logger.info(f"File logging initialized to {log_file_path}")


def register_request_pipeline(app):
    """
    Ordered per-request stages, run after the session has been opened.
    Each stage returns None to continue or a response to short-circuit.
    """

    @app.before_request
    def resolve_current_user():
        # Forces Flask-Login to load the user from the session for this request only
        g.cur_user = current_user._get_current_object() if current_user.is_authenticated else None

    @app.before_request
    def log_request():
        logger.debug(f"{request.method} {request.path} (user: {g.cur_user.username if g.cur_user else 'anonymous'})")

    @app.context_processor
    def inject_locals():
        # Reading the flashes pops them from the session: each message renders once
        return dict(
            success=get_flashed_messages(category_filter=['success']),
            error=get_flashed_messages(category_filter=['error']),
            cur_user=g.get('cur_user'),
            site_name=app.config.get('SITE_NAME', 'Wanderlust'),
        )


def connect_database(app):
    from wanderlust.errors import InfrastructureError

    with app.app_context():
        try:
            db.session.execute(text('SELECT 1'))
            db.create_all()
        except SQLAlchemyError as e:
            logger.error(f"Database connection error: {e}")
            raise InfrastructureError('Database unavailable at startup.') from e
    logger.info("Connected to database")


def create_app(config_class=Config):
    config_class.validate()

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)

    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError:
        pass

    configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    login_manager.init_app(app)
    login_manager.login_view = 'auth.login'

    from wanderlust.models import User
    from wanderlust.sessions import DatabaseSessionInterface, purge_expired_sessions
    from wanderlust.middleware import MethodOverrideMiddleware
    from wanderlust.errors import register_error_handlers

    app.session_interface = DatabaseSessionInterface()
    app.wsgi_app = MethodOverrideMiddleware(app.wsgi_app)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    register_request_pipeline(app)

    from wanderlust.routes import main_bp
    from wanderlust.listings import listings_bp
    from wanderlust.reviews import reviews_bp
    from wanderlust.auth import auth_bp
    app.register_blueprint(main_bp)
    app.register_blueprint(listings_bp, url_prefix='/listings')
    app.register_blueprint(reviews_bp, url_prefix='/listings/<int:listing_id>/reviews')
    app.register_blueprint(auth_bp)

    register_error_handlers(app)

    @app.cli.command('purge-sessions')
    def purge_sessions_command():
        """Delete expired session records."""
        removed = purge_expired_sessions()
        print(f"Removed {removed} expired session(s).")

    connect_database(app)

    return app
