from flask import Flask, current_app
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker
from dotenv import load_dotenv
from datetime import timedelta
from typing import Optional, Dict, Any, Callable
import logging
import os

load_dotenv()

jwt = JWTManager()


def create_app(config: Optional[Dict[str, Any]] = None, clock: Optional[Callable[[], str]] = None):
    from fieldops.models.storage import Base
    from fieldops.services.storage import KeyValueStorage
    from fieldops.services.workspace import Workspace
    from fieldops.utils.clock import utcnow_iso

    app = Flask(__name__)

    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    app.config['DATABASE_URL'] = os.getenv('DATABASE_URL', 'sqlite:///dev.db')
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(hours=int(os.getenv('SESSION_HOURS', '12')))

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    logging.basicConfig(format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    logging.getLogger('fieldops').setLevel(app.config['LOG_LEVEL'])

    # Storage
    db_url = app.config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all sessions
        engine = create_engine(
            db_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(db_url, echo=False)
    Base.metadata.create_all(engine)
    storage = KeyValueStorage(sessionmaker(bind=engine, expire_on_commit=False))
    app.extensions['fieldops'] = Workspace(storage, clock=clock or utcnow_iso).load()

    jwt.init_app(app)

    from .routes.auth import auth_bp
    from .routes.users import users_bp
    from .routes.messages import msg_bp
    from .routes.projects import proj_bp
    from .routes.tasks import tasks_bp
    from .routes.stock import stock_bp
    from .routes.notifications import notif_bp
    from .routes.dashboard import dash_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(users_bp, url_prefix='/users')
    app.register_blueprint(msg_bp, url_prefix='/messages')
    app.register_blueprint(proj_bp, url_prefix='/projects')
    app.register_blueprint(tasks_bp, url_prefix='/tasks')
    app.register_blueprint(stock_bp, url_prefix='/stock')
    app.register_blueprint(notif_bp, url_prefix='/notifications')
    app.register_blueprint(dash_bp, url_prefix='/dashboard')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            payload = {
                'error': {
                    'status': e.code,
                    'title': e.name,
                    'detail': e.description,
                }
            }
            return payload, e.code
        # Unhandled exception
        app.logger.exception('Unhandled exception')
        return {
            'error': {
                'status': 500,
                'title': 'Internal Server Error',
                'detail': 'Unexpected error'
            }
        }, 500

    return app


def get_workspace():
    return current_app.extensions['fieldops']


@jwt.token_in_blocklist_loader
def _token_revoked(jwt_header, jwt_payload):
    return get_workspace().sessions.is_revoked(jwt_payload['jti'])
