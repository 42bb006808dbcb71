from flask import Flask
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import logging
import os

from .errors import WorkshopError, Unauthorized
from .logging_config import configure_logging

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()
logger = logging.getLogger(__name__)


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)

    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret-change-me-in-production-0000')
    app.config['DATABASE_URL'] = os.getenv('DATABASE_URL', 'sqlite:///dev.db')
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    configure_logging(app.config['LOG_LEVEL'])

    # Database
    db_url = app.config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all sessions
        db_engine = create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        db_engine = create_engine(db_url, echo=False, future=True)
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    jwt.init_app(app)

    from .routes.receptions import rcp_bp
    from .routes.catalog import cat_bp
    from .routes.users import usr_bp
    from .routes.reports import rpt_bp
    app.register_blueprint(rcp_bp, url_prefix='/api')
    app.register_blueprint(cat_bp, url_prefix='/api')
    app.register_blueprint(usr_bp, url_prefix='/api/users')
    app.register_blueprint(rpt_bp, url_prefix='/api/reports')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    @app.errorhandler(WorkshopError)
    def handle_workshop_error(e: WorkshopError):
        get_db().rollback()
        return e.to_payload(), e.status_code

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
        logger.exception('Unhandled exception')
        get_db().rollback()
        return {
            'error': {
                'status': 500,
                'title': 'Internal Server Error',
                'detail': 'Unexpected error'
            }
        }, 500

    return app


@jwt.unauthorized_loader
@jwt.invalid_token_loader
def _missing_or_bad_token(reason: str):
    return Unauthorized(reason).to_payload(), 401


@jwt.expired_token_loader
def _expired_token(jwt_header, jwt_payload):
    return Unauthorized('Token has expired').to_payload(), 401


def get_db():
    return SessionLocal()
