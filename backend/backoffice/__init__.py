from flask import Flask, current_app
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import logging

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()


def _error_payload(status: int, title: str, detail: str):
    return {
        'error': {
            'status': status,
            'title': title,
            'detail': detail,
        }
    }, status


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    from .config.settings import load_settings

    app = Flask(__name__)
    app.config.update(load_settings())

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    logging.getLogger('backoffice').setLevel(app.config['LOG_LEVEL'])
    app.logger.setLevel(app.config['LOG_LEVEL'])

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

    # Access control: compile the static matrix now so a malformed table fails at startup
    from .services.matrix import default_matrix
    from .services.override_store import PermissionOverrideStore, CachedOverrides
    from .services.access import AccessResolver
    matrix = default_matrix()
    overrides = CachedOverrides(PermissionOverrideStore(get_db, matrix), ttl=app.config['PERMISSION_CACHE_TTL'])
    app.extensions['backoffice.overrides'] = overrides
    app.extensions['backoffice.access'] = AccessResolver(matrix, overrides)

    from .routes.iam import iam_bp
    from .routes.permissions import perm_bp
    from .routes.access import access_bp
    from .routes.catalog import cat_bp
    from .routes.configurator import cfg_bp
    app.register_blueprint(iam_bp, url_prefix='/iam')
    app.register_blueprint(perm_bp, url_prefix='/permissions')
    app.register_blueprint(access_bp, url_prefix='/access')
    app.register_blueprint(cat_bp, url_prefix='/catalog')
    app.register_blueprint(cfg_bp, url_prefix='/configurator')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    from .errors import BackofficeError

    @app.errorhandler(BackofficeError)
    def handle_domain_errors(e):  # type: ignore
        return _error_payload(e.status, e.title, e.detail)

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            return _error_payload(e.code, e.name, e.description)
        app.logger.exception('Unhandled exception')
        return _error_payload(500, 'Internal Server Error', 'Unexpected error')

    return app


def get_db():
    return SessionLocal()


def get_access_resolver():
    return current_app.extensions['backoffice.access']


def get_override_store():
    return current_app.extensions['backoffice.overrides']
