from flask import Flask, current_app
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import logging
import os

from .db import Database
from .errors import DomainError

load_dotenv()

jwt = JWTManager()

EXTENSION_KEY = 'franchise.db'


def _error_body(status: int, title: str, detail: str, code: Optional[str] = None):
    body = {'status': status, 'title': title, 'detail': detail}
    if code:
        body['code'] = code
    return {'error': body}, status


def create_app(config: Optional[Dict[str, Any]] = None):
    app = Flask(__name__)

    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    app.config['DATABASE_URL'] = os.getenv('DATABASE_URL', 'sqlite:///dev.db')
    app.config['ADMIN_SECRET'] = os.getenv('ADMIN_SECRET', '')
    app.config['DEPOSIT_BANK_NAME'] = os.getenv('DEPOSIT_BANK_NAME', '')
    app.config['DEPOSIT_ACCOUNT_NO'] = os.getenv('DEPOSIT_ACCOUNT_NO', '')
    app.config['DEPOSIT_ACCOUNT_HOLDER'] = os.getenv('DEPOSIT_ACCOUNT_HOLDER', '')
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')
    app.config['SQL_ECHO'] = os.getenv('SQL_ECHO', '') in ('1', 'true', 'yes')

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))
    logging.getLogger('franchise').setLevel(app.logger.level)

    # Database handle lives as long as the app
    db = Database(app.config['DATABASE_URL'], echo=app.config['SQL_ECHO'])
    app.extensions[EXTENSION_KEY] = db

    @app.teardown_appcontext
    def _remove_session(exc):
        db.remove()

    jwt.init_app(app)

    from .routes.auth import auth_bp
    from .routes.catalog import cat_bp
    from .routes.orders import orders_bp
    from .routes.wallet import wallet_bp
    from .routes.head import head_bp
    from .routes.admin import admin_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(cat_bp)
    app.register_blueprint(orders_bp, url_prefix='/orders')
    app.register_blueprint(wallet_bp, url_prefix='/wallet')
    app.register_blueprint(head_bp, url_prefix='/head')
    app.register_blueprint(admin_bp, url_prefix='/admin')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    # Missing / broken tokens all get the same answer
    @jwt.unauthorized_loader
    def _missing_token(reason):
        return _error_body(401, 'Unauthorized', 'Authorization required', 'UNAUTHORIZED')

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return _error_body(401, 'Unauthorized', 'Authorization required', 'UNAUTHORIZED')

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return _error_body(401, 'Unauthorized', 'Authorization required', 'UNAUTHORIZED')

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return {'error': e.to_dict()}, e.status

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            return _error_body(e.code, e.name, e.description)
        # Unhandled exception; the unit of work has already rolled back
        app.logger.exception('Unhandled exception')
        return _error_body(500, 'Internal Server Error', 'Unexpected error')

    from .openapi import build_openapi_spec

    @app.route('/openapi.json')
    def openapi_spec():
        return build_openapi_spec()

    @app.route('/docs')
    def docs_index():
        # Lightweight HTML referencing Redoc CDN (no local install) for quick browsing
        return (
            "<!DOCTYPE html><html><head><title>API Docs</title>"
            "<link rel=\"stylesheet\" href=\"https://cdn.jsdelivr.net/npm/redoc@next/bundles/redoc.standalone.css\" />"
            "</head><body><redoc spec-url='/openapi.json'></redoc>"
            "<script src='https://cdn.jsdelivr.net/npm/redoc@next/bundles/redoc.standalone.js'></script>"
            "</body></html>"
        )

    return app


def get_database(app: Optional[Flask] = None) -> Database:
    return (app or current_app).extensions[EXTENSION_KEY]


def get_db():
    return get_database().session()
