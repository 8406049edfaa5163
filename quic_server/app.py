"""
QuiC Flask application

Server-rendered study-material manager:
- Username/password accounts (bcrypt)
- Server-side sessions (Flask-Session, filesystem cache)
- Folders and sets stored in SQLite, scoped to their owner
"""

import logging
import os

from cachelib.file import FileSystemCache
from flask import Flask, render_template, request
from flask_cors import CORS
from flask_session import Session
from werkzeug.exceptions import HTTPException

from quic_server import db
from quic_server.config import Config, validate_config
from quic_server.errors import QuicError
from quic_server.init_db import initialize_database
from quic_server.repositories import LibraryRepository, UserRepository
from quic_server.session_store import SessionStore


def configure_logging(level):
    logging.basicConfig(level=level,
                        format='%(asctime)s %(levelname)s %(name)s %(threadName)s : %(message)s')


def _configure_sessions(app):
    # Choose a directory for session files (must be writable by the server user)
    session_dir = app.config['SESSION_FILE_DIR']
    os.makedirs(session_dir, exist_ok=True)

    app.config['SESSION_TYPE'] = 'cachelib'
    app.config['SESSION_CACHELIB'] = FileSystemCache(
        cache_dir=session_dir,
        threshold=app.config['SESSION_FILE_THRESHOLD']
    )
    # Initialize the Session extension AFTER setting the config
    Session(app)


# Form posts re-render their own page with the error message
_FORM_TEMPLATES = {
    'auth.login': 'login.html',
    'auth.register': 'register.html',
}


def _register_error_handlers(app):

    @app.errorhandler(QuicError)
    def handle_quic_error(e):
        app.logger.info(f"{request.endpoint} rejected: {e.message}")
        template = _FORM_TEMPLATES.get(request.endpoint, 'error.html')
        return render_template(template, error=True, message=e.message), e.status_code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        if isinstance(e, HTTPException):
            return e
        app.logger.exception(f"Unhandled error: {e}")
        return render_template('error.html', error=True, message=QuicError.default_message), 500


def create_app(config_class=Config, test_config=None):
    app = Flask(__name__)
    app.config.from_object(config_class)
    if test_config:
        app.config.update(test_config)
    validate_config(app.config)

    configure_logging(app.config['LOG_LEVEL'])
    app.logger.info(f"Using database: {app.config['DATABASE_PATH']}")

    _configure_sessions(app)
    CORS(app, supports_credentials=True, origins=app.config['CORS_ORIGINS'])

    db.init_app(app)
    initialize_database(app.config['DATABASE_PATH'])

    app.extensions['session_store'] = SessionStore()
    app.extensions['user_repository'] = UserRepository(
        db.get_db, bcrypt_rounds=app.config['BCRYPT_LOG_ROUNDS']
    )
    app.extensions['library_repository'] = LibraryRepository(db.get_db)

    @app.context_processor
    def inject_current_user():
        return {'current_user': app.extensions['session_store'].get_user()}

    from quic_server.routes.auth import auth_bp
    from quic_server.routes.library import library_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(library_bp)

    _register_error_handlers(app)

    return app
