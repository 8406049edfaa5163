import logging
import sqlite3

from flask import current_app, g

logger = logging.getLogger(__name__)


def connect(db_path):
    """Opens a connection with dictionary-like rows and foreign keys enforced."""
    conn = sqlite3.connect(db_path, timeout=5.0)
    conn.row_factory = sqlite3.Row # Return rows as dictionary-like objects
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def get_db():
    """Returns the connection bound to the current application context, opening it on first use."""
    if 'db' not in g:
        g.db = connect(current_app.config['DATABASE_PATH'])
    return g.db


def close_db(exception=None):
    """Close the database connection at the end of the request."""
    conn = g.pop('db', None)
    if conn is not None:
        conn.close()


def init_app(app):
    app.teardown_appcontext(close_db)
