import logging
import sqlite3
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class BaseRepository:
    """Shared query helpers for repositories.

    ``get_connection`` is a zero-argument callable returning an open
    sqlite3.Connection; inside the app it is ``db.get_db``, which hands out
    one connection per request.
    """

    def __init__(self, get_connection):
        self._get_connection = get_connection

    def _execute_query(self, query, params=(), fetch_one=False, commit=False):
        """Executes a query against the database."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(query, params)
            if commit:
                conn.commit()
                return cursor.lastrowid # Return last inserted ID for INSERTs
            if fetch_one:
                return cursor.fetchone()
            return cursor.fetchall()
        except sqlite3.Error as e:
            logger.error(f"Error executing query: {query} with params {params} - {e}")
            if commit:
                conn.rollback()
            raise
        finally:
            cursor.close()

    @contextmanager
    def _transaction(self):
        """Yields a cursor; commits on success and rolls back on any error."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            yield cursor
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()


def is_unique_violation(error):
    """True when an IntegrityError comes from a UNIQUE constraint (column or trigger)."""
    return 'UNIQUE constraint failed' in str(error)
