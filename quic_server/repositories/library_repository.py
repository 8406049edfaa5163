import logging
import sqlite3

from quic_server.errors import FolderAlreadyExistsError, FolderNotFoundError, SetAlreadyExistsError
from quic_server.repositories.base_repository import BaseRepository, is_unique_violation

logger = logging.getLogger(__name__)


class LibraryRepository(BaseRepository):
    """Folders and sets, always scoped to the owning user through user_folders."""

    def list_folders(self, user_id):
        """Retrieves all folders owned by user_id, sorted by name."""
        rows = self._execute_query("""
            SELECT f.folder_id, f.folder_name
            FROM folders f
            JOIN user_folders uf ON uf.folder_id = f.folder_id
            WHERE uf.user_id = ?
            ORDER BY f.folder_name
        """, (user_id,))
        return [dict(row) for row in rows]

    def create_folder(self, user_id, folder_name):
        """Creates a folder and its ownership row in one transaction.

        Raises FolderAlreadyExistsError if the user already owns a folder
        with this name.
        """
        try:
            with self._transaction() as cursor:
                cursor.execute("INSERT INTO folders (folder_name) VALUES (?)", (folder_name,))
                folder_id = cursor.lastrowid
                cursor.execute(
                    "INSERT INTO user_folders (user_id, folder_id) VALUES (?, ?)",
                    (user_id, folder_id)
                )
        except sqlite3.IntegrityError as e:
            if is_unique_violation(e):
                logger.info(f"Duplicate folder '{folder_name}' rejected for user {user_id}")
                raise FolderAlreadyExistsError()
            raise

        return {'folder_id': folder_id, 'folder_name': folder_name}

    def list_sets(self, user_id, folder_id):
        """Sets in folder_id, sorted by name. Empty when the user does not own the folder."""
        rows = self._execute_query("""
            SELECT s.set_id, s.set_name, s.set_description
            FROM sets s
            JOIN folder_sets fs ON fs.set_id = s.set_id
            JOIN user_folders uf ON uf.folder_id = fs.folder_id
            WHERE fs.folder_id = ? AND uf.user_id = ?
            ORDER BY s.set_name
        """, (folder_id, user_id))
        return [dict(row) for row in rows]

    def create_set(self, user_id, folder_id, set_name, set_description=''):
        """Creates a set inside one of the user's folders.

        Raises:
            FolderNotFoundError: folder_id is not a folder owned by user_id
            SetAlreadyExistsError: the folder already holds a set with this name
        """
        try:
            with self._transaction() as cursor:
                cursor.execute(
                    "INSERT INTO sets (set_name, set_description) VALUES (?, ?)",
                    (set_name, set_description)
                )
                set_id = cursor.lastrowid
                cursor.execute("""
                    INSERT INTO folder_sets (folder_id, set_id)
                    SELECT folder_id, ?
                    FROM user_folders
                    WHERE folder_id = ? AND user_id = ?
                """, (set_id, folder_id, user_id))
                if cursor.rowcount == 0:
                    raise FolderNotFoundError()
        except sqlite3.IntegrityError as e:
            if is_unique_violation(e):
                logger.info(f"Duplicate set '{set_name}' rejected in folder {folder_id}")
                raise SetAlreadyExistsError()
            raise

        return {
            'set_id': set_id,
            'set_name': set_name,
            'set_description': set_description,
            'folder_id': folder_id
        }
