"""
UserRepository - users table access

Registration, credential checks and the profile summary for the current
user. Passwords are hashed with bcrypt; the username column is UNIQUE, so a
duplicate registration is detected from the constraint violation rather
than a preceding lookup.

Usage:
    repo = UserRepository(get_db)

    # Create new user
    repo.create_user('Ada', 'Lovelace', 'ada', 'password123')

    # Authenticate user (raises on failure)
    user = repo.authenticate('ada', 'password123')
    print(f"Welcome {user['first_name']}!")
"""

import logging
import sqlite3

import bcrypt

from quic_server.errors import (
    IncorrectPasswordError,
    UnknownUsernameError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from quic_server.repositories.base_repository import BaseRepository, is_unique_violation

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository):

    def __init__(self, get_connection, bcrypt_rounds=12):
        super().__init__(get_connection)
        self.bcrypt_rounds = bcrypt_rounds

    def hash_password(self, password):
        return bcrypt.hashpw(
            password.encode('utf-8'),
            bcrypt.gensalt(rounds=self.bcrypt_rounds)
        ).decode('utf-8')

    def verify_password(self, password_hash, password):
        """Verifies the provided password against the stored hash."""
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))

    def create_user(self, first_name, last_name, username, password):
        """
        Create a new user.

        Args:
            first_name (str): Given name
            last_name (str): Family name
            username (str): Username (must be unique)
            password (str): Plain text password (will be hashed)

        Returns:
            dict: Created user (without password_hash)

        Raises:
            UserAlreadyExistsError: If username already exists
        """
        password_hash = self.hash_password(password)

        try:
            user_id = self._execute_query(
                "INSERT INTO users (first_name, last_name, username, password_hash) VALUES (?, ?, ?, ?)",
                (first_name, last_name, username, password_hash),
                commit=True
            )
        except sqlite3.IntegrityError as e:
            if is_unique_violation(e):
                logger.info(f"Registration rejected, username taken: {username}")
                raise UserAlreadyExistsError()
            raise

        return {
            'user_id': user_id,
            'username': username,
            'first_name': first_name,
            'last_name': last_name
        }

    def find_by_username(self, username):
        """Returns the full user row (including password_hash) as a dict, or None."""
        row = self._execute_query(
            "SELECT user_id, first_name, last_name, username, password_hash FROM users WHERE username = ?",
            (username,),
            fetch_one=True
        )
        return dict(row) if row else None

    def authenticate(self, username, password):
        """
        Authenticate user with username and password.

        Returns:
            dict: user_id, username, first_name, last_name

        Raises:
            UnknownUsernameError: No user has this exact username
            IncorrectPasswordError: The password does not match the stored hash
        """
        user = self.find_by_username(username)
        if not user:
            raise UnknownUsernameError()

        if not self.verify_password(user.pop('password_hash'), password):
            raise IncorrectPasswordError()

        return user

    def get_profile(self, user_id):
        """
        Builds the profile summary: identity, folder/set/card counts and the
        names behind the folder and set counts.

        Raises:
            UserNotFoundError: If user_id does not resolve to a user
        """
        identity = self._execute_query(
            "SELECT user_id, first_name, last_name, username FROM users WHERE user_id = ?",
            (user_id,),
            fetch_one=True
        )
        if not identity:
            raise UserNotFoundError()

        folders = self._execute_query("""
            SELECT f.folder_name
            FROM folders f
            JOIN user_folders uf ON uf.folder_id = f.folder_id
            WHERE uf.user_id = ?
            ORDER BY f.folder_name
        """, (user_id,))

        # A set held in two of the user's folders is counted once
        sets = self._execute_query("""
            SELECT DISTINCT s.set_id, s.set_name
            FROM sets s
            JOIN folder_sets fs ON fs.set_id = s.set_id
            JOIN user_folders uf ON uf.folder_id = fs.folder_id
            WHERE uf.user_id = ?
            ORDER BY s.set_name
        """, (user_id,))

        card_count = self._execute_query("""
            SELECT COUNT(DISTINCT sc.card_id)
            FROM set_cards sc
            JOIN folder_sets fs ON fs.set_id = sc.set_id
            JOIN user_folders uf ON uf.folder_id = fs.folder_id
            WHERE uf.user_id = ?
        """, (user_id,), fetch_one=True)[0]

        profile = dict(identity)
        profile.update({
            'folder_count': len(folders),
            'folder_names': [row['folder_name'] for row in folders],
            'set_count': len(sets),
            'set_names': [row['set_name'] for row in sets],
            'card_count': card_count
        })
        return profile
