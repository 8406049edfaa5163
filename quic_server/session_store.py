"""
Session store for the Session Guard.

Wraps whatever mapping holds the per-client session (by default the
server-side Flask-Session session) behind three operations, so handlers never
touch the global session object directly:

    store = SessionStore()
    store.set_user(user_id, username)   # after a successful login
    store.get_user()                    # {'user_id': ..., 'username': ...} or None
    store.destroy()                     # logout

Tests can inject any mutable mapping via ``backend``. Logging in rotates the
session id through ``regenerate`` so an id issued before login never becomes
an authenticated one.
"""

from typing import Any, Callable, Dict, MutableMapping, Optional

from flask import current_app, session


def _flask_session() -> MutableMapping:
    return session


def _regenerate_flask_session() -> None:
    interface = current_app.session_interface
    if hasattr(interface, 'regenerate'):
        interface.regenerate(session)


def _keep_session_id() -> None:
    pass


class SessionStore:
    """Reads and writes the authenticated identity keyed by the client's session id."""

    USER_ID_KEY = 'user_id'
    USERNAME_KEY = 'username'

    def __init__(self, backend: Optional[Callable[[], MutableMapping]] = None,
                 regenerate: Optional[Callable[[], None]] = None):
        if backend is None:
            self._backend = _flask_session
            self._regenerate = regenerate or _regenerate_flask_session
        else:
            self._backend = backend
            self._regenerate = regenerate or _keep_session_id

    def get_user(self) -> Optional[Dict[str, Any]]:
        """
        Returns the logged-in identity, or None when the session carries none.

        A session holding a user_id without a username (or vice versa) is
        treated as unauthenticated.
        """
        data = self._backend()
        user_id = data.get(self.USER_ID_KEY)
        username = data.get(self.USERNAME_KEY)
        if user_id is None or username is None:
            return None
        return {'user_id': user_id, 'username': username}

    def set_user(self, user_id: int, username: str) -> None:
        self._regenerate()
        data = self._backend()
        data[self.USER_ID_KEY] = user_id
        data[self.USERNAME_KEY] = username

    def destroy(self) -> None:
        """Drops everything stored for this session."""
        self._backend().clear()
