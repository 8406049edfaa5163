from functools import wraps

from flask import current_app, g, redirect, url_for


def get_session_store():
    return current_app.extensions['session_store']


def login_required(f):
    """Redirects anonymous requests to the landing page; otherwise exposes g.user_id / g.username."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = get_session_store().get_user()
        if user is None:
            return redirect(url_for('auth.welcome'))
        g.user_id = user['user_id']
        g.username = user['username']
        return f(*args, **kwargs)
    return decorated_function
