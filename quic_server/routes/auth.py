from flask import Blueprint, current_app, g, redirect, render_template, url_for

from quic_server.auth import get_session_store, login_required
from quic_server.errors import UserNotFoundError
from quic_server.routes import get_request_data, require_fields, user_repository

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/')
def index():
    return redirect(url_for('auth.welcome'))


@auth_bp.route('/welcome')
def welcome():
    return render_template('welcome.html')


@auth_bp.route('/register', methods=['GET'])
def register_form():
    return render_template('register.html')


@auth_bp.route('/register', methods=['POST'])
def register():
    """Registers a new user, then sends them to the login page."""
    first_name, last_name, username, password = require_fields(
        get_request_data(), ('first_name', 'last_name', 'username', 'password'),
        keep_whitespace=('password',)
    )
    user = user_repository().create_user(first_name, last_name, username, password)

    current_app.logger.info(f"User registered: {user['username']} (ID: {user['user_id']})")
    return redirect(url_for('auth.login_form'))


@auth_bp.route('/login', methods=['GET'])
def login_form():
    return render_template('login.html')


@auth_bp.route('/login', methods=['POST'])
def login():
    """Authenticates a user and creates a session."""
    username, password = require_fields(
        get_request_data(), ('username', 'password'), keep_whitespace=('password',)
    )
    user = user_repository().authenticate(username, password)

    get_session_store().set_user(user['user_id'], user['username'])
    current_app.logger.info(f"User logged in: {user['username']} (ID: {user['user_id']})")
    return redirect(url_for('auth.home'))


@auth_bp.route('/home')
@login_required
def home():
    return render_template('home.html', username=g.username)


@auth_bp.route('/profile')
@login_required
def profile():
    try:
        profile_data = user_repository().get_profile(g.user_id)
    except UserNotFoundError:
        # Session points at a user that no longer exists; force a fresh login
        current_app.logger.warning(f"Session user {g.user_id} not found, clearing session")
        get_session_store().destroy()
        return redirect(url_for('auth.login_form'))
    return render_template('profile.html', profile=profile_data)


@auth_bp.route('/logout')
@login_required
def logout():
    get_session_store().destroy()
    current_app.logger.info(f"User logged out: {g.username}")
    return render_template('logout.html')
