import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))


def _env_flag(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_list(name):
    value = os.getenv(name, '')
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    # Required, no defaults
    SECRET_KEY = os.getenv('SECRET_KEY')
    DATABASE_PATH = os.getenv('DATABASE_PATH')

    PORT = int(os.getenv('PORT', 3000))
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Server-side sessions (Flask-Session)
    SESSION_FILE_DIR = os.getenv('SESSION_FILE_DIR', os.path.join(basedir, 'flask_session'))
    SESSION_FILE_THRESHOLD = 500
    SESSION_PERMANENT = False
    SESSION_COOKIE_SECURE = _env_flag('SESSION_COOKIE_SECURE', True)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_PATH = '/'

    CORS_ORIGINS = _env_list('CORS_ORIGINS')

    BCRYPT_LOG_ROUNDS = int(os.getenv('BCRYPT_LOG_ROUNDS', 12))


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'test_secret_key'
    SESSION_COOKIE_SECURE = False
    BCRYPT_LOG_ROUNDS = 4
    LOG_LEVEL = 'WARNING'


def validate_config(config):
    """Fails hard when a required setting is missing."""
    if not config.get('SECRET_KEY'):
        raise ValueError("No SECRET_KEY set for Flask application")
    if not config.get('DATABASE_PATH'):
        raise ValueError("No DATABASE_PATH set for Flask application")
