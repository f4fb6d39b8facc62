# voting_backend/config.py

import json
import os


def _env_flag(name, default):
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def _default_rooms(count=6):
    return [{'id': f'room{n}', 'name': f'Voting Booth {n}'} for n in range(1, count + 1)]


def _default_booth_accounts(count=6):
    # Legacy plaintext passwords; replace with `flask hash-password` output in production
    return [
        {'username': f'booth{n}', 'password': f'booth{n}MITC', 'room_id': f'room{n}'}
        for n in range(1, count + 1)
    ]


def _load_booth_accounts():
    path = os.environ.get('BOOTH_ACCOUNTS_FILE')
    if not path:
        return _default_booth_accounts()
    with open(path, 'r') as f:
        return json.load(f)


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'change-me-in-production')

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///electronic_voting_system.sqlite')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_TABLES = _env_flag('AUTO_CREATE_TABLES', 'true')

    # Admin panel password. An Argon2 hash is preferred; the plaintext value is a deprecated fallback.
    ADMIN_PASSWORD_HASH = os.environ.get('ADMIN_PASSWORD_HASH', '')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'masterkey2024')
    ADMIN_SESSION_REQUIRED = _env_flag('ADMIN_SESSION_REQUIRED', 'true')

    ROOMS = _default_rooms()
    BOOTH_ACCOUNTS = _load_booth_accounts()

    # (max attempts, window seconds) per session
    LOGIN_RATE_LIMIT = (5, 15 * 60)
    VOTE_RATE_LIMIT = (3, 5 * 60)
    ADMIN_RATE_LIMIT = (3, 15 * 60)
    RATE_LIMIT_SWEEP_SECONDS = int(os.environ.get('RATE_LIMIT_SWEEP_SECONDS', '300'))

    # Flask-Limiter, HTTP endpoints only
    RATELIMIT_DEFAULT = os.environ.get('RATELIMIT_DEFAULT', '600/hour')
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')

    ALLOWED_ORIGINS = os.environ.get(
        'ALLOWED_ORIGINS', 'http://localhost:5173,http://localhost:3000'
    ).split(',')
    SOCKETIO_ASYNC_MODE = os.environ.get('SOCKETIO_ASYNC_MODE', 'threading')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR', 'logs')
    ENABLE_FILE_LOGGING = _env_flag('ENABLE_FILE_LOGGING', 'false')
    AUDIT_SIGNING_KEY = os.environ.get('AUDIT_SIGNING_KEY', '')  # hex encoded Ed25519 seed

    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3001'))
    # Werkzeug is a development server; production runs under eventlet or gevent
    ALLOW_UNSAFE_WERKZEUG = _env_flag('ALLOW_UNSAFE_WERKZEUG', 'false')
