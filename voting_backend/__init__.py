# voting_backend/__init__.py

import logging

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from voting_backend.config import Config
from voting_backend.extensions import db, migrate, limiter, socketio

# Ensure model modules are imported so SQLAlchemy metadata is populated
# This makes models discoverable by Flask-Migrate / Alembic when running
# `flask db migrate`.
from voting_backend.database import models  # noqa: F401

# Socket.IO handlers must be registered before socketio.init_app()
from voting_backend.election import gateway

from voting_backend.audit.audit_logger import AuditLogger
from voting_backend.election.service import ElectionService
from voting_backend.exceptions import PersistenceError

logger = logging.getLogger(__name__)


def configure_logging(app):
    level = getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )
    logging.getLogger('voting_backend').setLevel(level)


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    configure_logging(app)

    # Fix proxy headers for HTTPS
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    socketio.init_app(
        app,
        cors_allowed_origins=app.config['ALLOWED_ORIGINS'],
        async_mode=app.config['SOCKETIO_ASYNC_MODE'],
    )

    security_log = AuditLogger(
        log_dir=app.config['LOG_DIR'],
        enable_file_logging=app.config['ENABLE_FILE_LOGGING'],
        signing_key_hex=app.config['AUDIT_SIGNING_KEY'] or None,
    )
    service = ElectionService(app.config, security_log=security_log)
    service.subscribe(gateway.broadcast_state)
    app.extensions['election'] = service

    from voting_backend import routes
    app.register_blueprint(routes.bp)

    from voting_backend.cli import register_commands
    register_commands(app)

    with app.app_context():
        if app.config['AUTO_CREATE_TABLES']:
            db.create_all()
        try:
            service.load_initial_state()
        except PersistenceError as e:
            # Tables are created by `flask db upgrade`; the CLI must still be able to start
            logger.error("Election state not loaded, starting empty: %s", e)

    return app
