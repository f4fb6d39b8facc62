# voting_backend/__main__.py

# python -m voting_backend

import logging

from voting_backend import create_app
from voting_backend.extensions import socketio

logger = logging.getLogger(__name__)


def sweep_rate_limits(app):
    service = app.extensions['election']
    interval = app.config['RATE_LIMIT_SWEEP_SECONDS']
    while True:
        socketio.sleep(interval)
        service.sweep_rate_limits()
        logger.debug("Rate limit records swept")


def main():
    app = create_app()
    socketio.start_background_task(sweep_rate_limits, app)
    logger.info("Starting election backend on %s:%s", app.config['HOST'], app.config['PORT'])
    socketio.run(
        app, host=app.config['HOST'], port=app.config['PORT'],
        allow_unsafe_werkzeug=app.config['ALLOW_UNSAFE_WERKZEUG'] or app.debug,
    )


if __name__ == '__main__':
    main()
