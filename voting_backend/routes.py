# voting_backend/routes.py

# HTTP surface: health probe, state snapshot and live results for the results screen

import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from voting_backend.extensions import db

bp = Blueprint('api', __name__)


def _check_db():
    try:
        db.session.execute(text('SELECT 1'))
        return {'ok': True, 'detail': 'database ok'}
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Health check database probe failed: {str(e)}")
        return {'ok': False, 'error': 'database unavailable'}


@bp.get('/health')
def health():
    service = current_app.extensions['election']
    database = _check_db()
    res = {
        'db': database,
        'election_status': service.election_status.value,
        'timestamp': int(time.time()),
        'overall_ok': database['ok'],
    }
    code = 200 if res['overall_ok'] else 503
    return jsonify(res), code


@bp.get('/api/state')
def state():
    return jsonify(current_app.extensions['election'].get_full_state())


@bp.get('/api/results')
def results():
    return jsonify(current_app.extensions['election'].get_results())
