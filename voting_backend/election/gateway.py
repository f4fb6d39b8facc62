# voting_backend/election/gateway.py

# Socket.IO events for booth terminals and admin panels. Every state change is pushed to all
# clients as a full "stateUpdate" snapshot; request handlers return their result as the ack.

import logging
from functools import wraps

from flask import current_app, request
from flask_socketio import emit

from voting_backend.extensions import socketio
from voting_backend.election.state import ElectionStatus, RoomStatus

logger = logging.getLogger(__name__)


def get_service():
    return current_app.extensions['election']


def broadcast_state(snapshot):
    socketio.emit('stateUpdate', snapshot)


def _payload_value(data, key):
    if isinstance(data, dict):
        return data.get(key)
    return None


def _room_id(data):
    # Admin panels send the bare room id; accept {"roomId": ...} as well
    if isinstance(data, dict):
        return data.get('roomId')
    return data


def admin_required(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        if current_app.config.get('ADMIN_SESSION_REQUIRED', True) and not get_service().is_admin(request.sid):
            logger.warning("Ignoring admin event %s from unverified session %s", func.__name__, request.sid)
            return None
        return func(*args, **kwargs)
    return wrapper


@socketio.on('connect')
def handle_connect(auth=None):
    logger.info("Client connected: %s", request.sid)


@socketio.on('disconnect')
def handle_disconnect(reason=None):
    logger.info("Client disconnected: %s", request.sid)
    get_service().handle_disconnect(request.sid)


@socketio.on('requestInitialState')
def handle_request_initial_state(data=None):
    state = get_service().get_full_state()
    emit('initialState', state)
    return state


@socketio.on('login')
def handle_login(data=None):
    return get_service().login(
        _payload_value(data, 'username'),
        _payload_value(data, 'password'),
        request.sid,
    )


@socketio.on('castVote')
def handle_cast_vote(data=None):
    return get_service().cast_vote(
        _payload_value(data, 'roomId'),
        _payload_value(data, 'candidateId'),
        request.sid,
    )


@socketio.on('verifyAdminPassword')
def handle_verify_admin_password(data=None):
    password = data.get('password') if isinstance(data, dict) else data
    return get_service().verify_admin_password(password, request.sid)


@socketio.on('pauseElection')
@admin_required
def handle_pause_election(data=None):
    get_service().set_election_status(ElectionStatus.PAUSED)


@socketio.on('resumeElection')
@admin_required
def handle_resume_election(data=None):
    get_service().set_election_status(ElectionStatus.RUNNING)


@socketio.on('closeElection')
@admin_required
def handle_close_election(data=None):
    get_service().set_election_status(ElectionStatus.CLOSED)


@socketio.on('disableRoom')
@admin_required
def handle_disable_room(data=None):
    get_service().set_room_status(_room_id(data), RoomStatus.DISABLED)


@socketio.on('enableRoom')
@admin_required
def handle_enable_room(data=None):
    get_service().set_room_status(_room_id(data), RoomStatus.OFFLINE)


@socketio.on('allowVote')
@admin_required
def handle_allow_vote(data=None):
    room = get_service().allow_vote(_room_id(data))
    if room is not None:
        emit('voteAllowed', to=room.socket_id)
