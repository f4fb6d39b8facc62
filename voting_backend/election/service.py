# voting_backend/election/service.py

# Election state machine: booth login, vote casting and admin actions over the in-memory
# ElectionState, with candidate votes and audit entries persisted through SQLAlchemy.

import hmac
import logging
import threading

from sqlalchemy.exc import SQLAlchemyError

from voting_backend.extensions import db
from voting_backend.database.models import Candidate
from voting_backend.election.state import ElectionState, ElectionStatus, RoomStatus
from voting_backend.encryption.password_hashing import PasswordHashingService
from voting_backend.security.input_validator import InputValidator
from voting_backend.security.rate_limiter import RateLimiter
from voting_backend.audit.audit_logger import AuditLogger
from voting_backend.exceptions import (
    ElectionError,
    PersistenceError,
    RateLimitExceededError,
    InvalidCredentialsError,
    ElectionClosedError,
    ElectionPausedError,
    RoomNotFoundError,
    RoomDisabledError,
    CandidateNotFoundError,
    VotingNotAllowedError,
)

logger = logging.getLogger(__name__)

ELECTION_STATUS_AUDIT = {
    ElectionStatus.PAUSED: ('ELECTION PAUSED', 'The election was globally paused.'),
    ElectionStatus.RUNNING: ('ELECTION RESUMED', 'The election was globally resumed.'),
    ElectionStatus.CLOSED: ('ELECTION CLOSED', 'The election was permanently closed. No further voting is possible.'),
}


def _declined(message):
    return {'success': False, 'message': message}


class ElectionService:
    def __init__(self, config, rate_limiter=None, validator=None, password_service=None, security_log=None):
        self.config = config
        self.state = ElectionState.from_config(config['ROOMS'], config['BOOTH_ACCOUNTS'])
        self.rate_limiter = rate_limiter or RateLimiter()
        self.validator = validator or InputValidator()
        self.password_service = password_service or PasswordHashingService(self.validator)
        self.security_log = security_log or AuditLogger(enable_file_logging=False)
        self._listeners = []
        # Actions run to completion one at a time, even under a threaded Socket.IO server
        self._lock = threading.RLock()

    # ---- observers -------------------------------------------------------

    def subscribe(self, listener):
        """Register ``listener(snapshot)``; it is called after every state change."""
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify_state_change(self):
        snapshot = self.get_full_state()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("State change listener %r failed", listener)

    # ---- state -----------------------------------------------------------

    def load_initial_state(self):
        with self._lock:
            try:
                candidates = db.session.query(Candidate).all()
            except SQLAlchemyError as e:
                db.session.rollback()
                raise PersistenceError('load candidates', str(e))
            self.state.candidates.load(candidates)
            audit_count = self.state.audit.load()
            logger.info(
                "Initial election state loaded: %d candidates, %d audit entries",
                len(self.state.candidates), audit_count,
            )
            self._notify_state_change()

    def reset(self, reload=True):
        with self._lock:
            self.state.reset()
            self.rate_limiter.reset()
            if reload:
                self.load_initial_state()

    def sweep_rate_limits(self):
        with self._lock:
            self.rate_limiter.cleanup()

    def get_full_state(self):
        with self._lock:
            return {
                'electionStatus': self.state.election_status.value,
                'rooms': self.state.rooms.to_list(),
                'candidates': self.state.candidates.to_list(),
                'auditLog': self.state.audit.to_list(),
            }

    def get_results(self):
        with self._lock:
            total = self.state.candidates.total_votes()
            results = []
            for candidate in self.state.candidates:
                share = (candidate.votes / total * 100) if total > 0 else 0
                results.append({
                    'id': candidate.id,
                    'candidateNumber': candidate.candidate_number,
                    'name': candidate.display_name,
                    'votes': candidate.votes,
                    'percent': round(share, 2),
                })
            return {
                'electionStatus': self.state.election_status.value,
                'totalVotes': total,
                'results': results,
            }

    def get_room(self, room_id):
        return self.state.rooms.get(room_id)

    def is_admin(self, session_id):
        return session_id in self.state.admin_sessions

    @property
    def election_status(self):
        return self.state.election_status

    def _log_action(self, action, details):
        return self.state.audit.record(action, details)

    def _check_rate_limit(self, kind, session_id, limit_key):
        max_requests, window_seconds = self.config[limit_key]
        identifier = f'{kind}_{session_id or "unknown"}'
        return self.rate_limiter.is_rate_limited(identifier, max_requests, window_seconds)

    # ---- booth login -----------------------------------------------------

    def login(self, username, password, session_id):
        with self._lock:
            try:
                return self._login(username, password, session_id)
            except ElectionError as e:
                return _declined(e.message)
            except Exception:
                logger.exception("Unexpected error during login (session %s)", session_id)
                return _declined('An unexpected error occurred during login.')

    def _login(self, username, password, session_id):
        if self._check_rate_limit('login', session_id, 'LOGIN_RATE_LIMIT'):
            self._log_action('LOGIN_RATE_LIMITED', f'Rate limit exceeded for session: {session_id}')
            self.security_log.log_security_event(
                'Login rate limit exceeded', {'session_id': session_id}, 'medium', session_id
            )
            raise RateLimitExceededError('Too many login attempts. Please try again later.')

        username_check = self.validator.validate_username(username)
        if not username_check.valid:
            self.security_log.log_security_event(
                'Invalid username format in login attempt',
                {'username': self.validator.sanitize_input(username), 'error': username_check.error},
                'low', session_id,
            )
            raise InvalidCredentialsError(username_check.error)

        username = self.validator.sanitize_input(username)
        password = self.validator.sanitize_input(password)

        if self.state.election_status == ElectionStatus.CLOSED:
            self.security_log.log_security_event(
                'Login attempt during closed election', {'username': username}, 'medium', session_id
            )
            raise ElectionClosedError()
        if self.state.election_status == ElectionStatus.PAUSED:
            logger.info("Login attempt by %s during paused election", username)
            raise ElectionPausedError()

        account = self.state.find_account(username)
        if account is None:
            self._log_action('LOGIN_FAILED', f'Failed login attempt for username: {username}')
            self.security_log.log_security_event(
                'Login attempt with non-existent username', {'username': username}, 'medium', session_id
            )
            raise InvalidCredentialsError()

        if not self._verify_booth_password(account, password):
            self._log_action('LOGIN_FAILED', f'Failed login attempt for username: {username}')
            self.security_log.log_security_event(
                'Login attempt with invalid password', {'username': username}, 'high', session_id
            )
            raise InvalidCredentialsError()

        room = self.state.rooms.get(account.room_id)
        if room is None:
            logger.error("Room configuration error: room %s not found for user %s", account.room_id, username)
            raise RoomNotFoundError(account.room_id)

        if room.status == RoomStatus.DISABLED:
            self.security_log.log_security_event(
                'Login attempt to disabled room',
                {'username': username, 'room_id': room.id, 'room_name': room.name},
                'medium', session_id,
            )
            raise RoomDisabledError()

        if room.socket_id:
            logger.warning(
                'Room "%s" already has an active session %s; replacing it with %s',
                room.name, room.socket_id, session_id,
            )

        self._log_action('LOGIN_SUCCESS', f'Room "{room.name}" logged in successfully')

        room.socket_id = session_id
        # A reconnecting booth keeps VOTING_ALLOWED / PAUSED; only an offline booth starts waiting
        if room.status == RoomStatus.OFFLINE:
            room.status = RoomStatus.WAITING

        self.security_log.log_audit_event(
            'LOGIN_SUCCESS', 'Room', {'room_id': room.id, 'room_name': room.name, 'username': username}, session_id
        )
        logger.info('Room "%s" logged in successfully', room.name)
        self._notify_state_change()
        return {'success': True, 'room': {'id': room.id, 'name': room.name}}

    def _verify_booth_password(self, account, password):
        if self.password_service.is_hash(account.password):
            return self.password_service.verify_password(password, account.password)
        # Deprecated: plaintext booth passwords are only accepted until they are migrated to hashes
        logger.warning(
            "User %s is using a plain text password. Migrate it with `flask hash-password`.", account.username
        )
        return hmac.compare_digest(account.password.encode(), password.encode())

    # ---- voting ----------------------------------------------------------

    def cast_vote(self, room_id, candidate_id, session_id):
        with self._lock:
            try:
                return self._cast_vote(room_id, candidate_id, session_id)
            except ElectionError as e:
                return _declined(e.message)
            except Exception:
                logger.exception("Unexpected error while casting vote (room %s, session %s)", room_id, session_id)
                return _declined('An unexpected error occurred while casting the vote.')

    def _cast_vote(self, room_id, candidate_id, session_id):
        if self._check_rate_limit('vote', session_id, 'VOTE_RATE_LIMIT'):
            self._log_action('VOTE_RATE_LIMITED', f'Rate limit exceeded for room: {room_id}')
            self.security_log.log_security_event(
                'Vote rate limit exceeded', {'room_id': room_id, 'session_id': session_id}, 'medium', session_id
            )
            raise RateLimitExceededError('Too many vote attempts. Please wait before trying again.')

        room = self.state.rooms.get(room_id)
        if room is None:
            logger.error("Vote attempt for non-existent room %s", room_id)
            raise RoomNotFoundError(room_id)

        if not session_id or room.socket_id != session_id:
            self.security_log.log_security_event(
                'Unauthorized vote attempt',
                {'room_id': room_id, 'expected_session': room.socket_id, 'actual_session': session_id},
                'high', session_id,
            )
            raise VotingNotAllowedError('Unauthorized vote attempt.')

        if room.status != RoomStatus.VOTING_ALLOWED:
            logger.warning("Vote attempt in room %s while status is %s", room_id, room.status.value)
            raise VotingNotAllowedError(f'Room is not in voting mode. Current status: {room.status.value}')

        candidate = self.state.candidates.get(candidate_id)
        if candidate is None:
            logger.error("Vote attempt for invalid candidate %s", candidate_id)
            raise CandidateNotFoundError(candidate_id)

        # Store first so a failed write leaves memory untouched
        self._persist_vote(candidate.id)
        self.state.candidates.increment(candidate)
        # One vote per VOTING_ALLOWED activation
        room.status = RoomStatus.WAITING

        self._log_action('VOTE_CAST', f'Room "{room.name}" cast a vote.')
        self.security_log.log_audit_event('VOTE_CAST', 'Vote', {'room_id': room.id, 'room_name': room.name}, session_id)
        logger.info('Room "%s" cast a vote', room.name)
        self._notify_state_change()
        return {'success': True, 'message': 'Vote cast successfully!'}

    def _persist_vote(self, candidate_id):
        try:
            stored = db.session.get(Candidate, candidate_id)
            if stored is None:
                logger.warning("Candidate %s is loaded in memory but missing from the store", candidate_id)
                return
            stored.votes = (stored.votes or 0) + 1
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise PersistenceError(f'record vote for candidate {candidate_id}', str(e))

    # ---- admin actions ---------------------------------------------------

    def verify_admin_password(self, password, session_id=None):
        with self._lock:
            try:
                return self._verify_admin_password(password, session_id)
            except Exception:
                logger.exception("Unexpected error during admin verification (session %s)", session_id)
                return _declined('An unexpected error occurred during admin verification.')

    def _verify_admin_password(self, password, session_id):
        if self._check_rate_limit('admin', session_id, 'ADMIN_RATE_LIMIT'):
            self._log_action('ADMIN_RATE_LIMITED', f'Admin rate limit exceeded for session: {session_id}')
            return _declined('Too many admin attempts. Please try again later.')

        password = self.validator.sanitize_input(password)
        password_hash = self.config.get('ADMIN_PASSWORD_HASH')
        if self.password_service.is_hash(password_hash):
            valid = self.password_service.verify_password(password, password_hash)
        else:
            # Deprecated plaintext fallback
            logger.warning("Admin is using a plain text password. Set ADMIN_PASSWORD_HASH instead.")
            legacy = self.config.get('ADMIN_PASSWORD') or ''
            valid = bool(legacy) and hmac.compare_digest(legacy.encode(), password.encode())

        if valid:
            self._log_action('ADMIN_LOGIN_SUCCESS', 'Admin authentication successful')
            if session_id:
                self.state.admin_sessions.add(session_id)
            return {'success': True}

        self._log_action('ADMIN_LOGIN_FAILED', 'Failed admin authentication attempt')
        self.security_log.log_security_event(
            'Failed admin authentication', {'session_id': session_id}, 'medium', session_id
        )
        return _declined('Invalid admin password.')

    def set_room_status(self, room_id, status):
        """Overwrite a room's status. Returns False when the room does not exist."""
        status = RoomStatus(status)
        with self._lock:
            room = self.state.rooms.get(room_id)
            if room is None:
                logger.warning("Status change requested for unknown room %s", room_id)
                return False

            old_status = room.status
            try:
                if status == RoomStatus.DISABLED:
                    self._log_action('BOOTH DISABLED', f'Voting Booth "{room.name}" was disabled.')
                elif status == RoomStatus.OFFLINE and old_status == RoomStatus.DISABLED:
                    self._log_action('BOOTH ENABLED', f'Voting Booth "{room.name}" was enabled.')
            except PersistenceError:
                logger.exception("Could not change status of room %s", room_id)
                return False

            room.status = status
            logger.info('Room "%s" status %s -> %s', room.name, old_status.value, status.value)
            self._notify_state_change()
            return True

    def allow_vote(self, room_id):
        """Open one voting window for a logged-in booth. Returns the room, or None if refused."""
        with self._lock:
            room = self.state.rooms.get(room_id)
            if room is None or not room.socket_id:
                logger.warning("Cannot allow vote for room %s: no active booth session", room_id)
                return None
            if self.state.election_status != ElectionStatus.RUNNING:
                logger.warning("Cannot allow vote for room %s: election is %s", room_id, self.state.election_status.value)
                return None
            if room.status in (RoomStatus.DISABLED, RoomStatus.OFFLINE):
                logger.warning("Cannot allow vote for room %s in status %s", room_id, room.status.value)
                return None
            self.set_room_status(room_id, RoomStatus.VOTING_ALLOWED)
            return room

    def set_election_status(self, status):
        """Change the global status. Returns True only when the status actually changed."""
        status = ElectionStatus(status)
        with self._lock:
            current = self.state.election_status
            if current == status:
                return False
            if current == ElectionStatus.CLOSED:
                logger.warning("Refusing to change election status from CLOSED to %s", status.value)
                return False

            action, details = ELECTION_STATUS_AUDIT[status]
            try:
                self._log_action(action, details)
            except PersistenceError:
                logger.exception("Could not change election status to %s", status.value)
                return False

            self.state.election_status = status
            logger.info("Election status %s -> %s", current.value, status.value)
            self._notify_state_change()
            return True

    def handle_disconnect(self, session_id):
        with self._lock:
            self.state.admin_sessions.discard(session_id)
            room = self.state.rooms.find_by_session(session_id)
            if room is None:
                return False
            # OFFLINE also clears vote_start_time
            room.status = RoomStatus.OFFLINE
            room.socket_id = None
            logger.info('Room "%s" disconnected', room.name)
            self._notify_state_change()
            return True
