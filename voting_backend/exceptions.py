# voting_backend/exceptions.py

# Domain errors raised inside the election service. Each carries the message shown to the booth
# or admin panel; ElectionService converts them to {"success": False, "message": ...}.


class ElectionError(Exception):
    default_message = 'The request could not be completed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class RateLimitExceededError(ElectionError):
    default_message = 'Too many requests. Please try again later'


class InvalidCredentialsError(ElectionError):
    default_message = 'Invalid credentials'


class ElectionClosedError(ElectionError):
    default_message = 'The election is closed'


class ElectionPausedError(ElectionError):
    default_message = 'The election is temporarily paused'


class RoomNotFoundError(ElectionError):
    def __init__(self, room_id):
        self.room_id = room_id
        super().__init__(f"Room with ID '{room_id}' not found")


class RoomDisabledError(ElectionError):
    default_message = 'This voting booth has been disabled by an administrator'


class CandidateNotFoundError(ElectionError):
    def __init__(self, candidate_id):
        self.candidate_id = candidate_id
        super().__init__(f"Candidate with ID '{candidate_id}' not found")


class VotingNotAllowedError(ElectionError):
    default_message = 'Voting is not currently allowed for this room'


class PersistenceError(Exception):
    """Raised when a database write or read fails; never shown to clients."""

    def __init__(self, operation, error=None):
        self.operation = operation
        detail = f' - {error}' if error else ''
        super().__init__(f'Database operation failed: {operation}{detail}')
