# voting_backend/election/registries.py

from voting_backend.election.state import Room, RoomStatus, CandidateRecord


class RoomRegistry:
    """Fixed set of booths, created once from configuration and never removed."""

    def __init__(self, rooms_config):
        self._config = [(r['id'], r['name']) for r in rooms_config]
        self._rooms = {}
        self.reset()

    def reset(self):
        self._rooms = {room_id: Room(room_id, name) for room_id, name in self._config}

    def get(self, room_id):
        if not isinstance(room_id, str):
            return None
        return self._rooms.get(room_id)

    def find_by_session(self, session_id):
        if not session_id:
            return None
        for room in self._rooms.values():
            if room.socket_id == session_id:
                return room
        return None

    def __iter__(self):
        return iter(self._rooms.values())

    def __len__(self):
        return len(self._rooms)

    def to_list(self):
        return [room.to_public_dict() for room in self._rooms.values()]

    def count_by_status(self, status):
        status = RoomStatus(status)
        return sum(1 for room in self._rooms.values() if room.status == status)


class CandidateRegistry:
    """In-memory candidate list, ordered by the numeric value of the candidate number."""

    def __init__(self):
        self._candidates = []

    def load(self, models):
        records = [CandidateRecord.from_model(m) for m in models]
        self._candidates = sorted(records, key=lambda c: int(c.candidate_number))

    def clear(self):
        self._candidates = []

    def get(self, candidate_id):
        # Clients send ids as strings; the store uses integers
        key = str(candidate_id)
        for candidate in self._candidates:
            if str(candidate.id) == key:
                return candidate
        return None

    def increment(self, candidate):
        candidate.votes += 1
        return candidate.votes

    def total_votes(self):
        return sum(c.votes for c in self._candidates)

    def __iter__(self):
        return iter(self._candidates)

    def __len__(self):
        return len(self._candidates)

    def to_list(self):
        return [c.to_public_dict() for c in self._candidates]
