# voting_backend/election/state.py

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from voting_backend.audit.audit_trail import AuditTrail


class ElectionStatus(str, Enum):
    RUNNING = 'RUNNING'
    PAUSED = 'PAUSED'
    CLOSED = 'CLOSED'


class RoomStatus(str, Enum):
    OFFLINE = 'OFFLINE'
    WAITING = 'WAITING'
    VOTING_ALLOWED = 'VOTING_ALLOWED'
    PAUSED = 'PAUSED'
    DISABLED = 'DISABLED'


def _now_ms():
    return int(time.time() * 1000)


class Room:
    """A physical voting booth.

    ``vote_start_time`` is maintained by the ``status`` setter: it is stamped when the room
    enters VOTING_ALLOWED and cleared on any other status, so it is set exactly while voting
    is allowed.
    """

    def __init__(self, room_id, name, status=RoomStatus.OFFLINE):
        self.id = room_id
        self.name = name
        self.socket_id = None
        self.vote_start_time = None
        self._status = RoomStatus.OFFLINE
        self.status = status

    @property
    def status(self):
        return self._status

    @status.setter
    def status(self, value):
        value = RoomStatus(value)
        if value == RoomStatus.VOTING_ALLOWED:
            self.vote_start_time = _now_ms()
        else:
            self.vote_start_time = None
        self._status = value

    def to_public_dict(self):
        data = {'id': self.id, 'name': self.name, 'status': self.status.value}
        if self.vote_start_time is not None:
            data['voteStartTime'] = self.vote_start_time
        return data

    def __repr__(self):
        return f'<Room {self.id} {self.status.value}>'


@dataclass
class CandidateRecord:
    id: int
    candidate_number: str
    ketua_name: str
    wakil_name: str
    visi: List[str] = field(default_factory=list)
    misi: List[str] = field(default_factory=list)
    image_url: str = ''
    votes: int = 0

    @classmethod
    def from_model(cls, candidate):
        return cls(
            id=candidate.id,
            candidate_number=candidate.candidate_number,
            ketua_name=(candidate.ketua or {}).get('name', ''),
            wakil_name=(candidate.wakil or {}).get('name', ''),
            visi=list(candidate.visi or []),
            misi=list(candidate.misi or []),
            image_url=candidate.image_url or '',
            votes=candidate.votes or 0,
        )

    @property
    def display_name(self):
        return f'{self.ketua_name} & {self.wakil_name}'

    def to_public_dict(self):
        return {
            'id': self.id,
            '_id': str(self.id),
            'candidateNumber': self.candidate_number,
            'imageUrl': self.image_url,
            'ketua': {'name': self.ketua_name},
            'wakil': {'name': self.wakil_name},
            'visi': list(self.visi),
            'misi': list(self.misi),
            'votes': self.votes,
        }


@dataclass(frozen=True)
class BoothAccount:
    username: str
    password: str  # Argon2 hash, or deprecated plaintext
    room_id: str

    @classmethod
    def from_config(cls, entry):
        return cls(
            username=entry['username'],
            password=entry['password'],
            room_id=entry.get('room_id') or entry['roomId'],
        )


@dataclass
class ElectionState:
    """Everything the election service owns in memory. Built from app config; see reset()."""

    rooms: 'RoomRegistry'
    candidates: 'CandidateRegistry'
    accounts: dict
    election_status: ElectionStatus = ElectionStatus.RUNNING
    admin_sessions: set = field(default_factory=set)
    audit: AuditTrail = field(default_factory=AuditTrail)

    @classmethod
    def from_config(cls, rooms_config, accounts_config):
        from voting_backend.election.registries import RoomRegistry, CandidateRegistry

        accounts = {}
        for entry in accounts_config:
            account = BoothAccount.from_config(entry)
            accounts[account.username.lower()] = account
        return cls(
            rooms=RoomRegistry(rooms_config),
            candidates=CandidateRegistry(),
            accounts=accounts,
        )

    def find_account(self, username) -> Optional[BoothAccount]:
        return self.accounts.get(username.lower())

    def reset(self):
        self.election_status = ElectionStatus.RUNNING
        self.rooms.reset()
        self.candidates.clear()
        self.admin_sessions.clear()
        self.audit.clear()
