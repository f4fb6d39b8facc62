# voting_backend/audit/audit_trail.py

import logging
from collections import deque

from sqlalchemy.exc import SQLAlchemyError

from voting_backend.extensions import db
from voting_backend.database.models import AuditLog
from voting_backend.exceptions import PersistenceError

logger = logging.getLogger(__name__)

# Administrative and voting actions shown on the admin panel. Every entry is persisted;
# only the most recent MAX_ENTRIES are kept in memory, newest first.

MAX_ENTRIES = 100


def entry_to_dict(entry):
    timestamp = entry.timestamp.isoformat() if entry.timestamp else None
    return {
        '_id': str(entry.id),
        'action': entry.action,
        'details': entry.details,
        'timestamp': timestamp,
    }


class AuditTrail:
    def __init__(self, max_entries=MAX_ENTRIES):
        self.entries = deque(maxlen=max_entries)

    def load(self):
        try:
            rows = (
                db.session.query(AuditLog)
                .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
                .limit(self.entries.maxlen)
                .all()
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            raise PersistenceError('load audit log', str(e))
        self.entries.clear()
        self.entries.extend(entry_to_dict(row) for row in rows)
        return len(self.entries)

    def record(self, action, details):
        try:
            entry = AuditLog(action=action, details=details)
            db.session.add(entry)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise PersistenceError(f'record audit entry {action}', str(e))
        data = entry_to_dict(entry)
        # deque(maxlen) drops the oldest entry from the right
        self.entries.appendleft(data)
        logger.debug("Audit entry %s: %s", action, details)
        return data

    def clear(self):
        self.entries.clear()

    def to_list(self):
        return list(self.entries)

    def __len__(self):
        return len(self.entries)
