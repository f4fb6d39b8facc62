# voting_backend/database/models.py

from datetime import datetime, timezone

from voting_backend.extensions import db

# Persisted store: candidate records and the full audit trail


def _utcnow():
    return datetime.now(timezone.utc)


class Candidate(db.Model):
    __tablename__ = 'candidates'
    id = db.Column(db.Integer, primary_key=True)
    candidate_number = db.Column(db.String(8), unique=True, nullable=False)  # zero-padded, e.g. "01"
    image_url = db.Column(db.String(500), nullable=False, default='')
    ketua = db.Column(db.JSON, nullable=False)  # {"name": ...} lead candidate
    wakil = db.Column(db.JSON, nullable=False)  # {"name": ...} running mate
    visi = db.Column(db.JSON, nullable=False, default=list)
    misi = db.Column(db.JSON, nullable=False, default=list)
    votes = db.Column(db.Integer, nullable=False, default=0)

    def __repr__(self):
        return f'<Candidate {self.candidate_number} ({self.votes} votes)>'


class AuditLog(db.Model):
    __tablename__ = 'audit_logs'
    id = db.Column(db.Integer, primary_key=True)
    action = db.Column(db.String(64), nullable=False)
    details = db.Column(db.Text, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, default=_utcnow)

    def __repr__(self):
        return f'<AuditLog {self.id} {self.action}>'
