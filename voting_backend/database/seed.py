# voting_backend/database/seed.py

import json

from voting_backend.extensions import db
from voting_backend.database.models import Candidate, AuditLog
from voting_backend.security.input_validator import InputValidator

# Default candidate slate, loaded before the voting period starts

DEFAULT_CANDIDATES = [
    {
        "candidateNumber": "01",
        "imageUrl": "/images/candidate1.jpg",
        "ketua": {"name": "Sarah Johnson"},
        "wakil": {"name": "Maria Garcia"},
        "visi": ["Sustainable Development", "Social Equity", "Environmental Protection"],
        "misi": [
            "Expand renewable energy initiatives",
            "Strengthen public healthcare system",
            "Improve education funding and accessibility",
            "Promote affordable housing programs",
            "Enhance public transportation infrastructure",
        ],
    },
    {
        "candidateNumber": "02",
        "imageUrl": "/images/candidate2.jpg",
        "ketua": {"name": "David Rodriguez"},
        "wakil": {"name": "Jennifer Kim"},
        "visi": ["Economic Growth", "Environmental Protection", "Community Development"],
        "misi": [
            "Support small business development",
            "Implement green building standards",
            "Create job training programs",
            "Establish community wellness centers",
            "Develop urban green spaces and parks",
        ],
    },
    {
        "candidateNumber": "03",
        "imageUrl": "/images/candidate3.jpg",
        "ketua": {"name": "Michael Chen"},
        "wakil": {"name": "Lisa Wang"},
        "visi": ["Technology Innovation", "Digital Transformation", "Smart Governance"],
        "misi": [
            "Modernize city infrastructure with smart technology",
            "Promote digital literacy and access",
            "Foster innovation hubs and startup ecosystems",
            "Implement data-driven governance solutions",
            "Enhance cybersecurity and digital privacy protection",
        ],
    },
]


def format_candidate_number(value):
    return f"{int(value):02d}"


def build_candidate(data, validator):
    return Candidate(
        candidate_number=format_candidate_number(data["candidateNumber"]),
        image_url=data.get("imageUrl", ""),
        ketua={"name": validator.clean_text(data["ketua"]["name"], max_length=100)},
        wakil={"name": validator.clean_text(data["wakil"]["name"], max_length=100)},
        visi=[validator.clean_text(v) for v in data.get("visi", [])],
        misi=[validator.clean_text(m) for m in data.get("misi", [])],
        votes=0,
    )


def load_candidates_file(path):
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError("Candidate file must contain a JSON list")
    return data


def seed_candidates(candidates=None, reset=True):
    """Replace candidates (and, with reset, the audit trail) with the given slate."""
    validator = InputValidator()
    candidates = DEFAULT_CANDIDATES if candidates is None else candidates

    numbers = [format_candidate_number(c["candidateNumber"]) for c in candidates]
    if len(numbers) != len(set(numbers)):
        raise ValueError("Candidate numbers must be unique")

    try:
        if reset:
            db.session.query(Candidate).delete()
            db.session.query(AuditLog).delete()
        db.session.add_all(build_candidate(c, validator) for c in candidates)
        db.session.add(AuditLog(
            action="SYSTEM_INIT",
            details=f"Electronic voting system initialized with {len(candidates)} candidates",
        ))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return len(candidates)
