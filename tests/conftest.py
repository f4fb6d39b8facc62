import pytest

from voting_backend import create_app
from voting_backend.extensions import db
from voting_backend.database.seed import seed_candidates

ADMIN_PASSWORD = "masterkey2024"


@pytest.fixture()
def app(tmp_path):
    db_file = tmp_path / "test.sqlite3"
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_file}",
            "RATELIMIT_ENABLED": False,
            "LOG_DIR": str(tmp_path / "logs"),
            "ENABLE_FILE_LOGGING": False,
            "ADMIN_PASSWORD_HASH": "",
            "ADMIN_PASSWORD": ADMIN_PASSWORD,
            "ADMIN_SESSION_REQUIRED": True,
        }
    )

    with app.app_context():
        seed_candidates()
        app.extensions["election"].reset()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def service(app):
    return app.extensions["election"]


@pytest.fixture()
def candidate_id(service):
    """Id of the first seeded candidate, as booths send it (a string)."""
    return str(next(iter(service.state.candidates)).id)


@pytest.fixture()
def client(app):
    return app.test_client()
