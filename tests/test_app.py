import pytest

from voting_backend import create_app
from voting_backend import __main__ as server
from voting_backend.extensions import db, socketio


@pytest.fixture()
def unmigrated_app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'fresh.sqlite3'}",
            "AUTO_CREATE_TABLES": False,
            "RATELIMIT_ENABLED": False,
            "ENABLE_FILE_LOGGING": False,
        }
    )
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


def test_app_starts_before_tables_exist(unmigrated_app):
    service = unmigrated_app.extensions["election"]
    assert service.get_full_state()["candidates"] == []
    assert service.get_full_state()["auditLog"] == []

    resp = unmigrated_app.test_client().get("/health")
    assert resp.status_code == 200


def test_state_loads_once_tables_are_created(unmigrated_app):
    service = unmigrated_app.extensions["election"]
    with unmigrated_app.app_context():
        db.create_all()
        service.reset()
        assert service.get_full_state()["candidates"] == []
        assert len(service.state.audit) == 0


@pytest.fixture()
def run_calls(app, monkeypatch):
    calls = []
    monkeypatch.setattr(server, "create_app", lambda: app)
    monkeypatch.setattr(socketio, "start_background_task", lambda *args, **kwargs: None)
    monkeypatch.setattr(socketio, "run", lambda app, **kwargs: calls.append(kwargs))
    return calls


def test_main_refuses_development_server_by_default(app, run_calls):
    server.main()
    assert run_calls[0]["allow_unsafe_werkzeug"] is False
    assert run_calls[0]["port"] == app.config["PORT"]


def test_main_allows_development_server_when_configured(app, run_calls):
    app.config["ALLOW_UNSAFE_WERKZEUG"] = True
    server.main()
    assert run_calls[0]["allow_unsafe_werkzeug"] is True
