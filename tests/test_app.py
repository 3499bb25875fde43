import pytest
from fastapi.testclient import TestClient

from conftest import make_token, make_transport
from qrbook.core.store import FileCredentialStore, MemoryCredentialStore
from qrbook.main import create_app

READ = "/protected/v1/forms/read"
INSERT = "/unprotected/v1/forms/insert"


@pytest.fixture
def store():
    return MemoryCredentialStore()


@pytest.fixture
def api(service, store):
    app = create_app(transport=make_transport(service), store=store)
    with TestClient(app) as test_client:
        yield test_client


def _login(api, service):
    service.reply("POST", "/auth/login", body={"token": make_token(exp_offset=3600), "name": "Operator"})
    return api.post("/login", json={"email": "a@b.com", "password": "pw"})


def test_health(api):
    assert api.get("/health").json() == {"status": "ok"}


def test_directory_redirects_to_login_without_session(api, service):
    res = api.get("/entry-details", follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/login"
    assert service.requests == []


def test_login_then_browse_directory(api, service):
    res = _login(api, service)
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["redirect"] == "/entry-details"
    assert body["user"] == {"name": "Operator"}

    service.reply(
        "POST",
        READ,
        body=[
            {"name": "Bob", "mobile": "222", "qr": 5},
            {"name": "Amy", "mobile": "111", "qr": 5},
            {"name": "Zoe", "mobile": "333", "qr": None},
        ],
    )
    res = api.get("/entry-details")
    assert res.status_code == 200, res.text
    data = res.json()
    assert data["count"] == 3
    assert [g["qr"] for g in data["groups"]] == [5, None]
    assert [e["name"] for e in data["groups"][0]["entries"]] == ["Amy", "Bob"]

    res = api.get("/entry-details", params={"q": "22"})
    assert [[e["name"] for e in g["entries"]] for g in res.json()["groups"]] == [["Bob"]]
    assert res.json()["total"] == 3


def test_login_failure_returns_server_message(api, service, store):
    service.reply("POST", "/auth/login", status=401, body={"message": "bad creds"})

    res = api.post("/login", json={"email": "a@b.com", "password": "wrong"})

    assert res.status_code == 401
    assert res.json()["detail"] == "bad creds"
    assert store.get("token") is None


def test_session_denied_by_service_redirects(api, service, store):
    _login(api, service)
    service.reply("POST", READ, status=403)

    res = api.get("/entry-details", follow_redirects=False)

    assert res.status_code == 303
    assert store.get("token") is None
    assert api.get("/session").json()["authenticated"] is False


def test_server_and_connectivity_errors_are_distinguishable(api, service):
    _login(api, service)
    service.reply("POST", READ, status=500, body={"message": "db down"})

    res = api.get("/entry-details")
    assert res.status_code == 502
    assert res.json()["detail"] == "Server error: db down"

    service.offline = True
    res = api.get("/entry-details")
    assert res.status_code == 503
    assert "connect" in res.json()["detail"].lower()


def test_logout(api, service, store):
    _login(api, service)
    assert api.get("/session").json()["state"] == "active"

    res = api.post("/logout")

    assert res.json() == {"ok": True, "redirect": "/login"}
    assert store.get("token") is None


def test_add_entry_from_deep_link(api, service):
    service.reply("POST", INSERT, status=201, body={"ok": True})

    res = api.post("/add/42", json={"name": "Amy", "mobile": "111"})

    assert res.status_code == 201, res.text
    assert res.json() == {"ok": True, "qrid": 42}
    assert service.last_json() == {"name": "Amy", "mobile": "111", "qrid": 42}


def test_add_entry_rejects_blank_fields(api, service):
    res = api.post("/add", json={"name": " ", "mobile": "111"})
    assert res.status_code == 422
    assert service.requests == []


def test_add_entry_with_oversized_path_segment(api, service):
    service.reply("POST", INSERT, status=201, body={"ok": True})

    res = api.post("/add/" + "9" * 5000, json={"name": "Amy", "mobile": "111"})

    assert res.status_code == 201, res.text
    assert res.json() == {"ok": True, "qrid": None}
    assert service.last_json() == {"name": "Amy", "mobile": "111", "qrid": None}


def test_redirects_come_from_requested_navigation(api, service):
    navigator = api.app.state.client.navigator

    res = api.get("/entry-details", follow_redirects=False)
    assert res.headers["location"] == "/login"
    assert navigator.history == []

    assert _login(api, service).json()["redirect"] == "/entry-details"
    assert navigator.history == []

    assert api.post("/logout").json()["redirect"] == "/login"
    assert navigator.history == []


def test_expired_session_reports_login_redirect(api, store):
    store.set("token", make_token(exp_offset=-60))

    body = api.get("/session").json()

    assert body["authenticated"] is False
    assert body["redirect"] == "/login"
    assert store.get("token") is None


def test_only_health_is_public_metadata(api):
    assert api.get("/").status_code == 404
    assert api.get("/health").status_code == 200


def test_cors_is_off_unless_configured(service, monkeypatch):
    monkeypatch.delenv("QRBOOK_CORS_ORIGINS", raising=False)
    app = create_app(transport=make_transport(service), store=MemoryCredentialStore())
    with TestClient(app) as test_client:
        res = test_client.get("/health", headers={"Origin": "http://localhost:5173"})
    assert "access-control-allow-origin" not in res.headers


def test_cors_allows_configured_origin_without_credentials(service, monkeypatch):
    monkeypatch.setenv("QRBOOK_CORS_ORIGINS", "http://localhost:5173, http://127.0.0.1:5173/")
    app = create_app(transport=make_transport(service), store=MemoryCredentialStore())
    with TestClient(app) as test_client:
        res = test_client.get("/health", headers={"Origin": "http://127.0.0.1:5173"})
    assert res.headers["access-control-allow-origin"] == "http://127.0.0.1:5173"
    assert "access-control-allow-credentials" not in res.headers


def test_file_backed_session_through_app(service, tmp_path):
    path = tmp_path / "creds.json"
    app = create_app(transport=make_transport(service), store=FileCredentialStore(path))
    with TestClient(app) as test_client:
        assert _login(test_client, service).status_code == 200
        assert FileCredentialStore(path).get("token")
        assert test_client.get("/session").json()["authenticated"] is True
        test_client.post("/logout")
    assert FileCredentialStore(path).get("token") is None
