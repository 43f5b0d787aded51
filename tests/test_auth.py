import pytest

from app.auth.models import User
from app.auth.service import (
    create_user,
    get_home_dir,
    hash_password,
    verify_credentials,
)
from app.shared.errors import (
    DuplicateUsername,
    InvalidCredentials,
    InvalidUsername,
    StorageFailure,
)


# --- credential store ---

def test_create_user_makes_home_and_row(db, files_root):
    u = create_user(db, "alice", hash_password("pw1"))
    assert u.id == "user_alice"
    assert (files_root / "alice").is_dir()
    assert get_home_dir(db, "user_alice") == (files_root / "alice").resolve()


def test_existing_home_dir_is_fine(db, files_root):
    (files_root / "alice").mkdir(parents=True)
    create_user(db, "alice", hash_password("pw1"))
    assert db.get(User, "user_alice") is not None


def test_duplicate_username(db):
    create_user(db, "alice", hash_password("pw1"))
    with pytest.raises(DuplicateUsername):
        create_user(db, "alice", hash_password("other"))


@pytest.mark.parametrize("name", ["", ".", "..", "a/b", "..\\x"])
def test_username_must_be_one_path_segment(db, name):
    with pytest.raises(InvalidUsername):
        create_user(db, name, hash_password("pw"))


def test_verify_credentials(db):
    create_user(db, "alice", hash_password("pw1"))
    assert verify_credentials(db, "alice", "pw1") == "user_alice"
    with pytest.raises(InvalidCredentials):
        verify_credentials(db, "alice", "wrong")
    with pytest.raises(InvalidCredentials):
        verify_credentials(db, "nobody", "pw1")


def test_legacy_hex_hash_still_verifies(db):
    create_user(db, "legacy", "pw1".encode().hex())
    assert verify_credentials(db, "legacy", "pw1") == "user_legacy"
    with pytest.raises(InvalidCredentials):
        verify_credentials(db, "legacy", "pw2")


def test_home_dir_of_unknown_user(db):
    with pytest.raises(StorageFailure):
        get_home_dir(db, "user_ghost")


# --- HTTP ---

def test_register_and_login(client):
    r = client.post("/api/register", json={"username": "alice", "password": "pw1"})
    assert r.status_code == 201
    assert r.json() == {"status": "created"}

    r = client.post("/api/login", json={"username": "alice", "password": "pw1"})
    assert r.status_code == 200
    assert r.json()["token"]

    r = client.post("/api/login", json={"username": "alice", "password": "wrong"})
    assert r.status_code == 401
    assert r.json() == {"error": "invalid credentials"}


def test_register_duplicate_is_conflict(client):
    client.post("/api/register", json={"username": "alice", "password": "pw1"})
    r = client.post("/api/register", json={"username": "alice", "password": "pw1"})
    assert r.status_code == 409
    assert "error" in r.json()


def test_register_malformed_body(client):
    r = client.post("/api/register", content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    r = client.post("/api/register", json={"username": "alice"})
    assert r.status_code == 400
    assert "error" in r.json()


def test_login_unknown_user(client):
    r = client.post("/api/login", json={"username": "ghost", "password": "pw"})
    assert r.status_code == 401


def test_login_token_expires(client, clock, login):
    headers = login()
    assert client.get("/api/files", headers=headers).status_code == 200
    clock.advance(hours=24, seconds=1)
    r = client.get("/api/files", headers=headers)
    assert r.status_code == 401


# --- gate ---

def test_gate_missing_header(client):
    r = client.get("/api/files")
    assert r.status_code == 401
    assert r.json() == {"error": "authorization required"}


@pytest.mark.parametrize("value", ["Token abc", "Bearer", "bearer abc", "Bearer a b"])
def test_gate_malformed_header(client, value):
    r = client.get("/api/files", headers={"Authorization": value})
    assert r.status_code == 401
    assert r.json() == {"error": "invalid authorization format"}


def test_gate_unknown_token(client):
    r = client.get("/api/files", headers={"Authorization": "Bearer not-a-session"})
    assert r.status_code == 401
    assert r.json()["error"].startswith("authentication failed")


def test_gate_runs_before_request_validation(client):
    r = client.get("/api/preview")
    assert r.status_code == 401
