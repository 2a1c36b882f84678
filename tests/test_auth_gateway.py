"""Unit tests for auth/credentials.py, auth/sessions.py and auth/gateway.py.

Covers:
- bcrypt hash/verify round trip; malformed hashes verify as False
- register: length rules, username normalization, duplicate -> Conflict, role "user"
- login: uniform "Invalid credentials" for every failure kind
- sessions: snapshot identity, fixed TTL expiry, ids hashed at rest
- logout is idempotent; current_identity never reads the users table
"""

import pytest
from sqlalchemy import text

from auth import gateway
from auth.credentials import authenticate_user, hash_password, verify_password
from auth.models import ANONYMOUS, ROLE_USER, User
from auth.sessions import SessionStore, hash_session_id
from auth.store import UserStore
from core.errors import Conflict, Unauthorized, ValidationError

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def users():
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def sessions():
    store = SessionStore("sqlite:///:memory:", ttl_seconds=3600)
    yield store
    store.close()


# ---------------------------------------------------------------------------
# Credential verifier
# ---------------------------------------------------------------------------


class TestCredentials:
    def test_hash_then_verify(self):
        hashed = hash_password("s3cret-pw")
        assert hashed != "s3cret-pw"
        assert verify_password("s3cret-pw", hashed)
        assert not verify_password("wrong", hashed)

    def test_malformed_hash_is_false(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False
        assert verify_password("anything", "") is False

    def test_authenticate_unknown_user_returns_none(self, users):
        assert authenticate_user(users, "ghost", "whatever") is None


# ---------------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------------


class TestRegister:
    def test_register_normalizes_and_defaults_role(self, users):
        user = gateway.register_user(users, "  Dave ", "password1")
        assert user.username == "dave"
        assert user.role == ROLE_USER
        assert user.created_at
        assert verify_password("password1", user.hashed_password)

    @pytest.mark.parametrize(
        "username, password, message",
        [
            ("ab", "password1", "Username must be at least 3 chars"),
            ("   ab   ", "password1", "Username must be at least 3 chars"),
            (None, "password1", "Username must be at least 3 chars"),
            ("dave", "12345", "Password must be at least 6 chars"),
            ("dave", None, "Password must be at least 6 chars"),
        ],
    )
    def test_register_validation(self, users, username, password, message):
        with pytest.raises(ValidationError, match=message):
            gateway.register_user(users, username, password)

    def test_duplicate_username_is_conflict_case_insensitively(self, users):
        gateway.register_user(users, "erin", "password1")
        with pytest.raises(Conflict):
            gateway.register_user(users, "ERIN", "password2")


# ---------------------------------------------------------------------------
# Login / logout / identity
# ---------------------------------------------------------------------------


class TestLogin:
    def test_register_then_login_yields_user_session(self, users, sessions):
        gateway.register_user(users, "frank", "password1")
        session_id, user = gateway.login(users, sessions, " FRANK ", "password1")
        identity = gateway.current_identity(sessions, session_id)
        assert identity.user_id == user.id
        assert identity.username == "frank"
        assert identity.role == ROLE_USER

    @pytest.mark.parametrize(
        "username, password",
        [
            ("grace", "wrong-password"),
            ("nobody", "password1"),
            ("", "password1"),
            ("grace", ""),
            (None, None),
            (["grace"], "password1"),
            ("grace", 12345678),
            (True, True),
        ],
    )
    def test_every_failure_is_invalid_credentials(self, users, sessions, username, password):
        gateway.register_user(users, "grace", "password1")
        with pytest.raises(Unauthorized) as exc_info:
            gateway.login(users, sessions, username, password)
        assert exc_info.value.message == "Invalid credentials"

    def test_each_login_gets_its_own_session(self, users, sessions):
        gateway.register_user(users, "heidi", "password1")
        first, _ = gateway.login(users, sessions, "heidi", "password1")
        second, _ = gateway.login(users, sessions, "heidi", "password1")
        assert first != second
        assert not gateway.current_identity(sessions, first).is_anonymous
        assert not gateway.current_identity(sessions, second).is_anonymous

    def test_logout_is_idempotent(self, users, sessions):
        gateway.register_user(users, "ivan", "password1")
        session_id, _ = gateway.login(users, sessions, "ivan", "password1")
        gateway.logout(sessions, session_id)
        gateway.logout(sessions, session_id)
        gateway.logout(sessions, None)
        assert gateway.current_identity(sessions, session_id) is ANONYMOUS

    def test_identity_is_a_login_time_snapshot(self, users, sessions):
        """A role change in the users table is invisible until the next login."""
        gateway.register_user(users, "judy", "password1")
        session_id, user = gateway.login(users, sessions, "judy", "password1")
        with users.engine.connect() as conn:
            conn.execute(text("UPDATE users SET role = 'admin' WHERE id = :id"), {"id": user.id})
            conn.commit()
        assert gateway.current_identity(sessions, session_id).role == ROLE_USER

    def test_unknown_or_missing_session_is_anonymous(self, sessions):
        assert gateway.current_identity(sessions, None) is ANONYMOUS
        assert gateway.current_identity(sessions, "made-up") is ANONYMOUS


# ---------------------------------------------------------------------------
# Session store
# ---------------------------------------------------------------------------


class TestSessionStore:
    def _user(self):
        return User(id=7, username="kate", hashed_password="x", role=ROLE_USER)

    def test_raw_id_is_not_stored(self, sessions):
        raw_id = sessions.create(self._user())
        with sessions.engine.connect() as conn:
            stored = [row[0] for row in conn.execute(text("SELECT id_hash FROM sessions"))]
        assert raw_id not in stored
        assert hash_session_id(raw_id) in stored

    def test_expired_session_is_gone(self):
        store = SessionStore("sqlite:///:memory:", ttl_seconds=0)
        try:
            raw_id = store.create(self._user())
            assert store.get(raw_id) is None
            assert store.destroy(raw_id) is False
        finally:
            store.close()

    def test_purge_expired_removes_only_expired(self):
        store = SessionStore("sqlite:///:memory:", ttl_seconds=0)
        try:
            store.create(self._user())
            store.create(self._user())
            store.ttl = 3600
            live = store.create(self._user())
            assert store.purge_expired() == 2
            assert store.get(live) is not None
        finally:
            store.close()

    def test_stored_role_outside_enum_reads_as_user(self, sessions):
        raw_id = sessions.create(User(id=8, username="leo", hashed_password="x", role="root"))
        assert sessions.get(raw_id).role == ROLE_USER
