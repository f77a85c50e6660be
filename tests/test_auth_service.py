"""Tests for registration, login and principal resolution."""

import pytest

from server.auth import generate_api_key, hash_password, resolve_principal, verify_password
from server.exceptions import InvalidCredentialsError, InvalidTargetError, UserAlreadyExistsError
from server.services.auth_service import AuthService


def test_password_hashing():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)


def test_api_key_format():
    key = generate_api_key()
    assert key.startswith("sd_")
    assert key != generate_api_key()


class TestAuthService:
    def test_register_and_login(self, test_db):
        service = AuthService()
        api_key, user_id = service.register_user("alice", "password123")

        assert service.validate_api_key(api_key) == user_id

        new_key, login_id = service.login_user("alice", "password123")
        assert login_id == user_id
        assert new_key != api_key
        assert service.validate_api_key(new_key) == user_id
        assert service.validate_api_key(api_key) is None

    def test_logout_revokes_key(self, test_db):
        service = AuthService()
        api_key, user_id = service.register_user("alice", "password123")
        other_key, _ = service.register_user("bob", "password123")

        service.logout_user(user_id)

        assert service.validate_api_key(api_key) is None
        assert resolve_principal(f"Bearer {api_key}") is None
        assert service.validate_api_key(other_key) is not None

        new_key, _ = service.login_user("alice", "password123")
        assert service.validate_api_key(new_key) == user_id

    def test_duplicate_registration(self, test_db):
        service = AuthService()
        service.register_user("alice", "password123")
        with pytest.raises(UserAlreadyExistsError):
            service.register_user("alice", "other")

    def test_login_wrong_password(self, test_db):
        service = AuthService()
        service.register_user("alice", "password123")
        with pytest.raises(InvalidCredentialsError):
            service.login_user("alice", "nope")

    def test_login_unknown_user(self, test_db):
        with pytest.raises(InvalidCredentialsError):
            AuthService().login_user("ghost", "password123")

    def test_resolve_usernames(self, users):
        ids = AuthService().resolve_usernames(["bob", "alice", "bob"])
        assert ids == [users["bob"], users["alice"]]

    def test_resolve_unknown_username(self, users):
        with pytest.raises(InvalidTargetError) as exc_info:
            AuthService().resolve_usernames(["bob", "ghost"])
        assert "ghost" in str(exc_info.value)

    def test_get_user(self, users):
        assert AuthService().get_user(users["bob"]).username == "bob"
        assert AuthService().get_user("ghost") is None

    def test_usernames_for(self, users):
        names = AuthService().usernames_for([users["alice"], "ghost"])
        assert names == {users["alice"]: "alice"}


class TestResolvePrincipal:
    def test_valid_bearer(self, test_db):
        api_key, user_id = AuthService().register_user("alice", "password123")
        assert resolve_principal(f"Bearer {api_key}") == user_id

    @pytest.mark.parametrize("header", [
        None,
        "",
        "Basic abc",
        "Bearer ",
        "Bearer not-a-sharedrive-key",
        "Bearer sd_00000000-0000-0000-0000-000000000000",
    ])
    def test_anonymous(self, test_db, header):
        assert resolve_principal(header) is None
