"""
Password hashing and token tests.
"""
import jwt
import pytest

from vendorhub.services.auth_service import AuthService


@pytest.fixture
def service():
    return AuthService(secret="unit-test-secret", bcrypt_rounds=4)


class TestPasswords:
    def test_hash_and_verify(self, service):
        hashed = service.hash_password("s3cret!")
        assert hashed != "s3cret!"
        assert service.verify_password("s3cret!", hashed)

    def test_wrong_password(self, service):
        hashed = service.hash_password("s3cret!")
        assert not service.verify_password("other", hashed)

    def test_hashes_are_salted(self, service):
        assert service.hash_password("same") != service.hash_password("same")

    @pytest.mark.parametrize("stored", [None, "", "not-a-bcrypt-hash"])
    def test_missing_or_malformed_hash_never_matches(self, service, stored):
        assert not service.verify_password("anything", stored)


class TestTokens:
    def test_admin_token_claims(self, service):
        token = service.create_admin_token("abc", "root@example.com", "super_admin")
        payload = service.decode_token(token)
        assert payload["id"] == "abc"
        assert payload["email"] == "root@example.com"
        assert payload["role"] == "super_admin"
        assert payload["exp"] > payload["iat"]

    def test_user_token_claims(self, service):
        payload = service.decode_token(service.create_user_token("u1"))
        assert payload["userId"] == "u1"
        assert "id" not in payload

    def test_token_from_other_secret_rejected(self, service):
        token = AuthService(secret="another-secret", bcrypt_rounds=4).create_user_token("u1")
        with pytest.raises(jwt.InvalidTokenError):
            service.decode_token(token)

    def test_expired_token_rejected(self, service):
        token = jwt.encode({"userId": "u1", "exp": 1}, "unit-test-secret", algorithm="HS256")
        with pytest.raises(jwt.ExpiredSignatureError):
            service.decode_token(token)
