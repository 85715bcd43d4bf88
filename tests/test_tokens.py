"""Unit tests for the token codec and password hashing helpers."""

from datetime import timedelta

import pytest

from config import Settings
from utils.hashing import create_hash, get_password_hash, set_password, verify_password
from utils.tokenJWT import InvalidTokenError, TokenCodec


@pytest.fixture
def codec():
    return TokenCodec(Settings(SECRET_KEY="unit-test-secret"))


class TestTokenCodec:
    def test_sign_and_verify_returns_payload(self, codec):
        claims = {"userObj": {"userID": "7", "name": "Jane", "role": "user"}}
        payload = codec.verify(codec.sign(claims))
        assert payload["userObj"] == claims["userObj"]

    def test_ttl_adds_expiry(self, codec):
        payload = codec.verify(codec.sign({"a": 1}, timedelta(minutes=5)))
        assert "exp" in payload

    def test_without_ttl_there_is_no_expiry(self, codec):
        assert "exp" not in codec.verify(codec.sign({"a": 1}))

    def test_expired_token_is_rejected(self, codec):
        token = codec.sign({"a": 1}, timedelta(seconds=-10))
        with pytest.raises(InvalidTokenError):
            codec.verify(token)

    def test_token_from_other_secret_is_rejected(self, codec):
        other = TokenCodec(Settings(SECRET_KEY="another-secret"))
        with pytest.raises(InvalidTokenError):
            codec.verify(other.sign({"a": 1}))

    def test_tampered_token_is_rejected(self, codec):
        token = codec.sign({"role": "user"})
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[:-2] + ("AA" if signature[-2:] != "AA" else "BB")])
        with pytest.raises(InvalidTokenError):
            codec.verify(tampered)

    @pytest.mark.parametrize("token", ["", "garbage", "logout"])
    def test_malformed_token_is_rejected(self, codec, token):
        with pytest.raises(InvalidTokenError):
            codec.verify(token)

    def test_sign_does_not_mutate_payload(self, codec):
        claims = {"a": 1}
        codec.sign(claims, timedelta(minutes=1))
        assert claims == {"a": 1}


class TestHashing:
    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = get_password_hash("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)

    def test_wrong_password_fails(self):
        assert not verify_password("wrong-one", get_password_hash("secret123"))

    def test_same_password_gets_different_salts(self):
        assert get_password_hash("secret123") != get_password_hash("secret123")

    @pytest.mark.parametrize("password,stored", [("", "x"), ("secret123", ""), ("secret123", "not-a-bcrypt-hash")])
    def test_verify_never_raises(self, password, stored):
        assert verify_password(password, stored) is False

    def test_set_password_replaces_hash(self):
        class Account:
            password_hash = None

        account = Account()
        set_password(account, "secret123")
        assert verify_password("secret123", account.password_hash)

    def test_create_hash_is_deterministic_sha256(self):
        assert create_hash("abc") == create_hash("abc")
        assert len(create_hash("abc")) == 64
        assert create_hash("abc") != create_hash("abd")
