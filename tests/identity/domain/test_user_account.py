"""Tests for the UserAccount aggregate and access tokens."""

import jwt
import pytest
from protean.exceptions import ValidationError

from tianguis.identity.account import Role, UserAccount
from tianguis.identity.credentials import AuthenticatedIdentity
from tianguis.identity.tokens import ALGORITHM, InvalidToken, decode_token, issue_token, signing_secret


class TestRegistration:
    def test_email_is_normalised_and_password_hashed(self):
        account = UserAccount.register(email=" Ana@Example.MX ", name="Ana", password="s3cret-pass")
        assert account.email == "ana@example.mx"
        assert account.password_hash != "s3cret-pass"
        assert account.verify_password("s3cret-pass")
        assert not account.verify_password("wrong-pass")

    def test_short_password_rejected(self):
        with pytest.raises(ValidationError):
            UserAccount.register(email="ana@example.mx", name="Ana", password="short")

    def test_vendor_account_needs_vendor(self):
        with pytest.raises(ValidationError):
            UserAccount.register(email="v@example.mx", name="V", password="s3cret-pass", role=Role.VENDOR.value)


class TestTokens:
    def _identity(self):
        return AuthenticatedIdentity(
            user_id="u-1", email="v@example.mx", name="Rosa", role=Role.VENDOR.value, vendor_id="v-1"
        )

    def test_round_trip(self):
        assert decode_token(issue_token(self._identity())) == self._identity()

    def test_tampered_token(self):
        forged = jwt.encode({"sub": "u-1", "email": "x", "role": "admin"}, "not-the-secret", algorithm=ALGORITHM)
        with pytest.raises(InvalidToken, match="Invalid token"):
            decode_token(forged)

    def test_expired_token(self, monkeypatch):
        monkeypatch.setenv("TIANGUIS_TOKEN_TTL_MINUTES", "-1")
        token = issue_token(self._identity())
        with pytest.raises(InvalidToken, match="Token expired"):
            decode_token(token)


class TestSigningSecret:
    @pytest.fixture()
    def production(self, monkeypatch):
        monkeypatch.delenv("ENV", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.setenv("PROTEAN_ENV", "production")

    def test_production_requires_a_secret(self, production, monkeypatch):
        monkeypatch.delenv("TIANGUIS_JWT_SECRET", raising=False)
        with pytest.raises(RuntimeError, match="TIANGUIS_JWT_SECRET"):
            signing_secret()
        with pytest.raises(RuntimeError):
            issue_token(AuthenticatedIdentity(user_id="u-1", email="a@example.mx", name="A", role="super_admin"))

    def test_production_uses_configured_secret(self, production, monkeypatch):
        monkeypatch.setenv("TIANGUIS_JWT_SECRET", "s3cr3t-from-vault")
        identity = AuthenticatedIdentity(user_id="u-1", email="a@example.mx", name="A", role="admin")
        token = issue_token(identity)
        assert jwt.decode(token, "s3cr3t-from-vault", algorithms=[ALGORITHM])["role"] == "admin"
        assert decode_token(token) == identity

    def test_development_falls_back_to_a_local_secret(self, monkeypatch):
        monkeypatch.delenv("TIANGUIS_JWT_SECRET", raising=False)
        assert signing_secret()
