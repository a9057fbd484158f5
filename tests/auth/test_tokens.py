"""
Tests for session token issuing and verification
"""

import uuid
from datetime import UTC, datetime, timedelta

import jwt
import pytest

from storefront.auth.tokens import AuthenticationError, SessionTokenIssuer, get_token_issuer
from storefront.config import settings


@pytest.fixture
def issuer():
    return SessionTokenIssuer(secret_key="test-secret", token_expiry_days=365)


class TestSessionTokenIssuer:
    @pytest.mark.asyncio
    async def test_round_trip_returns_user_id(self, issuer):
        user_id = uuid.uuid4()
        token = await issuer.issue_token(user_id)

        assert await issuer.verify_token(token) == user_id

    @pytest.mark.asyncio
    async def test_token_embeds_user_id_claim(self, issuer):
        user_id = uuid.uuid4()
        token = await issuer.issue_token(user_id)

        payload = jwt.decode(token, "test-secret", algorithms=["HS256"])
        assert payload["userId"] == str(user_id)
        assert payload["exp"] - payload["iat"] == 365 * 24 * 60 * 60

    @pytest.mark.asyncio
    async def test_wrong_secret_is_rejected(self, issuer):
        token = await issuer.issue_token(uuid.uuid4())
        other = SessionTokenIssuer(secret_key="other-secret")

        with pytest.raises(AuthenticationError):
            await other.verify_token(token)

    @pytest.mark.asyncio
    async def test_expired_token_is_rejected(self):
        issuer = SessionTokenIssuer(secret_key="test-secret", token_expiry_days=-1)
        token = await issuer.issue_token(uuid.uuid4())

        with pytest.raises(AuthenticationError):
            await issuer.verify_token(token)

    @pytest.mark.asyncio
    async def test_missing_claim_is_rejected(self, issuer):
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": "someone", "iat": now, "exp": now + timedelta(hours=1)},
            "test-secret",
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError, match="userId"):
            await issuer.verify_token(token)

    @pytest.mark.asyncio
    async def test_malformed_user_id_is_rejected(self, issuer):
        now = datetime.now(UTC)
        token = jwt.encode(
            {"userId": "not-a-uuid", "iat": now, "exp": now + timedelta(hours=1)},
            "test-secret",
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError):
            await issuer.verify_token(token)

    @pytest.mark.asyncio
    async def test_garbage_is_rejected(self, issuer):
        with pytest.raises(AuthenticationError):
            await issuer.verify_token("definitely.not.ajwt")


def test_get_token_issuer_uses_settings():
    issuer = get_token_issuer()

    assert issuer.secret_key == settings.app_secret
    assert issuer.algorithm == settings.jwt_algorithm
    assert issuer.token_expiry_days == settings.session_max_age_days
