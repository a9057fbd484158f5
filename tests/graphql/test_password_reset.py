"""
Tests for the password reset flow
"""

import time
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select

from storefront.auth.passwords import verify_password
from storefront.database.connection import get_async_session
from storefront.dbmodels import Users
from storefront.mail import MailDeliveryError, set_mail_transport

REQUEST_RESET = """
mutation RequestReset($email: String!) {
    requestReset(email: $email) { message }
}
"""

RESET_PASSWORD = """
mutation ResetPassword($resetToken: String!, $password: String!, $confirmPassword: String!) {
    resetPassword(resetToken: $resetToken, password: $password, confirmPassword: $confirmPassword) {
        id
        email
    }
}
"""


async def load_user(email: str) -> Users:
    async with get_async_session() as session:
        result = await session.execute(select(Users).where(Users.email == email))
        return result.scalar_one()


class TestRequestReset:
    @pytest.mark.asyncio
    async def test_stores_token_and_sends_link(self, gql, create_user, mail_outbox):
        await create_user("buyer@example.com")
        before_ms = int(time.time() * 1000)

        call = await gql(REQUEST_RESET, {"email": "buyer@example.com"})

        assert call.errors is None
        assert call.data["requestReset"] == {"message": "Thank you!"}

        user = await load_user("buyer@example.com")
        assert len(user.reset_token) == 40
        assert before_ms + 3600 * 1000 <= user.reset_token_expiry <= before_ms + 3700 * 1000

        assert len(mail_outbox) == 1
        message = mail_outbox[0]
        assert message["To"] == "buyer@example.com"
        assert message["Subject"] == "Your Password Reset"
        assert f"/reset?resetToken={user.reset_token}" in message.get_content()

    @pytest.mark.asyncio
    async def test_unknown_email(self, gql, database, mail_outbox):
        call = await gql(REQUEST_RESET, {"email": "ghost@example.com"})

        assert call.error_code == "NOT_FOUND"
        assert mail_outbox == []

    @pytest.mark.asyncio
    async def test_mail_failure_does_not_fail_mutation(self, gql, create_user):
        await create_user("buyer@example.com")
        transport = AsyncMock()
        transport.send_mail.side_effect = MailDeliveryError("smtp down")
        set_mail_transport(transport)

        try:
            call = await gql(REQUEST_RESET, {"email": "buyer@example.com"})
        finally:
            set_mail_transport(None)

        assert call.errors is None
        assert call.data["requestReset"]["message"] == "Thank you!"
        transport.send_mail.assert_awaited_once()
        # The token was committed before delivery was attempted
        user = await load_user("buyer@example.com")
        assert user.reset_token is not None


class TestResetPassword:
    @pytest.mark.asyncio
    async def test_full_flow(self, gql, create_user, mail_outbox):
        user_id, _ = await create_user("buyer@example.com", password="old")
        await gql(REQUEST_RESET, {"email": "buyer@example.com"})
        token = (await load_user("buyer@example.com")).reset_token

        call = await gql(
            RESET_PASSWORD, {"resetToken": token, "password": "new", "confirmPassword": "new"}
        )

        assert call.errors is None, call.errors
        assert call.data["resetPassword"]["id"] == str(user_id)
        assert call.session_token is not None

        user = await load_user("buyer@example.com")
        assert user.reset_token is None
        assert user.reset_token_expiry is None
        assert await verify_password("new", user.password)
        assert not await verify_password("old", user.password)

    @pytest.mark.asyncio
    async def test_token_cannot_be_reused(self, gql, create_user, mail_outbox):
        await create_user("buyer@example.com")
        await gql(REQUEST_RESET, {"email": "buyer@example.com"})
        token = (await load_user("buyer@example.com")).reset_token
        variables = {"resetToken": token, "password": "new", "confirmPassword": "new"}

        first = await gql(RESET_PASSWORD, variables)
        second = await gql(RESET_PASSWORD, variables)

        assert first.errors is None
        assert second.error_code == "INVALID_RESET_TOKEN"

    @pytest.mark.asyncio
    async def test_mismatched_confirmation(self, gql, create_user, mail_outbox):
        await create_user("buyer@example.com")
        await gql(REQUEST_RESET, {"email": "buyer@example.com"})
        token = (await load_user("buyer@example.com")).reset_token

        call = await gql(
            RESET_PASSWORD, {"resetToken": token, "password": "new", "confirmPassword": "other"}
        )

        assert call.error_code == "BAD_USER_INPUT"
        assert call.errors[0].message == "Your passwords don't match"
        assert (await load_user("buyer@example.com")).reset_token == token

    @pytest.mark.asyncio
    async def test_overlong_password_rejected(self, gql, create_user, mail_outbox):
        await create_user("buyer@example.com", password="old")
        await gql(REQUEST_RESET, {"email": "buyer@example.com"})
        token = (await load_user("buyer@example.com")).reset_token
        long_password = "\u00e9" * 40  # 80 bytes in UTF-8

        call = await gql(
            RESET_PASSWORD,
            {"resetToken": token, "password": long_password, "confirmPassword": long_password},
        )

        assert call.error_code == "BAD_USER_INPUT"
        user = await load_user("buyer@example.com")
        assert user.reset_token == token
        assert await verify_password("old", user.password)

    @pytest.mark.asyncio
    async def test_unknown_token(self, gql, database):
        call = await gql(
            RESET_PASSWORD,
            {"resetToken": "0" * 40, "password": "new", "confirmPassword": "new"},
        )

        assert call.error_code == "INVALID_RESET_TOKEN"
        assert call.errors[0].message == "This token is either invalid or expired!"
        assert call.session_token is None

    @pytest.mark.asyncio
    async def test_expired_token(self, gql, create_user):
        await create_user("buyer@example.com")
        async with get_async_session() as session:
            result = await session.execute(select(Users).where(Users.email == "buyer@example.com"))
            user = result.scalar_one()
            user.reset_token = "a" * 40
            user.reset_token_expiry = int(time.time() * 1000) - 1000

        call = await gql(
            RESET_PASSWORD, {"resetToken": "a" * 40, "password": "new", "confirmPassword": "new"}
        )

        assert call.error_code == "INVALID_RESET_TOKEN"
