from __future__ import annotations

import secrets
import time
from typing import TYPE_CHECKING

import strawberry
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ...auth.passwords import MAX_PASSWORD_BYTES, hash_password, password_fits, verify_password
from ...auth.permissions import DEFAULT_PERMISSIONS
from ...auth.session import clear_session_cookie, set_session_cookie
from ...auth.tokens import get_token_issuer
from ...config import settings
from ...database.connection import get_async_session
from ...dbmodels import Users
from ...errors import InvalidCredentials, InvalidOrExpiredToken, NotFound, ValidationFailed
from ...logging import get_logger
from ...mail import MailDeliveryError, get_mail_transport, password_reset_email
from ..access_control import get_response_from_info
from .user import user_to_graphql

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from ..types.user import SuccessMessage, User

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def now_ms() -> int:
    return int(time.time() * 1000)


def _check_new_password(password: str) -> None:
    if not password:
        raise ValidationFailed("A password is required")
    if not password_fits(password):
        raise ValidationFailed(
            f"Passwords can be at most {MAX_PASSWORD_BYTES} bytes long",
            max_bytes=MAX_PASSWORD_BYTES,
        )


async def _find_user_by_email(session: AsyncSession, email: str) -> Users:
    result = await session.execute(select(Users).where(Users.email == email))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound(f"No such user found for email {email}")
    return user


async def _start_session(info: strawberry.Info, user: User) -> None:
    """Issue a session token for ``user`` and set it as the session cookie."""
    token = await get_token_issuer().issue_token(user.id)
    set_session_cookie(get_response_from_info(info), token)


async def signup(info: strawberry.Info, email: str, name: str, password: str) -> User:
    """
    Create an account and sign the new user in.

    The email is stored lowercased. New users hold only the USER permission.
    """
    email = normalize_email(email)
    if not email:
        raise ValidationFailed("An email address is required")
    _check_new_password(password)

    password_hash = await hash_password(password)

    async with get_async_session() as session:
        existing = await session.execute(select(Users.id).where(Users.email == email))
        if existing.first() is not None:
            raise ValidationFailed(f"An account already exists for {email}")

        user = Users(
            name=name,
            email=email,
            password=password_hash,
            permissions=list(DEFAULT_PERMISSIONS),
        )
        session.add(user)
        try:
            await session.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent signup for the same email
            raise ValidationFailed(f"An account already exists for {email}") from e
        await session.refresh(user)

        created = user_to_graphql(user)

    await _start_session(info, created)
    logger.info("User signed up", user_id=str(created.id))
    return created


async def signin(info: strawberry.Info, email: str, password: str) -> User:
    email = normalize_email(email)

    async with get_async_session() as session:
        user = await _find_user_by_email(session, email)
        if not await verify_password(password, user.password):
            logger.info("Sign-in rejected", user_id=str(user.id))
            raise InvalidCredentials("Invalid Password!")
        signed_in = user_to_graphql(user)

    await _start_session(info, signed_in)
    logger.info("User signed in", user_id=str(signed_in.id))
    return signed_in


async def signout(info: strawberry.Info) -> SuccessMessage:
    from ..types.user import SuccessMessage as SuccessMessageType

    clear_session_cookie(get_response_from_info(info))
    return SuccessMessageType(message="Goodbye!")


async def request_reset(info: strawberry.Info, email: str) -> SuccessMessage:
    """
    Start the password reset flow.

    Stores a random token with a one-hour expiry and emails a reset link.
    The token is committed before the mail is sent; a delivery failure is
    logged and does not fail the mutation.
    """
    from ..types.user import SuccessMessage as SuccessMessageType

    email = normalize_email(email)
    reset_token = secrets.token_hex(settings.reset_token_bytes)
    reset_token_expiry = now_ms() + settings.reset_token_ttl_seconds * 1000

    async with get_async_session() as session:
        user = await _find_user_by_email(session, email)
        user.reset_token = reset_token
        user.reset_token_expiry = reset_token_expiry
        user_id = user.id
        recipient = user.email

    try:
        await get_mail_transport().send_mail(
            from_=settings.mail_from,
            to=recipient,
            subject="Your Password Reset",
            html=password_reset_email(reset_token),
        )
    except MailDeliveryError as e:
        logger.error("Password reset email failed", user_id=str(user_id), error=str(e))

    logger.info("Password reset requested", user_id=str(user_id))
    return SuccessMessageType(message="Thank you!")


async def reset_password(
    info: strawberry.Info, reset_token: str, password: str, confirm_password: str
) -> User:
    """
    Finish the password reset flow and sign the user in.

    The token must match and its stored expiry must not have passed.
    """
    if password != confirm_password:
        raise ValidationFailed("Your passwords don't match")
    _check_new_password(password)
    if not reset_token:
        raise InvalidOrExpiredToken("This token is either invalid or expired!")

    password_hash = await hash_password(password)

    async with get_async_session() as session:
        stmt = select(Users).where(
            Users.reset_token == reset_token,
            Users.reset_token_expiry >= now_ms(),
        )
        result = await session.execute(stmt)
        user = result.scalars().first()
        if user is None:
            raise InvalidOrExpiredToken("This token is either invalid or expired!")

        user.password = password_hash
        user.reset_token = None
        user.reset_token_expiry = None

        await session.flush()
        await session.refresh(user)

        updated = user_to_graphql(user)

    await _start_session(info, updated)
    logger.info("Password reset completed", user_id=str(updated.id))
    return updated
