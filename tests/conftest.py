"""
Shared pytest fixtures and configuration for all tests.
"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from email.message import EmailMessage
from http.cookies import SimpleCookie
from pathlib import Path
from typing import Any
from uuid import UUID

import pytest
import pytest_asyncio
from starlette.requests import Request
from starlette.responses import Response

from storefront.config import settings


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch: pytest.MonkeyPatch) -> None:
    """Use the cheapest bcrypt cost so hashing does not dominate test time."""
    monkeypatch.setattr(settings, "bcrypt_rounds", 4)


@pytest_asyncio.fixture(scope="function")
async def database(tmp_path: Path) -> AsyncGenerator[str, None]:
    """Point the shared connection pool at a fresh SQLite database with all tables."""
    from storefront.database.connection import (
        create_all_tables,
        get_async_engine,
        init_database,
        reset_database,
    )

    dsn = f"sqlite:///{tmp_path / 'storefront.db'}"
    reset_database()
    init_database(dsn, force_reinit=True)
    await create_all_tables()

    yield dsn

    await get_async_engine().dispose()
    reset_database()


class CapturingMailTransport:
    """Keep outgoing messages in memory so tests can read them back."""

    def __init__(self) -> None:
        self.outbox: list[EmailMessage] = []

    async def send_mail(self, *, from_: str, to: str, subject: str, html: str) -> None:
        from storefront.mail import SMTPMailTransport

        self.outbox.append(SMTPMailTransport.build_message(from_=from_, to=to, subject=subject, html=html))


@pytest.fixture
def mail_outbox() -> Generator[list[EmailMessage], None, None]:
    """Capture outgoing mail in memory instead of sending it."""
    from storefront.mail import set_mail_transport

    transport = CapturingMailTransport()
    set_mail_transport(transport)
    yield transport.outbox
    set_mail_transport(None)


def make_request(token: str | None = None) -> Request:
    """Build a bare POST /graphql request, optionally carrying a session cookie."""
    headers = []
    if token:
        headers.append((b"cookie", f"{settings.session_cookie_name}={token}".encode()))
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/graphql",
        "headers": headers,
        "query_string": b"",
    }
    return Request(scope)


def session_cookie(response: Response) -> SimpleCookie | None:
    """Return the parsed session Set-Cookie header on ``response``, if any."""
    for header in response.headers.getlist("set-cookie"):
        cookie: SimpleCookie = SimpleCookie()
        cookie.load(header)
        if settings.session_cookie_name in cookie:
            return cookie
    return None


class GraphQLCall:
    """Outcome of one schema execution: the result plus the HTTP response it wrote to."""

    def __init__(self, result: Any, response: Response):
        self.result = result
        self.response = response

    @property
    def data(self) -> dict[str, Any] | None:
        return self.result.data

    @property
    def errors(self) -> list[Any] | None:
        return self.result.errors

    @property
    def error_code(self) -> str | None:
        if not self.result.errors:
            return None
        return (self.result.errors[0].extensions or {}).get("code")

    @property
    def session_token(self) -> str | None:
        cookie = session_cookie(self.response)
        if cookie is None:
            return None
        return cookie[settings.session_cookie_name].value or None


@pytest.fixture
def gql() -> Callable[..., Awaitable[GraphQLCall]]:
    """Execute a GraphQL document against the schema with a fresh request context."""
    from storefront.graphql.schema import schema

    async def execute(
        query: str, variables: dict[str, Any] | None = None, token: str | None = None
    ) -> GraphQLCall:
        response = Response()
        context = {"request": make_request(token), "response": response}
        result = await schema.execute(query, variable_values=variables, context_value=context)
        return GraphQLCall(result, response)

    return execute


class UserFactory:
    """Insert users directly and hand back a valid session token for each."""

    async def __call__(
        self,
        email: str = "shopper@example.com",
        password: str = "hunter22",
        name: str = "Shopper",
        permissions: list[str] | None = None,
    ) -> tuple[UUID, str]:
        from storefront.auth.passwords import hash_password
        from storefront.auth.tokens import get_token_issuer
        from storefront.database.connection import get_async_session
        from storefront.dbmodels import Users

        async with get_async_session() as session:
            user = Users(
                name=name,
                email=email,
                password=await hash_password(password),
                permissions=permissions if permissions is not None else ["USER"],
            )
            session.add(user)
            await session.flush()
            user_id = user.id

        token = await get_token_issuer().issue_token(user_id)
        return user_id, token


@pytest.fixture
def create_user(database: str) -> UserFactory:
    return UserFactory()


# Test markers
def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
