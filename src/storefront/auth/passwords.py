"""Password hashing with bcrypt."""

from __future__ import annotations

import asyncio

import bcrypt

from ..config import settings

# bcrypt only reads the first 72 bytes and current releases refuse anything longer
MAX_PASSWORD_BYTES = 72


def password_fits(password: str) -> bool:
    return len(password.encode("utf-8")) <= MAX_PASSWORD_BYTES


def _hash(password: str, rounds: int) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def _check(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash, or the candidate is over 72 bytes
        return False


async def _run_sync(func, *args):
    """bcrypt is CPU-bound; keep it off the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


async def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash ``password`` with a fresh salt."""
    return await _run_sync(_hash, password, rounds or settings.bcrypt_rounds)


async def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored bcrypt hash."""
    return await _run_sync(_check, password, password_hash)
