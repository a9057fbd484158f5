#!/usr/bin/env python3
"""
Main CLI entry point for the Storefront backend server.
"""

import asyncio
import os
import sys

import click
import uvicorn

from storefront import __version__
from storefront.logging import configure_logging, get_logger

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="storefront")
def cli() -> None:
    """Storefront CLI - manage server, database, and users."""
    pass


@cli.command()
@click.option(
    "--host",
    default="0.0.0.0",
    help="Host to bind to (default: 0.0.0.0)",
)
@click.option(
    "--port",
    default=4444,
    type=int,
    help="Port to bind to (default: 4444)",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
@click.option(
    "--workers",
    default=1,
    type=int,
    help="Number of worker processes (default: 1)",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
def serve(
    host: str,
    port: int,
    reload: bool,
    workers: int,
    log_level: str,
) -> None:
    """Start the Storefront API server."""

    configure_logging(debug=(log_level == "debug"))

    logger.info(
        "Starting Storefront API server",
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=log_level,
    )

    # Worker and reload processes import the app fresh, so pass settings via env
    if log_level == "debug":
        os.environ["STOREFRONT_DEBUG"] = "true"
        os.environ["STOREFRONT_LOG_LEVEL"] = "debug"
    else:
        os.environ.setdefault("STOREFRONT_DEBUG", "false")
        os.environ.setdefault("STOREFRONT_LOG_LEVEL", log_level)

    try:
        if reload or workers > 1:
            uvicorn.run(
                "storefront.api.app:app",
                host=host,
                port=port,
                reload=reload,
                workers=(workers if not reload else 1),
                log_level=log_level,
                access_log=True,
            )
        else:
            from storefront.api.app import app

            uvicorn.run(
                app,
                host=host,
                port=port,
                log_level=log_level,
                access_log=True,
            )
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error("Server startup failed", error=str(e))
        sys.exit(1)


@cli.group()
def db() -> None:
    """Manage the database schema."""
    pass


@db.command("create")
def create_db() -> None:
    """Create all tables that do not exist yet."""
    from storefront.database import create_all_tables, get_async_engine, init_database

    configure_logging()

    async def do_create():
        init_database()
        try:
            await create_all_tables()
        finally:
            await get_async_engine().dispose()

    try:
        asyncio.run(do_create())
    except Exception as e:
        logger.error("Failed to create tables", error=str(e))
        click.echo(f"✗ Error creating tables: {e}", err=True)
        sys.exit(1)

    click.echo("✓ Database tables created")


@cli.group()
def user() -> None:
    """Manage user accounts."""
    pass


@user.command("grant")
@click.argument("email")
@click.argument("permissions", nargs=-1, required=True)
def grant_permissions(email: str, permissions: tuple[str, ...]) -> None:
    """Add PERMISSIONS to the user with EMAIL.

    Used to bootstrap the first admin, since updatePermissions itself
    requires one.
    """
    from sqlalchemy import select

    from storefront.auth.permissions import parse_permissions
    from storefront.database import get_async_engine, get_async_session, init_database
    from storefront.dbmodels import Users

    configure_logging()

    try:
        requested = parse_permissions(permissions)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="PERMISSIONS") from e

    async def do_grant() -> list[str] | None:
        init_database()
        try:
            async with get_async_session() as session:
                stmt = select(Users).where(Users.email == email.lower())
                target = (await session.execute(stmt)).scalar_one_or_none()
                if target is None:
                    return None
                merged = list(target.permissions or [])
                merged.extend(p.value for p in requested if p.value not in merged)
                target.permissions = merged
                logger.info("Permissions granted", user_id=str(target.id), permissions=merged)
                return merged
        finally:
            await get_async_engine().dispose()

    try:
        granted = asyncio.run(do_grant())
    except Exception as e:
        logger.error("Failed to grant permissions", error=str(e))
        click.echo(f"✗ Error granting permissions: {e}", err=True)
        sys.exit(1)

    if granted is None:
        click.echo(f"✗ No user found for email {email}", err=True)
        sys.exit(1)

    click.echo(f"✓ {email}: {', '.join(granted)}")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    cli()
