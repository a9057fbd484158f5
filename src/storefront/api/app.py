"""
Main FastAPI application for the Storefront backend
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import settings
from ..database import init_database
from ..database.connection import check_database_connection
from ..logging import configure_logging, get_logger
from ..middleware import LoggingContextMiddleware

# Configure logging before creating logger
configure_logging(debug=settings.debug)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Storefront API...")
    init_database()
    logger.info("Database initialized")

    if settings.environment.lower() in ("production", "prod") and settings.app_secret in (
        "",
        "change-me-in-production",
    ):
        logger.error("Refusing to start in production with the default app secret")
        raise RuntimeError("STOREFRONT_APP_SECRET must be set in production")

    yield

    logger.info("Shutting down Storefront API...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Storefront API",
        description="GraphQL backend for the storefront",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(LoggingContextMiddleware)

    # Credentials are required for the session cookie to cross origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():  # pyright: ignore [reportUnusedFunction]
        """Health check endpoint."""
        ok, error = await check_database_connection()
        if not ok:
            return JSONResponse(
                status_code=503,
                content={"status": "unhealthy", "version": __version__, "database": error},
            )
        return {"status": "healthy", "version": __version__}

    from ..graphql.schema import create_graphql_router, validate_schema

    # Fail fast on a broken schema rather than on the first request
    logger.info("Validating GraphQL schema...")
    validate_schema()

    app.include_router(create_graphql_router(), prefix="")
    logger.info("GraphQL endpoint initialized successfully", endpoint="/graphql")

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
