"""FastAPI application for the user portal"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from portal import __version__
from portal.auth.passwords import hash_password
from portal.auth.session_store import SessionStore
from portal.services.database import create_db_engine
from portal.services.user_directory import UserDirectory
from portal.utils.config import Settings, load_settings
from portal.utils.exceptions import PortalError
from portal.utils.logger import get_logger, setup_logger

from .api import auth_router, router as api_router

logger = get_logger(__name__)


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    content = {"success": False, "message": str(exc)}
    if exc.detail:
        content["error"] = exc.detail
    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder({
            "success": False,
            "message": "Invalid request",
            "errors": exc.errors(),
        }),
    )


def initialize_directory(directory: UserDirectory, settings: Settings) -> None:
    """Create the schema and seed the admin user.

    Failures are logged and swallowed: the server keeps running and
    individual directory operations may fail later.
    """
    try:
        directory.init_schema()
    except Exception as e:
        logger.exception("Database initialization error", error=str(e))
        logger.error("Server will continue but database operations may fail")
        return

    seed = settings.admin
    if not seed.is_complete():
        logger.warning("Admin seed identity incomplete, skipping admin creation")
        return
    try:
        directory.ensure_seed_admin(
            seed.username,
            hash_password(seed.password, settings.auth.password_scheme),
            seed.email,
        )
    except Exception as e:
        logger.exception("Error creating admin user", username=seed.username, error=str(e))


def create_app(
    settings: Optional[Settings] = None,
    user_directory: Optional[UserDirectory] = None,
    session_store: Optional[SessionStore] = None,
) -> FastAPI:
    """Build the portal app. Collaborators default to ones built from settings."""
    settings = settings or load_settings()

    setup_logger(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        file_path=settings.logging.file_path,
        max_bytes=settings.logging.max_bytes,
        backup_count=settings.logging.backup_count,
    )

    if user_directory is None:
        engine = create_db_engine(settings.database.url, echo=settings.database.echo)
        user_directory = UserDirectory(engine)

    app = FastAPI(
        title=settings.app.name,
        description="User authentication and admin user management",
        version=__version__,
    )
    app.state.settings = settings
    app.state.user_directory = user_directory
    app.state.session_store = session_store or SessionStore()

    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(auth_router)
    app.include_router(api_router)

    @app.on_event("startup")
    async def startup_event():
        """Prepare the user directory on startup"""
        logger.info(
            "Starting portal",
            app_name=settings.app.name,
            environment=settings.app.environment,
        )
        await run_in_threadpool(initialize_directory, app.state.user_directory, settings)
        logger.info("Portal startup completed")

    return app
