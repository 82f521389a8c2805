import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from mangum import Mangum
from starlette.exceptions import HTTPException as StarletteHTTPException

from partner_oauth import containers
from partner_oauth.core.exception_handlers import (
    handle_base_api_exception,
    handle_http_exception,
    handle_unexpected_error,
    handle_validation_error,
)
from partner_oauth.core.exceptions import BaseAPIException
from partner_oauth.core.logging_middleware import LoggingMiddleware
from partner_oauth.core.session import SessionMiddleware
from partner_oauth.logging_config import init_logging
from partner_oauth.routers import api_router, auth_router, health_router

load_dotenv()

container = containers.Container()
settings = container.config.config()

init_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

DEFAULT_STATIC_DIR = Path(__file__).resolve().parent / "static"


def log_startup_banner() -> None:
    base_url = settings.APP_BASE_URL.rstrip("/")
    logger.info(f"{settings.APP_NAME} running at {base_url}")
    logger.info(
        "Setup checklist: "
        "1. Copy .env.example to .env and configure your credentials; "
        "2. Create an OAuth application in your Clerk Dashboard; "
        f"3. Add {settings.redirect_uri} as a redirect URI"
    )
    if not settings.ECAIR_CLERK_DOMAIN or not settings.CLERK_OAUTH_CLIENT_ID:
        logger.warning("ECAIR_CLERK_DOMAIN / CLERK_OAUTH_CLIENT_ID are not configured")


@asynccontextmanager
async def lifespan(app: FastAPI):
    log_startup_banner()
    yield
    await app.container.repositories.session_repository().close()  # type: ignore


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
app.container = container  # type: ignore

app.add_middleware(
    SessionMiddleware,
    settings=settings,
    repository_factory=lambda: app.container.repositories.session_repository(),  # type: ignore
)
app.add_middleware(LoggingMiddleware)

app.add_exception_handler(BaseAPIException, handle_base_api_exception)
app.add_exception_handler(StarletteHTTPException, handle_http_exception)
app.add_exception_handler(RequestValidationError, handle_validation_error)
app.add_exception_handler(Exception, handle_unexpected_error)

app.include_router(health_router.router)
app.include_router(auth_router.router)
app.include_router(api_router.router)

# Landing page and error view; registered last so API routes take precedence
app.mount(
    "/",
    StaticFiles(directory=settings.STATIC_DIR or DEFAULT_STATIC_DIR, html=True),
    name="static",
)

handler = Mangum(app)


def run() -> None:
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
