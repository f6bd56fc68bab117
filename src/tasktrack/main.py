from __future__ import annotations

import logging
import sys
from typing import Any, Iterable, Mapping, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import ApiError, AuthenticationError, InternalError
from .passwords import PasswordHasher
from .repositories import get_repositories
from .routers import todos as todos_router
from .routers import users as users_router
from .settings import DEFAULT_TOKEN_SECRET, Settings, get_settings
from .tokens import TokenService

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "users", "description": "Registration and login."},
    {
        "name": "todos",
        "description": "Create and query the caller's todos with search, sorting and pagination.",
    },
]


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s  %(levelname)-8s  %(name)s - %(message)s",
        stream=sys.stdout,
    )


def _format_validation_errors(errors: Iterable[Mapping[str, Any]]) -> str:
    """
    Flatten pydantic error entries into "field: reason; ..." for the error body.
    """
    parts = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        msg = str(err.get("msg", "invalid value"))
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=headers)

    # Global exception handlers for consistent JSON on validation errors
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Report request validation errors as 400 {"error": "<field>: <reason>"}.
        """
        return JSONResponse(status_code=400, content={"error": _format_validation_errors(exc.errors())})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        err = InternalError()
        return JSONResponse(status_code=err.status_code, content={"error": err.message})


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application with its stores, token service and password hasher.

    Args:
        settings: Configuration to use; read from the environment when omitted.

    Returns:
        A FastAPI app whose components are available on ``app.state``.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    if settings.token_secret == DEFAULT_TOKEN_SECRET:
        logger.warning("TOKEN_SECRET is not set; using the insecure development default")

    app = FastAPI(
        title="Task Tracker",
        description="Authenticated API for registering users and managing personal todos.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )

    users, todos = get_repositories(settings)
    app.state.settings = settings
    app.state.users = users
    app.state.todos = todos
    app.state.tokens = TokenService(settings.token_secret, settings.token_ttl_seconds)
    app.state.hasher = PasswordHasher(settings.bcrypt_rounds)

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "backend": settings.persistence_backend}

    app.include_router(users_router.router)
    app.include_router(todos_router.router)

    logger.info("Application ready (backend=%s)", settings.persistence_backend)
    return app


app = create_app()
