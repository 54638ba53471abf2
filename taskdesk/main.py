import logging
import time

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from taskdesk.auth import AuthenticationGateway, build_provider, router as auth_router
from taskdesk.config import Settings, get_settings
from taskdesk.csrf import csrf_middleware
from taskdesk.exceptions import NotFoundError, ProviderNotConfigured, ValidationError
from taskdesk.logging_setup import setup_logging
from taskdesk.models.common import ApiInfo, ApiResponse, HealthStatus
from taskdesk.routers.session import router as session_router
from taskdesk.routers.tasks import router as tasks_router
from taskdesk.services.sessions import SessionManager, session_middleware
from taskdesk.services.task_store import TaskStore

VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse(success=False, message=message).model_dump(),
    )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    # Middleware runs in list order: CSRF rejects before the session cookie is even decoded
    api = FastAPI(
        title="Task Management API",
        version=VERSION,
        middleware=[csrf_middleware(settings), session_middleware(settings)],
    )

    sessions = SessionManager()
    api.state.settings = settings
    api.state.sessions = sessions
    api.state.task_store = TaskStore()
    api.state.auth_gateway = AuthenticationGateway(
        build_provider(settings, sessions), sessions, landing_path=settings.login_landing_path,
    )

    api.include_router(auth_router)
    api.include_router(session_router)
    api.include_router(tasks_router)

    @api.get("/")
    def root():
        return PlainTextResponse("Hello World!")

    @api.get("/home")
    def home() -> ApiResponse[ApiInfo]:
        return ApiResponse(
            success=True,
            data=ApiInfo(
                name="Task Management API",
                version=VERSION,
                description="A simple task management API for creating, reading, updating, and deleting tasks",
                endpoints={
                    "Swagger UI": "/docs",
                    "All Tasks": "/api/tasks",
                    "Health Check": "/api/health",
                    "API Info": "/home",
                    "Login": "/login",
                },
            ),
            message="Welcome to the Task Management API",
        )

    @api.get("/api/health")
    def health() -> ApiResponse[HealthStatus]:
        return ApiResponse(
            success=True,
            data=HealthStatus(status="healthy", timestamp=int(time.time() * 1000)),
            message="Service is running",
        )

    # --- Exception handlers ---

    @api.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return _error(400, str(exc))

    @api.exception_handler(RequestValidationError)
    async def request_body_error_handler(request: Request, exc: RequestValidationError):
        return _error(400, f"Invalid request body: {_describe_validation_errors(exc)}")

    @api.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(404, str(exc))

    @api.exception_handler(ProviderNotConfigured)
    async def provider_not_configured_handler(request: Request, exc: ProviderNotConfigured):
        logger.error("Login unavailable: %s", exc)
        return _error(503, str(exc))

    @api.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Internal server error")

    return api


app = create_app()


def run():
    settings = get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(
        "taskdesk.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
