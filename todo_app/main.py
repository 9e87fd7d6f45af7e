import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from todo_app.config import get_settings
from todo_app.database import init_models
from todo_app.errors import AppError
from todo_app.logging_config import setup_logging
from todo_app.routers import auth_router, health_router, todo_router

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        # unmatched path or method: same answer as an unknown address
        if (exc.status_code == 404 and exc.detail == "Not Found") or exc.status_code == 405:
            return error_response(404, "Invalid address: Endpoint not found")
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        if any(err.get("loc", ("",))[0] == "path" for err in exc.errors()):
            return error_response(400, "Invalid ID format")
        return error_response(400, "Invalid request body")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return error_response(500, "Internal Server Error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    yield


def create_app(*, include_auth: bool = True, include_todos: bool = True, title: str = "Todo API") -> FastAPI:
    setup_logging(get_settings().log_level)

    app = FastAPI(title=title, lifespan=lifespan)

    if include_auth:
        app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
    if include_todos:
        app.include_router(todo_router.router, prefix="/api/todos", tags=["Todos"])
    app.include_router(health_router.router, prefix="/api/health", tags=["Health"])

    register_error_handlers(app)
    return app


app = create_app()
