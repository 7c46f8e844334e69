"""
Lovii - FastAPI Backend
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from lovii import __version__
from lovii.config import settings
from lovii.database import init_db
from lovii.errors import LoviiError
from lovii.logging import setup_logging, get_logger
from lovii.routers import auth, connect, notes, profile, tasks, widget
from lovii.services.auth import AuthService
from lovii.services.notes import NoteService
from lovii.services.profile import ProfileService
from lovii.services.tasks import TaskService
from lovii.services.widget import WidgetService

logger = get_logger('main')


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request payload"
    first = errors[0]
    field = first.get("loc", ())[-1] if first.get("loc") else None
    if first.get("type") == "missing" and field is not None:
        return f"Missing required field: {field}"
    if field is not None:
        return f"Invalid value for {field}: {first.get('msg', 'invalid')}"
    return first.get("msg", "Invalid request payload")


def register_error_handlers(app: FastAPI) -> None:
    """Every failure answers ``{"error": <message>}`` with a non-2xx status."""

    @app.exception_handler(LoviiError)
    async def _service_error_handler(request: Request, exc: LoviiError):
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def _validation_handler(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        logger.warning(f"{request.method} {request.url.path} -> 400: {message}")
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def _unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


def create_app(database_path: str | None = None) -> FastAPI:
    db_path = database_path or settings.DATABASE_PATH

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.DEBUG)
        logger.info("Starting Lovii API")

        await init_db(db_path)
        logger.info("Database initialized")

        # Initialize services
        app.state.profile_service = ProfileService(
            db_path=db_path,
            code_length=settings.PARTNER_CODE_LENGTH,
            code_max_attempts=settings.PARTNER_CODE_MAX_ATTEMPTS,
        )
        app.state.note_service = NoteService(db_path=db_path)
        app.state.task_service = TaskService(db_path=db_path)
        app.state.widget_service = WidgetService(
            profiles=app.state.profile_service,
            notes=app.state.note_service,
        )
        app.state.auth_service = AuthService(
            profiles=app.state.profile_service,
            rounds=settings.BCRYPT_ROUNDS,
        )
        logger.info("Services initialized")

        yield

        logger.info("Shutting down application")

    app = FastAPI(
        title="Lovii API",
        description="Shared notes, drawings and tasks for couples",
        version=__version__,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(profile.router, prefix="/profile", tags=["Profile"])
    app.include_router(connect.router, prefix="/connect", tags=["Partner"])
    app.include_router(notes.router, prefix="/notes", tags=["Notes"])
    app.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
    app.include_router(widget.router, prefix="/widget", tags=["Widget"])
    app.include_router(auth.router, prefix="/auth", tags=["Auth"])

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "service": "lovii",
        }

    @app.get("/")
    async def root():
        return {
            "name": "Lovii API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health"
        }

    return app
