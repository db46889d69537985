import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from taskapi.config import Settings, settings as default_settings
from taskapi.database import (
    SessionLocal, build_engine, build_session_factory, check_db_connection, engine,
)
from taskapi.services.auth_service import AuthService
from taskapi.services.task_service import TaskService
from taskapi.services.token_store import TokenStore
from taskapi.services.user_service import UserService
from taskapi.utils.exceptions import AppException
from taskapi.utils.security import CredentialService
from taskapi.middleware.error_handler import (
    app_exception_handler,
    validation_exception_handler,
    integrity_error_handler,
    generic_exception_handler,
)

from taskapi.api.v1 import auth
from taskapi.api.v1 import users
from taskapi.api.v1 import tasks

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="Task management API with JWT access/refresh-token authentication",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # ─── Components ───────────────────────────────────────────────────────────
    # The process-wide engine is reused unless the app points at another database
    if settings.DATABASE_URL == default_settings.DATABASE_URL:
        db_engine, session_factory = engine, SessionLocal
    else:
        db_engine = build_engine(settings)
        session_factory = build_session_factory(db_engine)

    credentials  = CredentialService(settings)
    token_store  = TokenStore()
    task_service = TaskService(batch_limit=settings.TASK_BATCH_LIMIT)

    app.state.settings        = settings
    app.state.db_engine       = db_engine
    app.state.session_factory = session_factory
    app.state.credentials     = credentials
    app.state.token_store     = token_store
    app.state.auth_service    = AuthService(credentials, token_store)
    app.state.task_service    = task_service
    app.state.user_service    = UserService(task_service)

    # ─── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    # ─── Exception Handlers ───────────────────────────────────────────────────
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # ─── Routers ──────────────────────────────────────────────────────────────
    PREFIX = "/api/v1"
    app.include_router(auth.router,  prefix=PREFIX, tags=["Auth"])
    app.include_router(users.router, prefix=PREFIX, tags=["Users"])
    app.include_router(tasks.router, prefix=PREFIX, tags=["Tasks"])

    # ─── Startup ──────────────────────────────────────────────────────────────
    @app.on_event("startup")
    def on_startup():
        ok = check_db_connection(app.state.db_engine)
        logger.info("DB connected" if ok else "DB connection FAILED")
        if ok and settings.SWEEP_TOKENS_ON_STARTUP:
            db = app.state.session_factory()
            try:
                app.state.token_store.sweep_expired(db)
                db.commit()
            except Exception as e:
                db.rollback()
                logger.error(f"Startup token sweep failed: {e}")
            finally:
                db.close()

    # ─── Health ───────────────────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok", "app": settings.APP_NAME, "version": "1.0.0"}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("taskapi.main:app", host=default_settings.APP_HOST, port=default_settings.APP_PORT,
                reload=default_settings.is_development)
