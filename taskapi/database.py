from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import QueuePool, StaticPool
from taskapi.config import Settings, settings
import logging

logger = logging.getLogger(__name__)


# ─── Engine ────────────────────────────────────────────────────────────────────
def _engine_options(cfg: Settings) -> dict:
    url = cfg.DATABASE_URL
    if url.startswith("sqlite"):
        # In-memory SQLite lives inside a single connection, so every session shares it
        options = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/") == "sqlite:":
            options["poolclass"] = StaticPool
        return options
    return {
        "poolclass":     QueuePool,
        "pool_size":     cfg.DATABASE_POOL_SIZE,
        "max_overflow":  cfg.DATABASE_MAX_OVERFLOW,
        "pool_timeout":  cfg.DATABASE_POOL_TIMEOUT,
        "pool_pre_ping": True,   # Detect stale connections before using them
    }


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(cfg: Settings) -> Engine:
    eng = create_engine(cfg.DATABASE_URL, echo=cfg.DATABASE_ECHO, **_engine_options(cfg))
    if eng.dialect.name == "sqlite":
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
    return eng


# ─── Session Factory ───────────────────────────────────────────────────────────
def build_session_factory(eng: Engine) -> sessionmaker:
    return sessionmaker(
        bind=eng,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,      # Avoid DetachedInstanceError after commit
    )


engine = build_engine(settings)
SessionLocal = build_session_factory(engine)


# ─── Base Model ────────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.
    All models in taskapi/models/ should inherit from this class.
    """
    pass


# ─── Dependency Injection ──────────────────────────────────────────────────────
def get_db(request: Request):
    """
    FastAPI dependency that provides a database session per request.
    The session comes from the factory the app was built with.
    Rolls back on error and always closes the session afterwards.

    Usage:
        @router.get("/tasks")
        def list_tasks(db: Session = Depends(get_db)):
            ...
    """
    db = request.app.state.session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


# ─── Schema ────────────────────────────────────────────────────────────────────
def init_db() -> None:
    """Create all tables. Alembic owns the schema in deployed environments."""
    import taskapi.models  # noqa: F401 — registers models on Base.metadata
    Base.metadata.create_all(bind=engine)


# ─── Health Check ──────────────────────────────────────────────────────────────
def check_db_connection(eng: Engine | None = None) -> bool:
    """Verify database is reachable. Used at startup."""
    try:
        with (eng or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
