from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from app.core.config import settings

def _engine_kwargs(url: str) -> dict:
    """
    Connection options per backend.

    The in-memory default keeps a single shared SQLite connection, so requests
    served concurrently by the threadpool share one transaction scope. Point
    DATABASE_URL at a file (``sqlite:///./tasks.db``) or a server database for
    anything beyond a single-user or test deployment.
    """
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}

    kwargs = {"connect_args": {"check_same_thread": False}}
    # A bare sqlite:// URL is an in-memory database; every session must share one connection
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return kwargs

engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """Yield a database session for the duration of a request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def enum_values(enum_cls):
    """Store str enums by value, so the column holds e.g. ``in-progress``"""
    return [member.value for member in enum_cls]
