"""Database connection and session management."""
from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool, StaticPool
from app.config import settings


def _postgres_connect_args() -> dict:
    """Bound every statement so a stuck query surfaces as a transient failure."""
    return {"options": f"-c statement_timeout={settings.db_statement_timeout_ms}"}


if settings.database_url.startswith("sqlite"):
    # Local development and tests; in-memory databases must share one connection
    engine = create_engine(
        settings.database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool if ":memory:" in settings.database_url or settings.database_url == "sqlite://" else NullPool,
    )
elif "pooler.supabase.com" in settings.database_url or settings.database_url.endswith(":6543"):
    # Serverless pooler connections (port 6543) must not be pooled again
    engine = create_engine(
        settings.database_url,
        poolclass=NullPool,
        connect_args=_postgres_connect_args(),
        echo=settings.environment == "development",
    )
else:
    engine = create_engine(
        settings.database_url,
        pool_size=20,
        max_overflow=10,
        pool_timeout=settings.db_pool_timeout_seconds,
        pool_pre_ping=True,
        connect_args=_postgres_connect_args(),
        echo=settings.environment == "development",
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
