from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from tagform.config.env_config import settings
from tagform.utils.logger_utils import log_info

DATABASE_URL = settings.database_url


def build_engine(url: str, echo: bool = False):
    """Create an engine; SQLite gets a shared connection and enforced foreign keys"""
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(url, echo=echo, pool_pre_ping=True)


engine = build_engine(DATABASE_URL, echo=settings.DB_ECHO)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

log_info(context="DATABASE", message=f"Database engine ready ({engine.url.get_backend_name()})")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
