"""Database connection and initialization."""

from sqlalchemy import event
from sqlmodel import SQLModel, Session, create_engine

from signage.config import settings

# Import all models so SQLModel registers them
import signage.models  # noqa: F401

engine = create_engine(
    f"sqlite:///{settings.db_path}",
    echo=settings.debug,
    connect_args={"check_same_thread": False, "timeout": 15},
)


@event.listens_for(engine, "connect")
def _on_connect(dbapi_connection, connection_record):
    # Let SQLAlchemy own transaction boundaries so SAVEPOINTs work with pysqlite
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@event.listens_for(engine, "begin")
def _on_begin(conn):
    # Write lock up front: a deferred transaction that has already read cannot
    # upgrade once another writer commits, and that failure skips the busy timeout
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def init_db() -> None:
    """Create all tables."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """FastAPI dependency: yields a database session."""
    with Session(engine) as session:
        yield session
