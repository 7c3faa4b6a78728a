"""Local store database connection and initialization."""

from pathlib import Path

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from cleanquest.config import settings

# Import all models so SQLModel registers them
import cleanquest.models  # noqa: F401


def make_engine(db_path: Path) -> Engine:
    """Create a SQLite engine for one device's local store."""
    return create_engine(
        f"sqlite:///{db_path}",
        echo=settings.debug,
        connect_args={"check_same_thread": False},
    )


engine = make_engine(settings.db_path)


def init_db(target: Engine | None = None) -> None:
    """Create all tables and enable WAL mode."""
    target = target or engine
    SQLModel.metadata.create_all(target)

    with target.connect() as conn:
        conn.exec_driver_sql("PRAGMA journal_mode=WAL")
        conn.exec_driver_sql("PRAGMA synchronous=NORMAL")
        conn.commit()
