"""
Database engine and sessions.

Settings come from the environment (a .env file is loaded first):
    DATABASE_URL  SQLAlchemy URL, default sqlite:///./workshops.db
    SQL_ECHO      "true"/"1"/"yes" to log every statement
"""

import os
from pathlib import Path
from typing import Any, Dict, Generator, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///./workshops.db"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def sqlite_file_path(database_url: str) -> Optional[Path]:
    """File backing a SQLite URL, or None for in-memory and non-SQLite URLs."""
    if not database_url.startswith("sqlite") or ":memory:" in database_url:
        return None
    return Path(database_url.split(":///", 1)[1])


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create the engine, making sure a SQLite file's directory exists."""
    connect_args: Dict[str, Any] = {}
    if database_url.startswith("sqlite"):
        # Sessions are handed to FastAPI worker threads
        connect_args["check_same_thread"] = False

    db_file = sqlite_file_path(database_url)
    if db_file is not None:
        db_file.parent.mkdir(parents=True, exist_ok=True)

    return create_engine(database_url, echo=echo, connect_args=connect_args)


DATABASE_URL = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
engine: Engine = build_engine(DATABASE_URL, echo=_env_flag("SQL_ECHO"))


def get_session() -> Generator[Session, None, None]:
    """Get database session"""
    with Session(engine) as session:
        yield session


def init_db() -> None:
    """Create every workshop planner table that does not exist yet"""
    # Importing the package registers all table models with SQLModel metadata
    import workshop_planner.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
