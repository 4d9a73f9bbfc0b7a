import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from daynotes.config import DB_FILENAME, Config
from daynotes.data.errors import (
    DatabaseConnectionError,
    DirectoryResolutionError,
    SchemaError,
)
from daynotes.data.schema import SCHEMA_STATEMENTS

logger = logging.getLogger(__name__)


def open_connection(db_path: str | Path) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def connect(db_path: str | Path) -> Iterator[sqlite3.Connection]:
    """Open a connection for the duration of one operation, then close it."""
    conn = open_connection(db_path)
    try:
        yield conn
    finally:
        conn.close()


def init_database(data_dir: str | Path) -> Path:
    """Create the database file under *data_dir* and ensure the schema exists.

    Safe to call on every startup because all DDL statements use
    IF NOT EXISTS. Any failure is fatal: the caller should abort startup.

    Raises:
        DirectoryResolutionError: *data_dir* cannot be created.
        DatabaseConnectionError: the database file cannot be opened.
        SchemaError: a DDL statement failed.
    """
    app_data_dir = Path(data_dir)
    try:
        app_data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        error_msg = f"Failed to get app data directory {app_data_dir}: {exc}"
        logger.error(error_msg)
        raise DirectoryResolutionError(error_msg) from exc

    db_path = app_data_dir / DB_FILENAME

    try:
        conn = open_connection(db_path)
    except sqlite3.Error as exc:
        error_msg = f"Failed to open database connection: {exc}"
        logger.error(error_msg)
        raise DatabaseConnectionError(error_msg) from exc

    try:
        # sqlite opens lazily; touch the file so unreadable or non-database
        # files fail here rather than at the first DDL statement.
        try:
            conn.execute("PRAGMA schema_version").fetchone()
        except sqlite3.Error as exc:
            error_msg = f"Failed to open database connection: {exc}"
            logger.error(error_msg)
            raise DatabaseConnectionError(error_msg) from exc

        for i, stmt in enumerate(SCHEMA_STATEMENTS, start=1):
            try:
                conn.execute(stmt)
            except sqlite3.Error as exc:
                error_msg = f"Error executing statement #{i}: {exc}"
                logger.error(error_msg)
                raise SchemaError(error_msg) from exc
        conn.commit()
    finally:
        conn.close()

    logger.info("Database initialized at %s", db_path)
    return db_path


def init_database_from_config(config: Config) -> Path:
    try:
        app_data_dir = config.resolve_app_data_dir()
    except DirectoryResolutionError as exc:
        logger.error(str(exc))
        raise
    return init_database(app_data_dir)
