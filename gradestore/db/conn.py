import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from gradestore.core import config
from gradestore.core.errors import StoreUnavailable

logger = logging.getLogger(__name__)


def connect(path: Optional[str] = None) -> sqlite3.Connection:
    """Open the SQLite file (created if missing) with the project pragmas."""
    db_path = path or config.cfg.sqlite_path
    try:
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(db_path, check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL;")
    except (OSError, sqlite3.Error) as e:
        raise StoreUnavailable(f"cannot open database {db_path}: {e}") from e
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute("PRAGMA foreign_keys=ON;")
    conn.execute(f"PRAGMA busy_timeout={int(config.cfg.busy_timeout_ms)};")
    logger.debug("opened database %s", db_path)
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Commit on success, roll back and re-raise on any error."""
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    else:
        conn.commit()
