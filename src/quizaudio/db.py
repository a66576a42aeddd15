"""SQLite connection handling shared by the metadata stores."""

import sqlite3
from pathlib import Path


def get_connection(db_path: Path) -> sqlite3.Connection:
    """Open a new connection with WAL mode for concurrent access.

    Each operation opens its own connection; none is held between calls.
    """
    conn = sqlite3.connect(
        str(db_path),
        timeout=30.0,  # 30 second timeout if locked
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=30000")
    conn.execute("PRAGMA synchronous=NORMAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def placeholders(count: int) -> str:
    return ", ".join("?" for _ in range(count))
