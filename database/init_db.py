"""SQLite schema initialization for the unit price calculator."""
from pathlib import Path
import sqlite3

DB_PATH = Path(__file__).with_name("calculator.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS audit_log (
    audit_id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    action TEXT NOT NULL,
    table_name TEXT,
    record_key TEXT,
    old_values TEXT,
    new_values TEXT
);
"""


def _ensure_settings_columns(conn: sqlite3.Connection) -> None:
    """Add the updated_at column to settings tables created by older builds."""
    existing_columns = {row[1] for row in conn.execute("PRAGMA table_info(settings);")}
    if "updated_at" not in existing_columns:
        conn.execute("ALTER TABLE settings ADD COLUMN updated_at TEXT")


def get_connection(db_path: Path | None = None) -> sqlite3.Connection:
    """Return a SQLite connection to the calculator database."""
    resolved = Path(db_path) if db_path else DB_PATH
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(resolved)


def initialize_database(db_path: Path | None = None) -> Path:
    """Create required tables if they are missing and return the database path."""
    resolved = Path(db_path) if db_path else DB_PATH
    with get_connection(resolved) as conn:
        conn.executescript(SCHEMA)
        _ensure_settings_columns(conn)
    return resolved.resolve()
