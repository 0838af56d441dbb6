"""Unit tests for database initialization."""
import unittest
import sys
import os
import sqlite3
import tempfile
import shutil
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database.init_db import get_connection, initialize_database


class TestInitDb(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = Path(self.temp_dir) / "nested" / "calc.db"

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _tables(self) -> set:
        with get_connection(self.db_path) as conn:
            return {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}

    def test_creates_schema(self):
        resolved = initialize_database(self.db_path)

        self.assertTrue(resolved.exists())
        self.assertTrue({"settings", "audit_log"} <= self._tables())

    def test_idempotent(self):
        initialize_database(self.db_path)
        with get_connection(self.db_path) as conn:
            conn.execute("INSERT INTO settings (key, value) VALUES ('unit_price', '300')")
            conn.commit()

        initialize_database(self.db_path)
        with get_connection(self.db_path) as conn:
            row = conn.execute("SELECT value FROM settings WHERE key = 'unit_price'").fetchone()
        self.assertEqual(row[0], "300")

    def test_upgrades_old_settings_table(self):
        """Test that a settings table without updated_at gains the column."""
        self.db_path.parent.mkdir(parents=True)
        conn = sqlite3.connect(self.db_path)
        conn.execute("CREATE TABLE settings (key TEXT PRIMARY KEY, value TEXT NOT NULL)")
        conn.execute("INSERT INTO settings (key, value) VALUES ('unit_name', 'kg')")
        conn.commit()
        conn.close()

        initialize_database(self.db_path)
        with get_connection(self.db_path) as conn:
            columns = {row[1] for row in conn.execute("PRAGMA table_info(settings);")}
            value = conn.execute("SELECT value FROM settings WHERE key = 'unit_name'").fetchone()[0]
        self.assertIn("updated_at", columns)
        self.assertEqual(value, "kg")


if __name__ == '__main__':
    unittest.main()
