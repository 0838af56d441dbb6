"""Audit logging for changes to the calculator settings."""
from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional

from database.init_db import get_connection

logger = logging.getLogger(__name__)


class AuditLogger:
    """Records who-changed-what entries in the audit_log table."""

    def log_action(self,
                   action: str,
                   table_name: Optional[str] = None,
                   record_key: Optional[str] = None,
                   old_values: Optional[Dict[str, Any]] = None,
                   new_values: Optional[Dict[str, Any]] = None) -> None:
        """
        Log an audit event.

        Args:
            action: The action performed (CREATE, UPDATE, DELETE)
            table_name: Name of the table affected
            record_key: Key of the record affected
            old_values: Previous values (for UPDATE operations)
            new_values: New values (for CREATE/UPDATE operations)
        """
        try:
            with get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO audit_log (action, table_name, record_key, old_values, new_values)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        action,
                        table_name,
                        record_key,
                        json.dumps(old_values, ensure_ascii=False) if old_values else None,
                        json.dumps(new_values, ensure_ascii=False) if new_values else None,
                    ),
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to write audit entry for {action} on {table_name}: {e}")

    def get_audit_logs(self, table_name: Optional[str] = None, limit: int = 100) -> List[Dict[str, Any]]:
        """Return recent audit entries, newest first."""
        query = "SELECT * FROM audit_log"
        params: list = []
        if table_name:
            query += " WHERE table_name = ?"
            params.append(table_name)
        query += " ORDER BY audit_id DESC LIMIT ?"
        params.append(limit)

        with get_connection() as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(query, params).fetchall()

        logs = []
        for row in rows:
            entry = {k: row[k] for k in row.keys()}
            for field in ("old_values", "new_values"):
                if entry[field]:
                    entry[field] = json.loads(entry[field])
            logs.append(entry)
        return logs


audit_logger = AuditLogger()
