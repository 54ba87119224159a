"""
Codemode Conversation Memory

Persists conversation history keyed by thread and resource (user) so the
agent can pick up a thread where it left off. Only the last N messages of
a thread are replayed to the model. Supports SQLite (local) and
PostgreSQL (production) via ``codemode.storage.db``.

Schema:
- messages: one row per user or assistant turn
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from codemode.logging import get_logger
from codemode.storage.db import connect

logger = get_logger("codemode.memory")

DEFAULT_LAST_MESSAGES = 10


class MemoryMessage(BaseModel):
    """One stored conversation turn."""
    thread_id: str
    resource_id: str
    role: str
    content: Any
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_message(self) -> dict[str, Any]:
        """Provider message dict (role + content)."""
        return {"role": self.role, "content": self.content}


class ConversationMemory:
    """Database-backed conversation history."""

    def __init__(self, db_url: str = "codemode-memory.db", last_messages: int = DEFAULT_LAST_MESSAGES):
        """Initialize memory.

        Args:
            db_url: Database URL. Use ``postgresql://...`` for PostgreSQL
                    or a file path / ``:memory:`` for SQLite.
            last_messages: How many messages recent() returns by default.
        """
        self._db_url = db_url
        self._last_messages = last_messages
        self._conn = connect(db_url)
        self._create_tables()

    @property
    def is_postgres(self) -> bool:
        return self._conn.is_postgres

    def _create_tables(self) -> None:
        self._conn.create_schema("""
            CREATE TABLE IF NOT EXISTS messages (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                thread_id TEXT NOT NULL,
                resource_id TEXT NOT NULL,
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                created_at TEXT DEFAULT ''
            );

            CREATE INDEX IF NOT EXISTS idx_messages_thread ON messages(thread_id);
            CREATE INDEX IF NOT EXISTS idx_messages_resource ON messages(resource_id)
        """)

    def append(self, thread_id: str, resource_id: str, role: str, content: Any) -> MemoryMessage:
        """Store one message at the end of a thread."""
        message = MemoryMessage(thread_id=thread_id, resource_id=resource_id, role=role, content=content)
        self._conn.execute(
            "INSERT INTO messages (thread_id, resource_id, role, content, created_at) VALUES (?, ?, ?, ?, ?)",
            (
                thread_id,
                resource_id,
                role,
                json.dumps(content, default=str),
                message.created_at.isoformat(),
            ),
        )
        logger.debug(f"Stored {role} message", extra={"thread_id": thread_id})
        return message

    def recent(self, thread_id: str, limit: int | None = None) -> list[MemoryMessage]:
        """Last ``limit`` messages of a thread, oldest first."""
        limit = limit or self._last_messages
        rows = self._conn.query(
            "SELECT * FROM messages WHERE thread_id = ? ORDER BY id DESC LIMIT ?",
            (thread_id, limit),
        )
        return [self._row_to_message(row) for row in reversed(rows)]

    def list_threads(self, resource_id: str) -> list[dict[str, Any]]:
        """Threads of a resource with message counts, most recent first."""
        return self._conn.query(
            "SELECT thread_id, COUNT(*) AS message_count, MAX(created_at) AS last_message_at "
            "FROM messages WHERE resource_id = ? GROUP BY thread_id ORDER BY last_message_at DESC",
            (resource_id,),
        )

    def clear(self, thread_id: str) -> None:
        """Delete every message of a thread."""
        self._conn.execute("DELETE FROM messages WHERE thread_id = ?", (thread_id,))

    def close(self) -> None:
        self._conn.close()

    @staticmethod
    def _row_to_message(row: dict[str, Any]) -> MemoryMessage:
        return MemoryMessage(
            thread_id=row["thread_id"],
            resource_id=row["resource_id"],
            role=row["role"],
            content=json.loads(row["content"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
