"""SQLite message store.

Persists a conversation's messages in a SQLite database file.
Uses aiosqlite for async access.
"""

from datetime import datetime
from pathlib import Path

import aiosqlite

from ..chat.models import Message
from ..config import DEFAULT_HISTORY_PATH
from .base import MessageStore


class SQLiteMessageStore(MessageStore):
    """SQLite-backed message history.

    Messages are ordered by creation time, with insertion position breaking
    ties between messages created in the same instant.
    """

    def __init__(self, path: str | Path = DEFAULT_HISTORY_PATH):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database and create the schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._create_schema()

    async def _create_schema(self) -> None:
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                id TEXT PRIMARY KEY,
                text TEXT NOT NULL,
                is_from_user INTEGER NOT NULL,
                created_at TEXT NOT NULL,
                position INTEGER NOT NULL
            )
        """)

        await self._connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_messages_order
            ON messages(created_at, position)
        """)

        await self._connection.commit()

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("SQLiteMessageStore is not connected; call connect() first")
        return self._connection

    async def load(self) -> list[Message]:
        connection = self._require_connection()
        async with connection.execute(
            """
            SELECT id, text, is_from_user, created_at
            FROM messages
            ORDER BY created_at ASC, position ASC
            """
        ) as cursor:
            rows = await cursor.fetchall()

        return [
            Message(
                id=message_id,
                text=text,
                is_from_user=bool(is_from_user),
                created_at=datetime.fromisoformat(created_at),
            )
            for message_id, text, is_from_user, created_at in rows
        ]

    async def replace_all(self, messages: list[Message]) -> None:
        connection = self._require_connection()
        try:
            await connection.execute("DELETE FROM messages")
            await connection.executemany(
                """
                INSERT INTO messages (id, text, is_from_user, created_at, position)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (
                        message.id,
                        message.text,
                        int(message.is_from_user),
                        message.created_at.isoformat(),
                        position,
                    )
                    for position, message in enumerate(messages)
                ],
            )
            await connection.commit()
        except Exception:
            await connection.rollback()
            raise

    async def clear(self) -> None:
        connection = self._require_connection()
        await connection.execute("DELETE FROM messages")
        await connection.commit()

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
