"""SQLite-backed persistence for users, chats, messages, votes and stream handles.

Used for:
- Conversation history (chats + append-only messages with typed parts)
- Stream handles (one per assistant turn, the most recent is resumable)
- Message counts for the daily entitlement check

Single SQLite DB shared with the domain tables in ``records``.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import aiosqlite

from healthdesk.persistence.schema import SCHEMA_SQL

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = "data/healthdesk.db"


@dataclass
class UserRecord:
    id: str
    email: str
    type: str = "regular"


@dataclass
class ChatRecord:
    """A persisted chat row."""

    id: str
    user_id: str
    title: str
    visibility: str = "private"
    created_at: str = ""

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "visibility": self.visibility,
            "createdAt": self.created_at,
        }


@dataclass
class MessageRecord:
    """A persisted message row. ``parts`` and ``attachments`` are JSON lists."""

    id: str
    chat_id: str
    role: str
    parts: list[dict[str, Any]] = field(default_factory=list)
    attachments: list[dict[str, Any]] = field(default_factory=list)
    created_at: str = ""


@dataclass
class VoteRecord:
    chat_id: str
    message_id: str
    is_upvoted: bool


class Database:
    """Owns the single aiosqlite connection for the process."""

    def __init__(self, db_path: str = DEFAULT_DB_PATH) -> None:
        self.db_path = db_path
        self._conn: aiosqlite.Connection | None = None

    async def init_db(self) -> None:
        """Open the connection and create tables if they don't exist."""
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._conn = await aiosqlite.connect(self.db_path)
        self._conn.row_factory = aiosqlite.Row
        await self._conn.execute("PRAGMA foreign_keys = ON")
        await self._conn.executescript(SCHEMA_SQL)
        await self._conn.commit()

    async def connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            await self.init_db()
        assert self._conn is not None
        return self._conn

    async def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None


class ChatStore:
    """Chat history, votes and stream handles."""

    def __init__(self, db: Database) -> None:
        self.db = db

    # --- Users ---

    async def get_user(self, user_id: str) -> UserRecord | None:
        conn = await self.db.connection()
        cursor = await conn.execute(
            "SELECT id, email, type FROM users WHERE id = ?", (user_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return UserRecord(id=row["id"], email=row["email"], type=row["type"])

    async def upsert_user(self, user: UserRecord) -> None:
        conn = await self.db.connection()
        await conn.execute(
            """
            INSERT INTO users (id, email, type) VALUES (?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET email = excluded.email, type = excluded.type
            """,
            (user.id, user.email, user.type),
        )
        await conn.commit()

    # --- Chats ---

    async def get_chat(self, chat_id: str) -> ChatRecord | None:
        """Look up a chat by id."""
        conn = await self.db.connection()
        cursor = await conn.execute(
            "SELECT id, user_id, title, visibility, created_at FROM chats WHERE id = ?",
            (chat_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return _chat_from_row(row)

    async def save_chat(self, chat: ChatRecord) -> ChatRecord:
        conn = await self.db.connection()
        if not chat.created_at:
            chat.created_at = _now_iso()
        await conn.execute(
            "INSERT INTO chats (id, user_id, title, visibility, created_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (chat.id, chat.user_id, chat.title, chat.visibility, chat.created_at),
        )
        await conn.commit()
        return chat

    async def update_chat_visibility(self, chat_id: str, visibility: str) -> None:
        conn = await self.db.connection()
        await conn.execute(
            "UPDATE chats SET visibility = ? WHERE id = ?", (visibility, chat_id)
        )
        await conn.commit()

    async def delete_chat(self, chat_id: str) -> ChatRecord | None:
        """Delete a chat together with its votes, messages and stream handles."""
        chat = await self.get_chat(chat_id)
        if chat is None:
            return None
        conn = await self.db.connection()
        await conn.execute("DELETE FROM votes WHERE chat_id = ?", (chat_id,))
        await conn.execute("DELETE FROM messages WHERE chat_id = ?", (chat_id,))
        await conn.execute("DELETE FROM streams WHERE chat_id = ?", (chat_id,))
        await conn.execute("DELETE FROM chats WHERE id = ?", (chat_id,))
        await conn.commit()
        return chat

    # --- Messages ---

    async def get_messages(self, chat_id: str) -> list[MessageRecord]:
        """All messages of a chat, oldest first."""
        conn = await self.db.connection()
        cursor = await conn.execute(
            "SELECT id, chat_id, role, parts, attachments, created_at FROM messages "
            "WHERE chat_id = ? ORDER BY created_at ASC, rowid ASC",
            (chat_id,),
        )
        rows = await cursor.fetchall()
        return [
            MessageRecord(
                id=r["id"],
                chat_id=r["chat_id"],
                role=r["role"],
                parts=json.loads(r["parts"]),
                attachments=json.loads(r["attachments"]),
                created_at=r["created_at"],
            )
            for r in rows
        ]

    async def has_message(self, chat_id: str, message_id: str) -> bool:
        conn = await self.db.connection()
        cursor = await conn.execute(
            "SELECT 1 FROM messages WHERE id = ? AND chat_id = ?", (message_id, chat_id)
        )
        return await cursor.fetchone() is not None

    async def save_messages(self, messages: list[MessageRecord]) -> None:
        conn = await self.db.connection()
        for message in messages:
            if not message.created_at:
                message.created_at = _now_iso()
        await conn.executemany(
            "INSERT INTO messages (id, chat_id, role, parts, attachments, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            [
                (
                    m.id,
                    m.chat_id,
                    m.role,
                    json.dumps(m.parts),
                    json.dumps(m.attachments),
                    m.created_at,
                )
                for m in messages
            ],
        )
        await conn.commit()

    async def count_user_messages(self, user_id: str, hours: int = 24) -> int:
        """Count user-role messages sent by ``user_id`` in the trailing window."""
        since = datetime.now(timezone.utc) - timedelta(hours=hours)
        since_iso = since.isoformat(timespec="microseconds")
        conn = await self.db.connection()
        cursor = await conn.execute(
            """
            SELECT COUNT(*) FROM messages m
            JOIN chats c ON c.id = m.chat_id
            WHERE c.user_id = ? AND m.role = 'user' AND m.created_at >= ?
            """,
            (user_id, since_iso),
        )
        row = await cursor.fetchone()
        return int(row[0]) if row else 0

    # --- Stream handles ---

    async def create_stream_id(self, stream_id: str, chat_id: str) -> None:
        conn = await self.db.connection()
        await conn.execute(
            "INSERT INTO streams (id, chat_id, created_at) VALUES (?, ?, ?)",
            (stream_id, chat_id, _now_iso()),
        )
        await conn.commit()

    async def get_stream_ids(self, chat_id: str) -> list[str]:
        """Stream handles of a chat, oldest first."""
        conn = await self.db.connection()
        cursor = await conn.execute(
            "SELECT id FROM streams WHERE chat_id = ? ORDER BY created_at ASC, rowid ASC",
            (chat_id,),
        )
        rows = await cursor.fetchall()
        return [r["id"] for r in rows]

    # --- Votes ---

    async def vote_message(self, chat_id: str, message_id: str, is_upvoted: bool) -> None:
        conn = await self.db.connection()
        await conn.execute(
            """
            INSERT INTO votes (chat_id, message_id, is_upvoted) VALUES (?, ?, ?)
            ON CONFLICT(chat_id, message_id) DO UPDATE SET is_upvoted = excluded.is_upvoted
            """,
            (chat_id, message_id, int(is_upvoted)),
        )
        await conn.commit()

    async def get_votes(self, chat_id: str) -> list[VoteRecord]:
        conn = await self.db.connection()
        cursor = await conn.execute(
            "SELECT chat_id, message_id, is_upvoted FROM votes WHERE chat_id = ?",
            (chat_id,),
        )
        rows = await cursor.fetchall()
        return [
            VoteRecord(
                chat_id=r["chat_id"],
                message_id=r["message_id"],
                is_upvoted=bool(r["is_upvoted"]),
            )
            for r in rows
        ]


def _chat_from_row(row: Any) -> ChatRecord:
    return ChatRecord(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        visibility=row["visibility"],
        created_at=row["created_at"],
    )


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")
