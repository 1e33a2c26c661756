"""
Durable relational log of conversations and document insights.

SQLite via aiosqlite. Used as an audit trail for debugging and compliance,
never on the hot retrieval path.
"""

from datetime import datetime
from pathlib import Path

import aiosqlite

from contextmem.models.log import ConversationTurn, DocumentInsightRow, LogEntry
from contextmem.models.memory import utc_now
from contextmem.utils.exceptions import LogStoreError
from contextmem.utils.logger import get_logger

logger = get_logger(__name__)


class ConversationLog:
    """
    Append-only SQLite log.

    Tables:
    - log_entries: (timestamp, actor, content, tag) audit rows
    - conversations: user/assistant exchanges with the active personality
    - knowledge_base: key/value facts
    - document_insights: insights extracted from documents
    """

    def __init__(self, db_path: str = "data/contextmem.db"):
        """
        Initialize the conversation log.

        Args:
            db_path: Path to SQLite database file (":memory:" for a private in-memory db)
        """
        self.db_path = db_path
        self.connection: aiosqlite.Connection | None = None

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async def connect(self) -> None:
        """Establish connection to SQLite."""
        if self.connection is None:
            try:
                self.connection = await aiosqlite.connect(self.db_path)
                self.connection.row_factory = aiosqlite.Row
                await self.connection.execute("PRAGMA journal_mode = WAL")
                await self.connection.commit()
            except Exception as e:
                logger.error(
                    f"Failed to open conversation log: {e}",
                    extra={"db_path": self.db_path, "error": str(e)},
                )
                raise LogStoreError(f"Failed to open conversation log: {e}") from e

    async def initialize(self) -> None:
        """Initialize database schema."""
        await self.connect()

        await self.connection.executescript(
            """
            CREATE TABLE IF NOT EXISTS log_entries (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                actor TEXT NOT NULL,
                content TEXT NOT NULL,
                tag TEXT NOT NULL DEFAULT ''
            );
            CREATE TABLE IF NOT EXISTS conversations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                user_input TEXT NOT NULL,
                ai_response TEXT NOT NULL,
                personality TEXT NOT NULL
            );
            CREATE TABLE IF NOT EXISTS knowledge_base (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                key TEXT UNIQUE NOT NULL,
                value TEXT NOT NULL,
                timestamp TEXT NOT NULL
            );
            CREATE TABLE IF NOT EXISTS document_insights (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                document_path TEXT NOT NULL,
                insight_text TEXT NOT NULL,
                relevance REAL NOT NULL,
                insight_type TEXT NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_log_entries_timestamp ON log_entries(timestamp);
            CREATE INDEX IF NOT EXISTS idx_conversations_timestamp ON conversations(timestamp);
            CREATE INDEX IF NOT EXISTS idx_document_insights_path
                ON document_insights(document_path);
            """
        )
        await self.connection.commit()
        logger.info("Conversation log initialized", extra={"db_path": self.db_path})

    async def _write(self, sql: str, params: tuple) -> int:
        await self.connect()
        try:
            cursor = await self.connection.execute(sql, params)
            await self.connection.commit()
            return cursor.lastrowid
        except Exception as e:
            logger.error(f"Conversation log write failed: {e}", extra={"error": str(e)})
            raise LogStoreError(f"Conversation log write failed: {e}") from e

    async def _read(self, sql: str, params: tuple) -> list[aiosqlite.Row]:
        await self.connect()
        try:
            async with self.connection.execute(sql, params) as cursor:
                return list(await cursor.fetchall())
        except Exception as e:
            logger.error(f"Conversation log read failed: {e}", extra={"error": str(e)})
            raise LogStoreError(f"Conversation log read failed: {e}") from e

    # ═══════════════════════════════════════════════════════════
    # AUDIT ENTRIES
    # ═══════════════════════════════════════════════════════════

    async def append(
        self,
        actor: str,
        content: str,
        tag: str = "",
        timestamp: datetime | None = None,
    ) -> int:
        """Append one audit row and return its row id."""
        timestamp = timestamp or utc_now()
        return await self._write(
            "INSERT INTO log_entries (timestamp, actor, content, tag) VALUES (?, ?, ?, ?)",
            (timestamp.isoformat(), actor, content, tag),
        )

    async def recent(self, limit: int = 10) -> list[LogEntry]:
        """Most recent audit rows, newest first."""
        rows = await self._read(
            "SELECT * FROM log_entries ORDER BY timestamp DESC, id DESC LIMIT ?", (limit,)
        )
        return [self._row_to_entry(row) for row in rows]

    async def search(self, text: str, limit: int = 50) -> list[LogEntry]:
        """Audit rows whose content contains ``text`` (SQL LIKE), newest first."""
        rows = await self._read(
            "SELECT * FROM log_entries WHERE content LIKE ? "
            "ORDER BY timestamp DESC, id DESC LIMIT ?",
            (f"%{text}%", limit),
        )
        return [self._row_to_entry(row) for row in rows]

    # ═══════════════════════════════════════════════════════════
    # CONVERSATIONS
    # ═══════════════════════════════════════════════════════════

    async def save_conversation(self, user_input: str, ai_response: str, personality: str) -> int:
        return await self._write(
            "INSERT INTO conversations (timestamp, user_input, ai_response, personality) "
            "VALUES (?, ?, ?, ?)",
            (utc_now().isoformat(), user_input, ai_response, personality),
        )

    async def get_recent_conversations(self, limit: int = 10) -> list[ConversationTurn]:
        rows = await self._read(
            "SELECT timestamp, user_input, ai_response, personality FROM conversations "
            "ORDER BY timestamp DESC, id DESC LIMIT ?",
            (limit,),
        )
        return [
            ConversationTurn(
                timestamp=datetime.fromisoformat(row["timestamp"]),
                user_input=row["user_input"],
                ai_response=row["ai_response"],
                personality=row["personality"],
            )
            for row in rows
        ]

    # ═══════════════════════════════════════════════════════════
    # KNOWLEDGE BASE
    # ═══════════════════════════════════════════════════════════

    async def save_knowledge(self, key: str, value: str) -> None:
        await self._write(
            "INSERT OR REPLACE INTO knowledge_base (key, value, timestamp) VALUES (?, ?, ?)",
            (key, value, utc_now().isoformat()),
        )

    async def get_knowledge(self, key: str) -> str | None:
        rows = await self._read("SELECT value FROM knowledge_base WHERE key = ?", (key,))
        return rows[0]["value"] if rows else None

    # ═══════════════════════════════════════════════════════════
    # DOCUMENT INSIGHTS
    # ═══════════════════════════════════════════════════════════

    async def save_document_insight(
        self,
        document_path: str,
        insight_text: str,
        relevance: float,
        insight_type: str,
    ) -> int:
        return await self._write(
            "INSERT INTO document_insights "
            "(timestamp, document_path, insight_text, relevance, insight_type) "
            "VALUES (?, ?, ?, ?, ?)",
            (utc_now().isoformat(), document_path, insight_text, relevance, insight_type),
        )

    async def get_document_insights(self, document_path: str) -> list[DocumentInsightRow]:
        """Insights of a document, most relevant first."""
        rows = await self._read(
            "SELECT * FROM document_insights WHERE document_path = ? "
            "ORDER BY relevance DESC, id ASC",
            (document_path,),
        )
        return [self._row_to_insight(row) for row in rows]

    async def search_document_insights(self, query: str) -> list[DocumentInsightRow]:
        rows = await self._read(
            "SELECT * FROM document_insights WHERE insight_text LIKE ? "
            "ORDER BY relevance DESC, id ASC",
            (f"%{query}%",),
        )
        return [self._row_to_insight(row) for row in rows]

    async def close(self) -> None:
        """Close SQLite connection."""
        if self.connection is not None:
            await self.connection.close()
            self.connection = None

    @staticmethod
    def _row_to_entry(row: aiosqlite.Row) -> LogEntry:
        return LogEntry(
            id=row["id"],
            timestamp=datetime.fromisoformat(row["timestamp"]),
            actor=row["actor"],
            content=row["content"],
            tag=row["tag"],
        )

    @staticmethod
    def _row_to_insight(row: aiosqlite.Row) -> DocumentInsightRow:
        return DocumentInsightRow(
            timestamp=datetime.fromisoformat(row["timestamp"]),
            document_path=row["document_path"],
            insight_text=row["insight_text"],
            relevance=row["relevance"],
            insight_type=row["insight_type"],
        )
