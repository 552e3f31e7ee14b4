"""Database models for conversation thread persistence.

This module defines the SQLAlchemy model that stores the message history of
each chat thread, so a conversation can be resumed across requests.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Index, String, create_engine, inspect
from sqlalchemy.orm import declarative_base

from hr_agent_config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


class ChatThread(Base):
    """Chat thread model for per-thread agent state.

    Stores the full message list of a thread as serialized LangChain
    messages (the output of ``messages_to_dict``).

    Attributes:
        thread_id: Unique thread identifier
        messages: JSON list of serialized messages
        created_at: Thread creation timestamp
        updated_at: Last update timestamp (auto-updated)
    """

    __tablename__ = "chat_threads"

    thread_id = Column(
        String,
        primary_key=True,
        doc="Unique thread identifier"
    )
    messages = Column(
        JSON,
        nullable=False,
        default=lambda: [],
        doc="Serialized message history"
    )
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        doc="Thread creation time"
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        doc="Last update time"
    )

    __table_args__ = (
        Index('idx_chat_threads_updated', 'updated_at'),
    )

    def __repr__(self) -> str:
        """String representation for debugging.

        Returns:
            Formatted string with thread ID and message count
        """
        return f"<ChatThread(thread_id={self.thread_id}, messages={len(self.messages or [])})>"


def init_database(connection_string: str | None = None) -> None:
    """Initialize database and create tables.

    Creates all tables defined in SQLAlchemy models. Uses the database
    connection string from settings unless one is given.

    This function is idempotent and safe to run multiple times.

    Args:
        connection_string: Optional SQLAlchemy URL overriding settings

    Raises:
        SQLAlchemyError: If database connection or table creation fails
    """
    url = connection_string or get_settings().database.connection_string
    logger.info("Initializing database with all tables")
    engine = create_engine(url)

    try:
        Base.metadata.create_all(engine)
        tables = inspect(engine).get_table_names()
        logger.info(f"Tables in database: {', '.join(tables)}")
    finally:
        engine.dispose()
