"""Thread service for conversation state persistence.

This module provides the ThreadService class that loads and stores the
message history of each chat thread, so every request on a thread continues
the same conversation.
"""

import logging
from contextlib import contextmanager

from langchain_core.messages import BaseMessage, messages_from_dict, messages_to_dict
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from employee_store import ChatThread
from hr_agent_config import get_settings

logger = logging.getLogger(__name__)


class ThreadService:
    """Service for managing per-thread conversation state.

    Messages are stored as JSON using LangChain's message serialization, so
    tool calls and tool results survive a round trip.

    Example:
        >>> service = ThreadService()
        >>> service.save_messages("thread-1", [HumanMessage(content="Hi")])
        >>> service.get_messages("thread-1")
        [HumanMessage(content='Hi', ...)]
    """

    def __init__(self, engine: Engine | None = None):
        """Initialize thread service.

        Args:
            engine: SQLAlchemy engine (defaults to one built from settings)
        """
        self.settings = get_settings()
        self.engine = engine or create_engine(self.settings.database.connection_string)
        self.SessionLocal = sessionmaker(bind=self.engine)

    @contextmanager
    def _get_session(self):
        """Context manager for database sessions.

        Commits on success, rolls back on error, and always closes the
        session.

        Yields:
            SQLAlchemy session
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database transaction failed: {e}", exc_info=True)
            raise
        finally:
            session.close()

    def get_messages(self, thread_id: str) -> list[BaseMessage]:
        """Load a thread's message history.

        Args:
            thread_id: Unique thread identifier

        Returns:
            List of messages, empty if the thread does not exist yet

        Raises:
            ValueError: If thread_id is empty
            SQLAlchemyError: If database query fails
        """
        if not thread_id or not thread_id.strip():
            raise ValueError("thread_id cannot be empty")

        with self._get_session() as session:
            chat_thread = session.query(ChatThread).filter_by(thread_id=thread_id).first()

            if not chat_thread:
                logger.info(f"Thread {thread_id} not found, starting empty")
                return []

            messages = messages_from_dict(chat_thread.messages)

        logger.info(f"Loaded {len(messages)} messages for thread {thread_id}")
        return messages

    def save_messages(self, thread_id: str, messages: list[BaseMessage]) -> None:
        """Replace a thread's stored message history.

        Creates the thread if it does not exist.

        Args:
            thread_id: Unique thread identifier
            messages: Full message history to store

        Raises:
            ValueError: If thread_id is empty
            SQLAlchemyError: If database operation fails
        """
        if not thread_id or not thread_id.strip():
            raise ValueError("thread_id cannot be empty")

        serialized = messages_to_dict(messages)

        with self._get_session() as session:
            chat_thread = session.query(ChatThread).filter_by(thread_id=thread_id).first()

            if chat_thread:
                chat_thread.messages = serialized
            else:
                session.add(ChatThread(thread_id=thread_id, messages=serialized))
                logger.info(f"Created new thread: {thread_id}")

        logger.info(f"Saved {len(messages)} messages for thread {thread_id}")

    def clear_thread(self, thread_id: str) -> None:
        """Delete a thread.

        Idempotent - no error if the thread doesn't exist.

        Args:
            thread_id: Unique thread identifier

        Raises:
            ValueError: If thread_id is empty
            SQLAlchemyError: If database operation fails
        """
        if not thread_id or not thread_id.strip():
            raise ValueError("thread_id cannot be empty")

        with self._get_session() as session:
            chat_thread = session.query(ChatThread).filter_by(thread_id=thread_id).first()

            if not chat_thread:
                logger.info(f"Thread {thread_id} not found, nothing to clear")
                return

            session.delete(chat_thread)
            logger.info(f"Cleared thread: {thread_id}")
