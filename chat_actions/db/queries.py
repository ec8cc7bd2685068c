"""Query helpers for chats and messages.

Every helper takes an open :class:`~sqlalchemy.orm.Session` and commits
its own writes.
"""

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from chat_actions.utils.logger import get_logger

from .models import Chat, Message, Visibility

logger = get_logger(__name__)


def save_chat(
    session: Session,
    chat_id: str,
    title: str,
    visibility: Visibility = Visibility.PRIVATE,
) -> Chat:
    chat = Chat(id=chat_id, title=title, visibility=visibility)
    session.add(chat)
    session.commit()
    return chat


def get_chat_by_id(session: Session, chat_id: str) -> Chat | None:
    return session.get(Chat, chat_id)


def save_messages(session: Session, messages: Iterable[Message]) -> None:
    session.add_all(list(messages))
    session.commit()


def get_messages_by_chat_id(session: Session, chat_id: str) -> list[Message]:
    """Return a chat's messages in creation order."""
    stmt = (
        select(Message)
        .where(Message.chat_id == chat_id)
        .order_by(Message.created_at.asc())
    )
    return list(session.scalars(stmt))


def get_message_by_id(session: Session, message_id: str) -> Message:
    """Fetch a single message.

    Raises:
        sqlalchemy.exc.NoResultFound: If no message has this id.
    """
    return session.execute(
        select(Message).where(Message.id == message_id)
    ).scalar_one()


def delete_messages_by_chat_id_after_timestamp(
    session: Session, chat_id: str, timestamp: datetime
) -> int:
    """Delete messages of a chat created strictly after ``timestamp``.

    Returns:
        Number of deleted rows.
    """
    result = session.execute(
        delete(Message)
        .where(Message.chat_id == chat_id)
        .where(Message.created_at > timestamp)
        .execution_options(synchronize_session=False)
    )
    session.commit()
    logger.debug("Deleted %d messages from chat %s", result.rowcount, chat_id)
    return result.rowcount


def update_chat_visibility_by_id(
    session: Session, chat_id: str, visibility: Visibility
) -> int:
    """Set a chat's visibility. Returns the number of updated rows."""
    result = session.execute(
        update(Chat).where(Chat.id == chat_id).values(visibility=visibility)
    )
    session.commit()
    return result.rowcount
