"""Truncate a chat's history after a given message."""

from sqlalchemy.orm import Session

from chat_actions.db.queries import (
    delete_messages_by_chat_id_after_timestamp,
    get_message_by_id,
)
from chat_actions.utils.logger import get_logger

logger = get_logger(__name__)


def delete_trailing_messages(session: Session, message_id: str) -> int:
    """Delete every message created after ``message_id`` in its chat.

    The referenced message itself is kept.

    Args:
        session: Open database session.
        message_id: Id of the last message to keep.

    Returns:
        Number of deleted messages.

    Raises:
        sqlalchemy.exc.NoResultFound: If ``message_id`` does not exist.
    """
    message = get_message_by_id(session, message_id)
    deleted = delete_messages_by_chat_id_after_timestamp(
        session, chat_id=message.chat_id, timestamp=message.created_at
    )
    logger.info(
        "Deleted %d trailing messages after %s in chat %s",
        deleted,
        message_id,
        message.chat_id,
    )
    return deleted
