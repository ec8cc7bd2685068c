"""Change who can see a chat."""

from sqlalchemy.orm import Session

from chat_actions.db.models import Visibility
from chat_actions.db.queries import update_chat_visibility_by_id


def update_chat_visibility(
    session: Session, chat_id: str, visibility: Visibility | str
) -> int:
    """Persist ``visibility`` for ``chat_id``.

    Applying the same value twice leaves the same state. An unknown chat
    id updates nothing.

    Returns:
        Number of updated chats (0 or 1).

    Raises:
        ValueError: If ``visibility`` is not a known visibility value.
    """
    return update_chat_visibility_by_id(session, chat_id, Visibility(visibility))
