"""Tests for trailing-message deletion and chat visibility updates."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import Session

from chat_actions.actions.messages import delete_trailing_messages
from chat_actions.actions.visibility import update_chat_visibility
from chat_actions.db.models import Chat, Message, Visibility
from chat_actions.db.queries import (
    get_chat_by_id,
    get_message_by_id,
    get_messages_by_chat_id,
    save_chat,
    save_messages,
)

T0 = datetime(2024, 11, 2, 9, 30, tzinfo=timezone.utc)


def _seed_chat(session: Session, chat_id: str, count: int, start: datetime) -> None:
    save_chat(session, chat_id, title=f"Chat {chat_id}")
    save_messages(
        session,
        [
            Message(
                id=f"{chat_id}-m{i}",
                chat_id=chat_id,
                role="user" if i % 2 == 0 else "assistant",
                content=[{"type": "text", "text": f"message {i}"}],
                created_at=start + timedelta(minutes=i),
            )
            for i in range(count)
        ],
    )


@pytest.fixture
def seeded(session: Session) -> Session:
    _seed_chat(session, "a", 5, T0)
    _seed_chat(session, "b", 3, T0)
    return session


class TestQueries:
    """Tests for the query helpers."""

    def test_get_message_by_id(self, seeded: Session) -> None:
        message = get_message_by_id(seeded, "a-m2")
        assert message.chat_id == "a"
        assert message.content == [{"type": "text", "text": "message 2"}]

    def test_get_message_by_unknown_id_raises(self, seeded: Session) -> None:
        with pytest.raises(NoResultFound):
            get_message_by_id(seeded, "missing")

    def test_messages_ordered_by_creation(self, seeded: Session) -> None:
        ids = [m.id for m in get_messages_by_chat_id(seeded, "a")]
        assert ids == ["a-m0", "a-m1", "a-m2", "a-m3", "a-m4"]

    def test_new_chat_is_private(self, session: Session) -> None:
        chat = save_chat(session, "c", title="Fresh")
        assert chat.visibility == Visibility.PRIVATE


class TestDeleteTrailingMessages:
    """Tests for delete_trailing_messages."""

    def test_deletes_only_strictly_later_messages(self, seeded: Session) -> None:
        deleted = delete_trailing_messages(seeded, "a-m2")

        assert deleted == 2
        remaining = [m.id for m in get_messages_by_chat_id(seeded, "a")]
        assert remaining == ["a-m0", "a-m1", "a-m2"]

    def test_other_chats_untouched(self, seeded: Session) -> None:
        delete_trailing_messages(seeded, "a-m0")

        assert len(get_messages_by_chat_id(seeded, "b")) == 3

    def test_last_message_deletes_nothing(self, seeded: Session) -> None:
        assert delete_trailing_messages(seeded, "a-m4") == 0
        assert len(get_messages_by_chat_id(seeded, "a")) == 5

    def test_same_timestamp_is_kept(self, seeded: Session) -> None:
        save_messages(
            seeded,
            [
                Message(
                    id="a-twin",
                    chat_id="a",
                    role="assistant",
                    content="same instant",
                    created_at=T0 + timedelta(minutes=1),
                )
            ],
        )
        delete_trailing_messages(seeded, "a-m1")

        remaining = {m.id for m in get_messages_by_chat_id(seeded, "a")}
        assert remaining == {"a-m0", "a-m1", "a-twin"}

    def test_offset_timestamps_compared_in_utc(self, seeded: Session) -> None:
        # 11:30:30+02:00 is 09:30:30 UTC, between a-m0 and a-m1
        plus_two = timezone(timedelta(hours=2))
        save_messages(
            seeded,
            [
                Message(
                    id="a-offset",
                    chat_id="a",
                    role="user",
                    content="sent from another zone",
                    created_at=datetime(2024, 11, 2, 11, 30, 30, tzinfo=plus_two),
                )
            ],
        )
        delete_trailing_messages(seeded, "a-m1")

        remaining = [m.id for m in get_messages_by_chat_id(seeded, "a")]
        assert remaining == ["a-m0", "a-offset", "a-m1"]

    def test_timestamps_read_back_as_utc(self, seeded: Session) -> None:
        seeded.expire_all()
        created = get_message_by_id(seeded, "a-m1").created_at

        assert created.tzinfo == timezone.utc
        assert created == T0 + timedelta(minutes=1)

    def test_unknown_message_propagates(self, seeded: Session) -> None:
        with pytest.raises(NoResultFound):
            delete_trailing_messages(seeded, "nope")
        assert len(get_messages_by_chat_id(seeded, "a")) == 5


class TestUpdateChatVisibility:
    """Tests for update_chat_visibility."""

    def test_updates_visibility(self, seeded: Session) -> None:
        assert update_chat_visibility(seeded, "a", Visibility.PUBLIC) == 1

        seeded.expire_all()
        assert get_chat_by_id(seeded, "a").visibility == Visibility.PUBLIC
        assert get_chat_by_id(seeded, "b").visibility == Visibility.PRIVATE

    def test_idempotent(self, seeded: Session) -> None:
        update_chat_visibility(seeded, "a", "public")
        seeded.expire_all()
        first = get_chat_by_id(seeded, "a").visibility

        update_chat_visibility(seeded, "a", "public")
        seeded.expire_all()
        assert get_chat_by_id(seeded, "a").visibility == first == Visibility.PUBLIC

    def test_unknown_chat_updates_nothing(self, seeded: Session) -> None:
        assert update_chat_visibility(seeded, "ghost", Visibility.PUBLIC) == 0
        assert seeded.query(Chat).count() == 2

    def test_invalid_value_rejected(self, seeded: Session) -> None:
        with pytest.raises(ValueError):
            update_chat_visibility(seeded, "a", "friends-only")
