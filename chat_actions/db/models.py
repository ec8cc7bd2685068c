"""SQLAlchemy models for chats and their messages."""

import uuid
from datetime import datetime, timezone
from enum import StrEnum

from sqlalchemy import JSON, Column, DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.types import TypeDecorator

Base = declarative_base()


class Visibility(StrEnum):
    """Who can see a chat."""

    PUBLIC = "public"
    PRIVATE = "private"


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timestamp stored in UTC and read back as an aware UTC datetime.

    SQLite keeps no offset, so values are converted to UTC on the way in.
    Naive values are taken to be UTC already.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Chat(Base):
    __tablename__ = "chats"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(Text, nullable=False, default="New chat")
    created_at = Column(UTCDateTime, default=_utcnow, nullable=False)
    visibility = Column(
        Enum(Visibility, values_callable=lambda e: [v.value for v in e]),
        default=Visibility.PRIVATE,
        nullable=False,
    )

    messages = relationship(
        "Message", back_populates="chat", cascade="all, delete-orphan"
    )


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=_new_id)
    chat_id = Column(
        String(36), ForeignKey("chats.id", ondelete="CASCADE"), nullable=False
    )
    role = Column(String(16), nullable=False)  # "user", "assistant", "system"
    content = Column(JSON, nullable=False)
    created_at = Column(UTCDateTime, default=_utcnow, nullable=False)

    chat = relationship("Chat", back_populates="messages")

    __table_args__ = (Index("ix_messages_chat_created", "chat_id", "created_at"),)
