"""
Assistant message model - individual turns in a thread
"""
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, JSON, Index, Enum as SQLEnum
from pydantic import BaseModel
from typing import Optional
from enum import Enum
from focuslist.database import Base


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class MessageMetadata(BaseModel):
    """What produced an assistant message"""
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    fallback_reason: Optional[str] = None  # set when the placeholder reply was used


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    thread_id = Column(Integer, ForeignKey("threads.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    role = Column(SQLEnum(MessageRole, native_enum=False), nullable=False)
    content = Column(Text, nullable=False)
    # "metadata" is reserved on declarative classes
    message_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_messages_thread_created", "thread_id", "created_at"),
    )
