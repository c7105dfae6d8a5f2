"""
Assistant thread model - a conversation between a user and the AI assistant
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, Enum as SQLEnum
from enum import Enum
from focuslist.database import Base


class ThreadStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class Thread(Base):
    __tablename__ = "threads"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(100), nullable=True)
    status = Column(SQLEnum(ThreadStatus, native_enum=False), nullable=False, default=ThreadStatus.ACTIVE)
    last_message_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_threads_user_status", "user_id", "status"),
        Index("ix_threads_user_last_message", "user_id", "last_message_at"),
    )
