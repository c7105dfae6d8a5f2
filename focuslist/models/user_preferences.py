"""
User preferences model - one UI/UX settings row per user
"""
from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey, Enum as SQLEnum
from enum import Enum
from focuslist.database import Base


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class DefaultView(str, Enum):
    LIST = "list"
    KANBAN = "kanban"


class SortBy(str, Enum):
    CREATED_AT = "created_at"
    DUE_DATE = "due_date"
    PRIORITY = "priority"
    POSITION = "position"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


DEFAULT_PREFERENCES = {
    "theme": Theme.SYSTEM,
    "default_view": DefaultView.LIST,
    "sort_by": SortBy.POSITION,
    "sort_order": SortOrder.ASC,
    "show_completed_tasks": False,
    "notifications_enabled": True,
}


class UserPreferences(Base):
    __tablename__ = "user_preferences"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True, index=True)
    theme = Column(SQLEnum(Theme, native_enum=False), nullable=False, default=Theme.SYSTEM)
    default_view = Column(SQLEnum(DefaultView, native_enum=False), nullable=False, default=DefaultView.LIST)
    sort_by = Column(SQLEnum(SortBy, native_enum=False), nullable=False, default=SortBy.POSITION)
    sort_order = Column(SQLEnum(SortOrder, native_enum=False), nullable=False, default=SortOrder.ASC)
    show_completed_tasks = Column(Boolean, nullable=False, default=False)
    notifications_enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
