from focuslist.models.user import User
from focuslist.models.task import Task, TaskStatus, TaskPriority
from focuslist.models.task_comment import TaskComment
from focuslist.models.task_activity import TaskActivity, ActivityAction
from focuslist.models.user_preferences import UserPreferences
from focuslist.models.thread import Thread, ThreadStatus
from focuslist.models.message import Message, MessageRole

__all__ = [
    "User",
    "Task",
    "TaskStatus",
    "TaskPriority",
    "TaskComment",
    "TaskActivity",
    "ActivityAction",
    "UserPreferences",
    "Thread",
    "ThreadStatus",
    "Message",
    "MessageRole",
]
