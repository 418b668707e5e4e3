from app.models.user import User, UserRole, AuthSession
from app.models.project import (
    Project,
    ProjectMember,
    ProjectMilestone,
    ProjectStatus,
    ProjectPriority,
    MemberRole,
    MilestoneStatus
)
from app.models.task import (
    Task,
    TaskComment,
    Subtask,
    TaskStatus,
    TaskPriority,
    TaskType
)

__all__ = [
    "User",
    "UserRole",
    "AuthSession",
    "Project",
    "ProjectMember",
    "ProjectStatus",
    "ProjectPriority",
    "MemberRole",
    "ProjectMilestone",
    "MilestoneStatus",
    "Task",
    "TaskComment",
    "Subtask",
    "TaskStatus",
    "TaskPriority",
    "TaskType"
]
