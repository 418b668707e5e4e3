from pydantic import Field
from datetime import datetime
from typing import Optional, List
from app.models.task import TaskStatus, TaskPriority, TaskType
from app.schemas.base import CamelModel

class TaskBase(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    type: TaskType = TaskType.FEATURE
    due_date: Optional[datetime] = None
    estimated_hours: Optional[int] = Field(None, ge=0, le=1000)
    actual_hours: Optional[int] = Field(None, ge=0)
    tags: List[str] = []

class TaskCreate(TaskBase):
    project_id: str = Field(..., min_length=1)
    assigned_to: Optional[str] = None

class TaskUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    type: Optional[TaskType] = None
    due_date: Optional[datetime] = None
    estimated_hours: Optional[int] = Field(None, ge=0, le=1000)
    actual_hours: Optional[int] = Field(None, ge=0)
    tags: Optional[List[str]] = None
    assigned_to: Optional[str] = None

class TaskStatusUpdate(CamelModel):
    status: TaskStatus

class TaskAssign(CamelModel):
    assigned_to: Optional[str] = None

class CommentCreate(CamelModel):
    text: str = Field(..., min_length=1, max_length=2000)

class SubtaskCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)

class CommentResponse(CamelModel):
    id: int
    text: str
    author: Optional[str] = Field(None, validation_alias="author_id")
    created_at: datetime

class SubtaskResponse(CamelModel):
    id: int
    title: str
    completed: bool
    created_at: datetime

class TaskResponse(TaskBase):
    id: str
    project_id: str
    assigned_to: Optional[str] = None
    reporter_id: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    comments: List[CommentResponse] = []
    subtasks: List[SubtaskResponse] = []

class TaskEnvelope(CamelModel):
    message: Optional[str] = None
    task: TaskResponse

class TaskListResponse(CamelModel):
    tasks: List[TaskResponse]

class CommentListResponse(CamelModel):
    comments: List[CommentResponse]
