from pydantic import Field
from datetime import datetime
from typing import Optional, List
from app.models.project import ProjectStatus, ProjectPriority, MemberRole, MilestoneStatus
from app.schemas.base import CamelModel, Pagination

class ProjectBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    status: ProjectStatus = ProjectStatus.PLANNING
    priority: ProjectPriority = ProjectPriority.MEDIUM
    tags: List[str] = []
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

class Budget(CamelModel):
    allocated: float = Field(0, ge=0)
    spent: float = Field(0, ge=0)

class MilestoneCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    status: MilestoneStatus = MilestoneStatus.PENDING

class MilestoneResponse(MilestoneCreate):
    id: int
    completed_at: Optional[datetime] = None

class ProjectCreate(ProjectBase):
    budget: Optional[Budget] = None
    milestones: List[MilestoneCreate] = []

class ProjectUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    status: Optional[ProjectStatus] = None
    priority: Optional[ProjectPriority] = None
    tags: Optional[List[str]] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    budget: Optional[Budget] = None
    milestones: Optional[List[MilestoneCreate]] = None

class ProjectStatusUpdate(CamelModel):
    status: ProjectStatus

class MemberCreate(CamelModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    role: MemberRole = MemberRole.DEVELOPER

class MemberResponse(CamelModel):
    user_id: str
    role: MemberRole
    joined_at: datetime

class ProjectResponse(ProjectBase):
    id: str
    owner_id: str
    progress: int
    created_at: datetime
    updated_at: datetime
    members: List[MemberResponse] = []
    budget: Budget
    remaining_budget: float
    duration: Optional[int] = None
    milestones: List[MilestoneResponse] = []

class ProjectEnvelope(CamelModel):
    message: Optional[str] = None
    project: ProjectResponse

class ProjectListResponse(CamelModel):
    projects: List[ProjectResponse]
    pagination: Optional[Pagination] = None
