from sqlalchemy import Column, Integer, Float, String, Text, DateTime, Enum, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from typing import Optional
import enum
import math
from app.db.base import Base, enum_values
from app.models.user import generate_id

class ProjectStatus(str, enum.Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    IN_PROGRESS = "in-progress"
    TESTING = "testing"
    COMPLETED = "completed"
    ON_HOLD = "on-hold"

class ProjectPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

class MemberRole(str, enum.Enum):
    LEAD = "lead"
    DEVELOPER = "developer"
    TESTER = "tester"
    DESIGNER = "designer"

class MilestoneStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    OVERDUE = "overdue"

class Project(Base):
    __tablename__ = "projects"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False)
    status = Column(Enum(ProjectStatus, values_callable=enum_values), default=ProjectStatus.PLANNING, index=True)
    priority = Column(Enum(ProjectPriority, values_callable=enum_values), default=ProjectPriority.MEDIUM, index=True)
    tags = Column(JSON, default=list)
    progress = Column(Integer, default=0)
    budget_allocated = Column(Float, default=0, nullable=False)
    budget_spent = Column(Float, default=0, nullable=False)
    start_date = Column(DateTime, default=datetime.utcnow)
    end_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Foreign Keys
    owner_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Relationships
    owner = relationship("User", back_populates="owned_projects")
    members = relationship(
        "ProjectMember",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectMember.id"
    )
    tasks = relationship("Task", back_populates="project", cascade="all, delete-orphan")
    milestones = relationship(
        "ProjectMilestone",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectMilestone.id"
    )

    def has_member(self, user_id: str) -> bool:
        return any(member.user_id == user_id for member in self.members)

    @property
    def budget(self) -> dict:
        return {"allocated": self.budget_allocated or 0, "spent": self.budget_spent or 0}

    @property
    def remaining_budget(self) -> float:
        return (self.budget_allocated or 0) - (self.budget_spent or 0)

    @property
    def duration(self) -> Optional[int]:
        """Whole days from start to end, rounded up; None while the project is open-ended"""
        if not self.end_date or not self.start_date:
            return None
        return math.ceil((self.end_date - self.start_date).total_seconds() / 86400)

class ProjectMember(Base):
    __tablename__ = "project_members"
    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_project_member"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(String(32), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    # Not a foreign key: a team slot may name a user id before that account exists
    user_id = Column(String(64), nullable=False, index=True)
    role = Column(Enum(MemberRole, values_callable=enum_values), default=MemberRole.DEVELOPER)
    joined_at = Column(DateTime, default=datetime.utcnow)

    project = relationship("Project", back_populates="members")

class ProjectMilestone(Base):
    __tablename__ = "project_milestones"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(String(32), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(DateTime, nullable=True)
    status = Column(Enum(MilestoneStatus, values_callable=enum_values), default=MilestoneStatus.PENDING)
    completed_at = Column(DateTime, nullable=True)

    project = relationship("Project", back_populates="milestones")
