import logging
from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload
from app.core.exceptions import PermissionDeniedError, ValidationError
from app.models.project import (
    MilestoneStatus, Project, ProjectMember, ProjectMilestone, ProjectPriority, ProjectStatus
)
from app.models.task import Task, TaskStatus
from app.models.user import User, UserRole
from app.schemas.project import Budget, MemberCreate, MilestoneCreate, ProjectCreate, ProjectUpdate

logger = logging.getLogger(__name__)

PRIORITY_RANK = {
    ProjectPriority.LOW: 0,
    ProjectPriority.MEDIUM: 1,
    ProjectPriority.HIGH: 2,
    ProjectPriority.CRITICAL: 3,
}

STATUS_RANK = {status: index for index, status in enumerate(ProjectStatus)}

# Sort keys by public field name; ties keep creation order since sorted() is stable
SORT_KEYS = {
    "name": lambda p: p.name,
    "date": lambda p: p.created_at,
    "createdAt": lambda p: p.created_at,
    "priority": lambda p: PRIORITY_RANK[p.priority],
    "status": lambda p: STATUS_RANK[p.status],
}

SORT_ORDERS = ("asc", "desc")

class ProjectService:
    def __init__(self, db: Session):
        self.db = db

    def visible_query(self, user: User):
        query = self.db.query(Project).options(selectinload(Project.members))
        if user.role == UserRole.ADMIN:
            return query
        member_project_ids = select(ProjectMember.project_id).where(ProjectMember.user_id == user.id)
        return query.filter(or_(Project.owner_id == user.id, Project.id.in_(member_project_ids)))

    def can_view(self, project: Project, user: User) -> bool:
        return (
            user.role == UserRole.ADMIN
            or project.owner_id == user.id
            or project.has_member(user.id)
        )

    def can_manage(self, project: Project, user: User) -> bool:
        return user.role == UserRole.ADMIN or project.owner_id == user.id

    def ensure_can_view(self, project: Project, user: User) -> None:
        if not self.can_view(project, user):
            raise PermissionDeniedError("Access denied")

    def ensure_can_manage(self, project: Project, user: User) -> None:
        if not self.can_manage(project, user):
            raise PermissionDeniedError("Access denied. Only the project owner can modify this project")

    def create_project(self, project_data: ProjectCreate, owner: User) -> Project:
        project = Project(
            name=project_data.name,
            description=project_data.description,
            status=project_data.status,
            priority=project_data.priority,
            tags=list(project_data.tags),
            end_date=project_data.end_date,
            owner_id=owner.id
        )
        if project_data.start_date:
            project.start_date = project_data.start_date
        if project_data.budget:
            self._apply_budget(project, project_data.budget)
        project.milestones = self._build_milestones(project_data.milestones)

        self.db.add(project)
        self.db.commit()
        self.db.refresh(project)

        logger.info(f"Project created: {project.name} (ID: {project.id}) by user {owner.id}")
        return project

    def get_project(self, project_id: str) -> Optional[Project]:
        return (
            self.db.query(Project)
            .options(selectinload(Project.members))
            .filter(Project.id == project_id)
            .first()
        )

    def list_projects(self, user: User, page: int = 1, limit: int = 10) -> Tuple[List[Project], int]:
        query = self.visible_query(user)
        total = query.count()
        projects = (
            query.order_by(Project.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return projects, total

    def filter_projects(
        self,
        user: User,
        status: Optional[ProjectStatus] = None,
        priority: Optional[ProjectPriority] = None
    ) -> List[Project]:
        query = self.visible_query(user)

        if status:
            query = query.filter(Project.status == status)

        if priority:
            query = query.filter(Project.priority == priority)

        return query.order_by(Project.created_at).all()

    def sort_projects(self, user: User, field: str = "date", order: str = "asc") -> List[Project]:
        if field not in SORT_KEYS:
            raise ValidationError(
                f"Invalid sort field: {field}. Expected one of {', '.join(SORT_KEYS)}"
            )
        if order not in SORT_ORDERS:
            raise ValidationError("Invalid sort order: expected 'asc' or 'desc'")

        projects = self.visible_query(user).order_by(Project.created_at).all()
        return sorted(projects, key=SORT_KEYS[field], reverse=(order == "desc"))

    def search_projects(self, user: User, q: Optional[str]) -> List[Project]:
        """Case-insensitive substring match on name or description; a blank query matches everything"""
        query = self.visible_query(user)

        needle = (q or "").strip().lower()
        if needle:
            query = query.filter(or_(
                func.lower(Project.name).contains(needle, autoescape=True),
                func.lower(Project.description).contains(needle, autoescape=True)
            ))

        return query.order_by(Project.created_at).all()

    def _apply_budget(self, project: Project, budget: Budget) -> None:
        given = budget.model_dump(exclude_unset=True)
        if "allocated" in given:
            project.budget_allocated = given["allocated"]
        if "spent" in given:
            project.budget_spent = given["spent"]

    def _build_milestones(self, milestones: List[MilestoneCreate]) -> List[ProjectMilestone]:
        built = []
        for data in milestones:
            milestone = ProjectMilestone(**data.model_dump())
            if milestone.status == MilestoneStatus.COMPLETED:
                milestone.completed_at = datetime.utcnow()
            built.append(milestone)
        return built

    def update_project(self, project: Project, project_data: ProjectUpdate) -> Project:
        changes = project_data.model_dump(exclude_unset=True, exclude={"budget", "milestones"})

        # Budget merges field by field; milestones replace the whole list
        if project_data.budget is not None:
            self._apply_budget(project, project_data.budget)
        if project_data.milestones is not None:
            project.milestones = self._build_milestones(project_data.milestones)

        for field, value in changes.items():
            if value is None and field in ("name", "description", "status", "priority", "tags"):
                continue
            setattr(project, field, value)

        self.db.commit()
        self.db.refresh(project)
        logger.info(f"Project updated: {project.name} (ID: {project.id})")
        return project

    def update_status(self, project: Project, status: ProjectStatus) -> Project:
        old_status = project.status
        project.status = status
        self.db.commit()
        self.db.refresh(project)
        logger.info(f"Project {project.id} status changed from {old_status.value} to {status.value}")
        return project

    def delete_project(self, project: Project) -> None:
        project_id = project.id
        self.db.delete(project)
        self.db.commit()
        logger.info(f"Project deleted: {project_id}")

    def add_member(self, project: Project, member_data: MemberCreate) -> Project:
        user_id = member_data.user_id

        # Team is an ordered set: adding an existing member changes nothing
        if not project.has_member(user_id):
            project.members.append(ProjectMember(user_id=user_id, role=member_data.role))
            self.db.commit()
            logger.info(f"User {user_id} added to project {project.id} with role {member_data.role.value}")

        self.db.refresh(project)
        return project

    def remove_member(self, project: Project, user_id: str) -> Project:
        remaining = [member for member in project.members if member.user_id != user_id]
        if len(remaining) != len(project.members):
            project.members = remaining
            self.db.commit()
            logger.info(f"User {user_id} removed from project {project.id}")

        self.db.refresh(project)
        return project

    def recalculate_progress(self, project: Project) -> None:
        """Set progress to the rounded percentage of completed tasks; caller commits"""
        self.db.flush()
        total = self.db.query(func.count(Task.id)).filter(Task.project_id == project.id).scalar()
        if not total:
            project.progress = 0
            return
        completed = (
            self.db.query(func.count(Task.id))
            .filter(Task.project_id == project.id, Task.status == TaskStatus.COMPLETED)
            .scalar()
        )
        project.progress = round(completed / total * 100)
