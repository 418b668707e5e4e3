import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload
from app.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from app.models.project import Project
from app.models.task import Subtask, Task, TaskComment, TaskPriority, TaskStatus
from app.models.user import User, UserRole
from app.schemas.task import TaskCreate, TaskUpdate
from app.services.project_service import ProjectService

logger = logging.getLogger(__name__)

class TaskService:
    def __init__(self, db: Session):
        self.db = db
        self.projects = ProjectService(db)

    def _base_query(self):
        return self.db.query(Task).options(
            selectinload(Task.comments),
            selectinload(Task.subtasks)
        )

    def _resolve_assignee(self, user_id: Optional[str]) -> Optional[str]:
        if user_id is None:
            return None
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise ValidationError("Invalid user: no user with that id exists")
        return user.id

    def _set_status(self, task: Task, status: TaskStatus) -> None:
        task.status = status
        if status == TaskStatus.COMPLETED:
            task.completed_at = task.completed_at or datetime.utcnow()
        else:
            task.completed_at = None

    def ensure_can_view(self, task: Task, user: User) -> None:
        self.projects.ensure_can_view(task.project, user)

    def ensure_can_delete(self, task: Task, user: User) -> None:
        if user.role == UserRole.ADMIN:
            return
        if task.project.owner_id != user.id and task.reporter_id != user.id:
            raise PermissionDeniedError(
                "Access denied. Only project owner or task reporter can delete task"
            )

    def create_task(self, task_data: TaskCreate, reporter: User) -> Task:
        project = self.db.query(Project).filter(Project.id == task_data.project_id).first()
        if not project:
            raise NotFoundError("Project not found")
        self.projects.ensure_can_view(project, reporter)

        task = Task(
            title=task_data.title,
            description=task_data.description,
            priority=task_data.priority,
            type=task_data.type,
            due_date=task_data.due_date,
            estimated_hours=task_data.estimated_hours,
            actual_hours=task_data.actual_hours,
            tags=list(task_data.tags),
            project_id=project.id,
            reporter_id=reporter.id,
            assigned_to=self._resolve_assignee(task_data.assigned_to)
        )
        self._set_status(task, task_data.status)
        self.db.add(task)

        self.projects.recalculate_progress(project)
        self.db.commit()
        self.db.refresh(task)

        logger.info(f"Task created: {task.title} (ID: {task.id}) in project {project.id}")
        return task

    def get_task(self, task_id: str) -> Optional[Task]:
        return self._base_query().filter(Task.id == task_id).first()

    def list_tasks(
        self,
        user: User,
        project_id: Optional[str] = None,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        assigned_to: Optional[str] = None
    ) -> List[Task]:
        """Tasks the user is assigned to or reported, narrowed by the given filters"""
        query = self._base_query().filter(
            or_(Task.assigned_to == user.id, Task.reporter_id == user.id)
        )

        if project_id:
            query = query.filter(Task.project_id == project_id)

        if status:
            query = query.filter(Task.status == status)

        if priority:
            query = query.filter(Task.priority == priority)

        if assigned_to:
            query = query.filter(Task.assigned_to == assigned_to)

        return query.order_by(Task.created_at).all()

    def list_assigned(self, user: User) -> List[Task]:
        return self._base_query().filter(Task.assigned_to == user.id).order_by(Task.created_at).all()

    def list_project_tasks(self, project: Project) -> List[Task]:
        return self._base_query().filter(Task.project_id == project.id).order_by(Task.created_at).all()

    def update_task(self, task: Task, task_data: TaskUpdate) -> Task:
        changes = task_data.model_dump(exclude_unset=True)

        if "assigned_to" in changes:
            task.assigned_to = self._resolve_assignee(changes.pop("assigned_to"))

        status = changes.pop("status", None)
        if status is not None:
            self._set_status(task, status)

        for field, value in changes.items():
            if value is None and field in ("title", "description", "priority", "type", "tags"):
                continue
            setattr(task, field, value)

        if status is not None:
            self.projects.recalculate_progress(task.project)
        self.db.commit()
        self.db.refresh(task)

        logger.info(f"Task updated: {task.title} (ID: {task.id})")
        return task

    def update_status(self, task: Task, status: TaskStatus) -> Task:
        old_status = task.status
        self._set_status(task, status)
        self.projects.recalculate_progress(task.project)
        self.db.commit()
        self.db.refresh(task)

        logger.info(f"Task {task.id} status changed from {old_status.value} to {status.value}")
        return task

    def assign_task(self, task: Task, user_id: Optional[str]) -> Task:
        task.assigned_to = self._resolve_assignee(user_id)
        self.db.commit()
        self.db.refresh(task)

        logger.info(f"Task {task.id} assigned to {task.assigned_to or 'nobody'}")
        return task

    def delete_task(self, task: Task) -> None:
        project = task.project
        task_id = task.id
        self.db.delete(task)
        self.projects.recalculate_progress(project)
        self.db.commit()
        logger.info(f"Task deleted: {task_id}")

    def add_comment(self, task: Task, author: User, text: str) -> Task:
        task.comments.append(TaskComment(author_id=author.id, text=text))
        self.db.commit()
        self.db.refresh(task)
        return task

    def add_subtask(self, task: Task, title: str) -> Task:
        task.subtasks.append(Subtask(title=title))
        self.db.commit()
        self.db.refresh(task)
        return task

    def toggle_subtask(self, task: Task, subtask_id: int) -> Task:
        subtask = next((s for s in task.subtasks if s.id == subtask_id), None)
        if subtask is None:
            raise NotFoundError("Subtask not found")

        subtask.completed = not subtask.completed
        self.db.commit()
        self.db.refresh(task)
        return task
