from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from app.core.deps import get_current_user
from app.db.base import get_db
from app.models.task import Task, TaskPriority, TaskStatus
from app.models.user import User
from app.schemas.base import MessageResponse
from app.schemas.task import (
    CommentCreate, CommentListResponse, SubtaskCreate, TaskAssign, TaskCreate,
    TaskEnvelope, TaskListResponse, TaskStatusUpdate, TaskUpdate
)
from app.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["Tasks"])

def _get_visible_task(task_id: str, service: TaskService, user: User) -> Task:
    task = service.get_task(task_id)

    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found"
        )

    service.ensure_can_view(task, user)
    return task

@router.get("", response_model=TaskListResponse)
def list_tasks(
    project_id: Optional[str] = Query(None, alias="projectId"),
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    assigned_to: Optional[str] = Query(None, alias="assignedTo"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    tasks = TaskService(db).list_tasks(
        current_user,
        project_id=project_id,
        status=status,
        priority=priority,
        assigned_to=assigned_to
    )
    return {"tasks": tasks}

@router.get("/my-tasks", response_model=TaskListResponse)
def get_my_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"tasks": TaskService(db).list_assigned(current_user)}

@router.post("", response_model=TaskEnvelope, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    task = TaskService(db).create_task(task_data, current_user)
    return {"message": "Task created successfully", "task": task}

@router.get("/{task_id}", response_model=TaskEnvelope, response_model_exclude_none=True)
def get_task(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    task = _get_visible_task(task_id, TaskService(db), current_user)
    return {"task": task}

@router.put("/{task_id}", response_model=TaskEnvelope)
def update_task(
    task_id: str,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    service = TaskService(db)
    task = _get_visible_task(task_id, service, current_user)
    task = service.update_task(task, task_data)
    return {"message": "Task updated successfully", "task": task}

@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    service = TaskService(db)
    task = _get_visible_task(task_id, service, current_user)
    service.ensure_can_delete(task, current_user)
    service.delete_task(task)
    return {"message": "Task deleted successfully"}

@router.api_route("/{task_id}/status", methods=["PUT", "POST"], response_model=TaskEnvelope)
def update_task_status(
    task_id: str,
    payload: TaskStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    service = TaskService(db)
    task = _get_visible_task(task_id, service, current_user)
    task = service.update_status(task, payload.status)
    return {"message": "Task status updated successfully", "task": task}

@router.api_route("/{task_id}/assign", methods=["PUT", "POST"], response_model=TaskEnvelope)
def assign_task(
    task_id: str,
    payload: TaskAssign,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    service = TaskService(db)
    task = _get_visible_task(task_id, service, current_user)
    task = service.assign_task(task, payload.assigned_to)
    message = "Task assigned successfully" if task.assigned_to else "Task unassigned successfully"
    return {"message": message, "task": task}

@router.get("/{task_id}/comments", response_model=CommentListResponse)
def list_comments(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    task = _get_visible_task(task_id, TaskService(db), current_user)
    return {"comments": task.comments}

@router.post("/{task_id}/comments", response_model=TaskEnvelope)
def add_comment(
    task_id: str,
    payload: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    service = TaskService(db)
    task = _get_visible_task(task_id, service, current_user)
    task = service.add_comment(task, current_user, payload.text)
    return {"message": "Comment added successfully", "task": task}

@router.post("/{task_id}/subtasks", response_model=TaskEnvelope)
def add_subtask(
    task_id: str,
    payload: SubtaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    service = TaskService(db)
    task = _get_visible_task(task_id, service, current_user)
    task = service.add_subtask(task, payload.title)
    return {"message": "Subtask added successfully", "task": task}

@router.put("/{task_id}/subtasks/{subtask_id}", response_model=TaskEnvelope)
def toggle_subtask(
    task_id: str,
    subtask_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    service = TaskService(db)
    task = _get_visible_task(task_id, service, current_user)
    task = service.toggle_subtask(task, subtask_id)
    return {"message": "Subtask updated successfully", "task": task}
