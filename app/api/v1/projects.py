import math
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from app.core.deps import get_current_user
from app.db.base import get_db
from app.models.project import Project, ProjectPriority, ProjectStatus
from app.models.user import User
from app.schemas.base import MessageResponse
from app.schemas.project import (
    MemberCreate, ProjectCreate, ProjectEnvelope, ProjectListResponse,
    ProjectStatusUpdate, ProjectUpdate
)
from app.schemas.task import TaskListResponse
from app.services.project_service import ProjectService
from app.services.task_service import TaskService

router = APIRouter(prefix="/projects", tags=["Projects"])

def _get_visible_project(project_id: str, service: ProjectService, user: User) -> Project:
    project = service.get_project(project_id)

    if not project:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found"
        )

    service.ensure_can_view(project, user)
    return project

def _get_managed_project(project_id: str, service: ProjectService, user: User) -> Project:
    project = _get_visible_project(project_id, service, user)
    service.ensure_can_manage(project, user)
    return project

@router.get("", response_model=ProjectListResponse)
def list_projects(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    projects, total = ProjectService(db).list_projects(current_user, page, limit)
    return {
        "projects": projects,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit)
        }
    }

@router.get("/filter", response_model=ProjectListResponse, response_model_exclude_none=True)
def filter_projects(
    status: Optional[ProjectStatus] = None,
    priority: Optional[ProjectPriority] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    projects = ProjectService(db).filter_projects(current_user, status=status, priority=priority)
    return {"projects": projects}

@router.get("/sort", response_model=ProjectListResponse, response_model_exclude_none=True)
def sort_projects(
    field: str = "date",
    order: str = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    projects = ProjectService(db).sort_projects(current_user, field=field, order=order.lower())
    return {"projects": projects}

@router.get("/search", response_model=ProjectListResponse, response_model_exclude_none=True)
def search_projects(
    q: Optional[str] = Query(None, max_length=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    projects = ProjectService(db).search_projects(current_user, q)
    return {"projects": projects}

@router.post("", response_model=ProjectEnvelope, status_code=status.HTTP_201_CREATED)
def create_project(
    project_data: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    project = ProjectService(db).create_project(project_data, current_user)
    return {"message": "Project created successfully", "project": project}

@router.get("/{project_id}", response_model=ProjectEnvelope, response_model_exclude_none=True)
def get_project(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    project = _get_visible_project(project_id, ProjectService(db), current_user)
    return {"project": project}

@router.put("/{project_id}", response_model=ProjectEnvelope)
def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    service = ProjectService(db)
    project = _get_managed_project(project_id, service, current_user)
    project = service.update_project(project, project_data)
    return {"message": "Project updated successfully", "project": project}

@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    service = ProjectService(db)
    project = _get_managed_project(project_id, service, current_user)
    service.delete_project(project)
    return {"message": "Project deleted successfully"}

@router.api_route("/{project_id}/status", methods=["PUT", "POST"], response_model=ProjectEnvelope)
def update_project_status(
    project_id: str,
    payload: ProjectStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    service = ProjectService(db)
    project = _get_managed_project(project_id, service, current_user)
    project = service.update_status(project, payload.status)
    return {"message": "Project status updated successfully", "project": project}

@router.post("/{project_id}/members", response_model=ProjectEnvelope, status_code=status.HTTP_201_CREATED)
def add_team_member(
    project_id: str,
    member_data: MemberCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    service = ProjectService(db)
    project = _get_managed_project(project_id, service, current_user)
    project = service.add_member(project, member_data)
    return {"message": "Team member added successfully", "project": project}

@router.delete("/{project_id}/members/{user_id}", response_model=ProjectEnvelope)
def remove_team_member(
    project_id: str,
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    service = ProjectService(db)
    project = _get_managed_project(project_id, service, current_user)
    project = service.remove_member(project, user_id)
    return {"message": "Team member removed successfully", "project": project}

@router.get("/{project_id}/tasks", response_model=TaskListResponse)
def list_project_tasks(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    project = _get_visible_project(project_id, ProjectService(db), current_user)
    return {"tasks": TaskService(db).list_project_tasks(project)}
