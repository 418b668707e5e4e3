from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_current_user
from app.db.base import get_db
from app.models.user import User
from app.schemas.project import ProjectResponse
from app.schemas.task import TaskResponse
from app.schemas.user import UserResponse
from app.schemas.utility import (
    BoolResult, FactorialRequest, FibonacciRequest, IntResult, PrimesResponse,
    SequenceResult, TextRequest
)
from app.services import math_utils, text_utils
from app.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/advanced", tags=["Advanced"])

@router.post("/fibonacci", response_model=SequenceResult)
def fibonacci(payload: FibonacciRequest, current_user: User = Depends(get_current_user)):
    return {"result": math_utils.fibonacci(payload.n)}

@router.post("/factorial", response_model=IntResult)
def factorial(payload: FactorialRequest, current_user: User = Depends(get_current_user)):
    return {"result": math_utils.factorial(payload.number)}

@router.post("/palindrome", response_model=BoolResult)
def palindrome(payload: TextRequest, current_user: User = Depends(get_current_user)):
    return {"result": text_utils.is_palindrome(payload.text)}

@router.get("/primes", response_model=PrimesResponse)
def primes(
    limit: int = Query(100, ge=1, le=10000),
    current_user: User = Depends(get_current_user)
):
    found = math_utils.first_primes(limit)
    return {"primes": found, "limit": limit, "count": len(found)}

@router.get("/stats")
def statistics(
    project_id: Optional[str] = Query(None, alias="projectId"),
    time_range: Literal["day", "week", "month", "year"] = Query("month", alias="timeRange"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return AnalyticsService(db).get_statistics(current_user, project_id, time_range)

@router.get("/search")
def search(
    q: str = Query(..., min_length=1, max_length=200),
    type: Literal["all", "tasks", "projects", "users"] = "all",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    found = AnalyticsService(db).search(current_user, q, type)
    serializers = {"tasks": TaskResponse, "projects": ProjectResponse, "users": UserResponse}
    results = {
        key: [serializers[key].model_validate(item).model_dump(mode="json", by_alias=True) for item in items]
        for key, items in found.items()
    }
    return {"query": q, "type": type, "results": results}
