from fastapi import APIRouter
from app.core.config import settings
from app.core.exceptions import ValidationError
from app.schemas.utility import (
    AddDaysRequest, BoolResult, CurrentDateResponse, DateRequest, DiffDaysRequest,
    IntResult, StringResult
)
from app.services import date_utils

router = APIRouter(prefix="/datetime", tags=["Date utilities"])

@router.post("/current", response_model=CurrentDateResponse)
def current():
    return {"current": date_utils.current_timestamp()}

@router.post("/add-days", response_model=StringResult)
def add_days(payload: AddDaysRequest):
    try:
        result = date_utils.add_days(payload.date, payload.days)
    except OverflowError:
        raise ValidationError("Invalid days: resulting date is out of range")
    return {"result": result.isoformat()}

@router.post("/diff-days", response_model=IntResult)
def diff_days(payload: DiffDaysRequest):
    return {"result": date_utils.diff_days(payload.start, payload.end)}

@router.post("/format", response_model=StringResult)
def format_date(payload: DateRequest):
    return {"result": date_utils.format_long(payload.date)}

@router.post("/is-weekend", response_model=BoolResult)
def is_weekend(payload: DateRequest):
    return {"result": date_utils.is_weekend(payload.date)}

@router.post("/due-soon", response_model=BoolResult)
def due_soon(payload: DateRequest):
    return {"result": date_utils.is_due_soon(payload.date, settings.DUE_SOON_DAYS)}
