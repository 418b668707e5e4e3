from fastapi import APIRouter
from app.schemas.utility import AddRequest, DiscountRequest, MultiplyRequest, NumberResult
from app.services import math_utils

router = APIRouter(prefix="/calculator", tags=["Calculator"])

@router.post("/add", response_model=NumberResult)
def add(payload: AddRequest):
    return {"result": math_utils.add(payload.numbers)}

@router.post("/multiply", response_model=NumberResult)
def multiply(payload: MultiplyRequest):
    """Line total for ``quantity`` items at ``cost`` each"""
    return {"result": math_utils.multiply(payload.cost, payload.quantity)}

@router.post("/discount", response_model=NumberResult)
def discount(payload: DiscountRequest):
    return {"result": math_utils.apply_discount(payload.amount, payload.percentage)}
