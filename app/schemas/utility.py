from pydantic import Field
import datetime as dt
from typing import List, Union
from app.schemas.base import CamelModel

Number = Union[int, float]

class TextRequest(CamelModel):
    text: str

class CapitalizeResponse(CamelModel):
    capitalized: str

class SlugResponse(CamelModel):
    slug: str

class CountResponse(CamelModel):
    count: int

class AddRequest(CamelModel):
    numbers: List[Number]

class MultiplyRequest(CamelModel):
    cost: Number
    quantity: Number = Field(..., ge=0)

class DiscountRequest(CamelModel):
    amount: Number = Field(..., ge=0)
    percentage: Number = Field(..., ge=0, le=100)

class NumberResult(CamelModel):
    result: Number

class DateRequest(CamelModel):
    date: dt.date

class AddDaysRequest(CamelModel):
    date: dt.date
    days: int

class DiffDaysRequest(CamelModel):
    start: dt.date
    end: dt.date

class CurrentDateResponse(CamelModel):
    current: str

class StringResult(CamelModel):
    result: str

class IntResult(CamelModel):
    result: int

class BoolResult(CamelModel):
    result: bool

class FibonacciRequest(CamelModel):
    n: int = Field(..., ge=0, le=1000)

class FactorialRequest(CamelModel):
    number: int = Field(..., ge=0, le=1000)

class SequenceResult(CamelModel):
    result: List[int]

class PrimesResponse(CamelModel):
    primes: List[int]
    limit: int
    count: int
