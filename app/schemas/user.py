from pydantic import EmailStr, Field
from datetime import datetime
from typing import Optional, List
from app.models.user import UserRole
from app.schemas.base import CamelModel, Pagination

class UserBase(CamelModel):
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)

class UserCreate(UserBase):
    password: str = Field(..., min_length=1)

class ProfileUpdate(CamelModel):
    email: Optional[EmailStr] = None
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)

class UserUpdate(ProfileUpdate):
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

class UserResponse(CamelModel):
    id: str
    email: str
    username: str
    first_name: str
    last_name: str
    role: UserRole
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime] = None

class UserEnvelope(CamelModel):
    message: Optional[str] = None
    user: UserResponse

class UserListResponse(CamelModel):
    users: List[UserResponse]
    pagination: Optional[Pagination] = None

class RoleCount(CamelModel):
    role: UserRole
    count: int

class UserStatsResponse(CamelModel):
    total_users: int
    role_distribution: List[RoleCount]
