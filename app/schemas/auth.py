from pydantic import EmailStr, Field
from typing import Optional
from app.schemas.base import CamelModel
from app.schemas.user import UserResponse

class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

class TokenRequest(CamelModel):
    token: str = Field(..., min_length=1)

class LogoutRequest(CamelModel):
    token: Optional[str] = None

class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)

class ForgotPasswordRequest(CamelModel):
    email: EmailStr

class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)

class AuthResponse(CamelModel):
    message: str
    token: str
    expires_in: str
    user: UserResponse

class RefreshResponse(CamelModel):
    message: str
    token: str
    expires_in: str

class ValidateResponse(CamelModel):
    valid: bool
    user_id: Optional[str] = None

class ForgotPasswordResponse(CamelModel):
    message: str
    reset_token: str

class TokenData(CamelModel):
    user_id: str
    session_id: str
