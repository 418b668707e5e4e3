from typing import Optional
from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.core.deps import get_bearer_token, get_current_user, require_role
from app.core.exceptions import AuthenticationError, PermissionDeniedError
from app.db.base import get_db
from app.models.user import User, UserRole
from app.schemas.auth import (
    AuthResponse, ChangePasswordRequest, ForgotPasswordRequest, ForgotPasswordResponse,
    LoginRequest, LogoutRequest, RefreshResponse, ResetPasswordRequest, TokenRequest,
    ValidateResponse
)
from app.schemas.base import MessageResponse
from app.schemas.user import ProfileUpdate, UserCreate, UserEnvelope, UserListResponse, UserUpdate
from app.services.auth_service import AuthService
from app.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Auth"])

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    service = AuthService(db)
    user, token = service.register(user_data)
    return {
        "message": "User registered successfully",
        "token": token,
        "expires_in": service.expires_in(),
        "user": user
    }

@router.post("/login", response_model=AuthResponse)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    service = AuthService(db)
    user, token = service.login(credentials.email, credentials.password)
    return {
        "message": "Login successful",
        "token": token,
        "expires_in": service.expires_in(),
        "user": user
    }

@router.post("/refresh", response_model=RefreshResponse)
def refresh_token(payload: TokenRequest, db: Session = Depends(get_db)):
    service = AuthService(db)
    token = service.refresh(payload.token)
    return {
        "message": "Token refreshed successfully",
        "token": token,
        "expires_in": service.expires_in()
    }

@router.post("/logout", response_model=MessageResponse)
def logout(
    payload: Optional[LogoutRequest] = Body(None),
    bearer: Optional[str] = Depends(get_bearer_token),
    db: Session = Depends(get_db)
):
    token = (payload.token if payload else None) or bearer
    if not token:
        raise AuthenticationError("Access denied. No token provided.")

    AuthService(db).logout(token)
    return {"message": "Logged out successfully"}

@router.post("/validate", response_model=ValidateResponse, response_model_exclude_none=True)
def validate_token(payload: TokenRequest, db: Session = Depends(get_db)):
    user = AuthService(db).validate(payload.token)
    if user is None or not user.is_active:
        return {"valid": False}
    return {"valid": True, "user_id": user.id}

@router.get("/profile", response_model=UserEnvelope, response_model_exclude_none=True)
def get_profile(current_user: User = Depends(get_current_user)):
    return {"user": current_user}

@router.put("/profile", response_model=UserEnvelope)
def update_profile(
    profile_data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user = UserService(db).update_user(current_user, profile_data, current_user)
    return {"message": "Profile updated successfully", "user": user}

@router.post("/change-password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    AuthService(db).change_password(current_user, payload.current_password, payload.new_password)
    return {"message": "Password changed successfully"}

@router.post("/forgot-password", response_model=ForgotPasswordResponse)
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)):
    reset_token = AuthService(db).forgot_password(payload.email)
    return {
        "message": "Password reset token generated",
        "reset_token": reset_token
    }

@router.post("/reset-password", response_model=MessageResponse)
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    AuthService(db).reset_password(payload.token, payload.new_password)
    return {"message": "Password reset successfully"}

@router.api_route("/users", methods=["GET", "POST"], response_model=UserListResponse, response_model_exclude_none=True)
def list_all_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role([UserRole.ADMIN]))
):
    users, _ = UserService(db).list_users(limit=1000, active_only=False)
    return {"users": users}

def _load_managed_user(user_id: str, db: Session, current_user: User) -> User:
    if current_user.id != user_id and current_user.role != UserRole.ADMIN:
        raise PermissionDeniedError("Access denied")

    user = UserService(db).get_user(user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user

@router.put("/users/{user_id}", response_model=UserEnvelope)
def update_user(
    user_id: str,
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user = _load_managed_user(user_id, db, current_user)
    user = UserService(db).update_user(user, user_data, current_user)
    return {"message": "User updated successfully", "user": user}

@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user = _load_managed_user(user_id, db, current_user)
    UserService(db).delete_user(user)
    return {"message": "User deleted successfully"}
