from typing import List, Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from app.core.exceptions import AuthenticationError, PermissionDeniedError
from app.db.base import get_db
from app.models.user import User, UserRole
from app.services.auth_service import AuthService

bearer_scheme = HTTPBearer(auto_error=False)

def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[str]:
    return credentials.credentials if credentials else None

def get_current_user(
    token: Optional[str] = Depends(get_bearer_token),
    db: Session = Depends(get_db)
) -> User:
    if not token:
        raise AuthenticationError("Access denied. No token provided.")

    user = AuthService(db).validate(token)
    if user is None or not user.is_active:
        raise AuthenticationError("Invalid token")

    return user

def require_role(roles: List[UserRole]):
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise PermissionDeniedError("Admin access required")
        return current_user
    return role_checker
