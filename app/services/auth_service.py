import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.exceptions import AuthenticationError, NotFoundError, ValidationError
from app.core.security import (
    create_access_token,
    decode_access_token,
    format_expires_in,
    generate_reset_token,
    get_password_hash,
    needs_rehash,
    verify_password,
)
from app.models.user import AuthSession, User, UserRole
from app.schemas.auth import TokenData
from app.schemas.user import UserCreate

logger = logging.getLogger(__name__)

class AuthService:
    """Registration, credentials and the bearer-token session lifecycle"""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def expires_in() -> str:
        return format_expires_in(settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    def _check_password_strength(self, password: str) -> None:
        if len(password) < settings.MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters long"
            )

    def register(self, user_data: UserCreate, role: UserRole = UserRole.USER) -> Tuple[User, str]:
        self._check_password_strength(user_data.password)

        email = user_data.email.lower()
        if self.db.query(User).filter(User.email == email).first():
            raise ValidationError("Email already registered")
        if self.db.query(User).filter(User.username == user_data.username).first():
            raise ValidationError("Username already taken")

        user = User(
            email=email,
            username=user_data.username,
            hashed_password=get_password_hash(user_data.password),
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            role=role
        )
        self.db.add(user)
        self.db.flush()

        token = self._issue_token(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"User registered: {user.email} (ID: {user.id})")
        return user, token

    def login(self, email: str, password: str) -> Tuple[User, str]:
        user = self.db.query(User).filter(User.email == email.lower()).first()
        if not user or not verify_password(password, user.hashed_password):
            logger.warning(f"Failed login attempt for {email}")
            raise AuthenticationError("Invalid credentials")
        if not user.is_active:
            raise AuthenticationError("Account is disabled")

        if needs_rehash(user.hashed_password):
            user.hashed_password = get_password_hash(password)

        user.last_login = datetime.utcnow()
        token = self._issue_token(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"User logged in: {user.email}")
        return user, token

    def refresh(self, token: str) -> str:
        """Exchange a valid token for a fresh one; the old token stops working"""
        session = self._active_session(token)
        if session is None:
            raise AuthenticationError("Invalid token")

        session.revoked_at = datetime.utcnow()
        new_token = self._issue_token(session.user)
        self.db.commit()
        return new_token

    def logout(self, token: str) -> None:
        session = self._active_session(token)
        if session is None:
            return
        session.revoked_at = datetime.utcnow()
        self.db.commit()
        logger.info(f"Session {session.id} revoked for user {session.user_id}")

    def validate(self, token: str) -> Optional[User]:
        """Return the token's user when the token is genuine, unexpired and not revoked"""
        session = self._active_session(token)
        return session.user if session else None

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.hashed_password):
            raise ValidationError("Current password is incorrect")
        self._check_password_strength(new_password)

        user.hashed_password = get_password_hash(new_password)
        self.db.commit()
        logger.info(f"Password changed for user {user.id}")

    def forgot_password(self, email: str) -> str:
        user = self.db.query(User).filter(User.email == email.lower()).first()
        if not user:
            raise NotFoundError("User not found")

        user.reset_token = generate_reset_token()
        user.reset_token_expires_at = datetime.utcnow() + timedelta(
            minutes=settings.RESET_TOKEN_EXPIRE_MINUTES
        )
        self.db.commit()

        logger.info(f"Password reset requested for user {user.id}")
        return user.reset_token

    def reset_password(self, reset_token: str, new_password: str) -> None:
        user = self.db.query(User).filter(User.reset_token == reset_token).first()
        if (
            not user
            or user.reset_token_expires_at is None
            or user.reset_token_expires_at < datetime.utcnow()
        ):
            raise ValidationError("Invalid or expired reset token")
        self._check_password_strength(new_password)

        user.hashed_password = get_password_hash(new_password)
        user.reset_token = None
        user.reset_token_expires_at = None
        self._revoke_all_sessions(user)
        self.db.commit()

        logger.info(f"Password reset completed for user {user.id}")

    def ensure_admin(self, email: str, password: str) -> User:
        """Create the bootstrap admin account unless a user with that email exists"""
        existing = self.db.query(User).filter(User.email == email.lower()).first()
        if existing:
            logger.info(f"Admin user already exists (email: {existing.email})")
            return existing

        user = User(
            email=email.lower(),
            username=email.split("@")[0],
            hashed_password=get_password_hash(password),
            first_name="Admin",
            last_name="User",
            role=UserRole.ADMIN
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Admin user created: {user.email} (ID: {user.id})")
        return user

    def _issue_token(self, user: User) -> str:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        session = AuthSession(user_id=user.id, expires_at=datetime.utcnow() + expires_delta)
        self.db.add(session)
        self.db.flush()
        return create_access_token({"sub": user.id, "jti": session.id}, expires_delta)

    def _active_session(self, token: str) -> Optional[AuthSession]:
        token_data = self.decode(token)
        if token_data is None:
            return None

        session = self.db.query(AuthSession).filter(AuthSession.id == token_data.session_id).first()
        if not session or session.user_id != token_data.user_id or not session.is_active:
            return None
        return session

    def _revoke_all_sessions(self, user: User) -> None:
        now = datetime.utcnow()
        for session in user.sessions:
            if session.revoked_at is None:
                session.revoked_at = now

    @staticmethod
    def decode(token: str) -> Optional[TokenData]:
        payload = decode_access_token(token)
        if not payload or "sub" not in payload or "jti" not in payload:
            return None
        return TokenData(user_id=payload["sub"], session_id=payload["jti"])
