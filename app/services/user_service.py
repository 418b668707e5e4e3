import logging
from typing import List, Optional, Tuple
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from app.core.exceptions import PermissionDeniedError, ValidationError
from app.models.project import ProjectMember
from app.models.task import Task, TaskComment
from app.models.user import User, UserRole
from app.schemas.user import ProfileUpdate, UserUpdate

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def list_users(
        self,
        search: Optional[str] = None,
        role: Optional[UserRole] = None,
        page: int = 1,
        limit: int = 20,
        active_only: bool = True
    ) -> Tuple[List[User], int]:
        query = self.db.query(User)

        if active_only:
            query = query.filter(User.is_active.is_(True))

        if search:
            needle = search.lower()
            query = query.filter(or_(
                func.lower(User.username).contains(needle, autoescape=True),
                func.lower(User.first_name).contains(needle, autoescape=True),
                func.lower(User.last_name).contains(needle, autoescape=True),
                func.lower(User.email).contains(needle, autoescape=True)
            ))

        if role:
            query = query.filter(User.role == role)

        total = query.count()
        users = (
            query.order_by(User.first_name, User.last_name, User.created_at)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return users, total

    def get_statistics(self) -> dict:
        """Active-user count and how those users split across roles"""
        rows = (
            self.db.query(User.role, func.count(User.id))
            .filter(User.is_active.is_(True))
            .group_by(User.role)
            .order_by(User.role)
            .all()
        )
        return {
            "totalUsers": sum(count for _, count in rows),
            "roleDistribution": [{"role": role.value, "count": count} for role, count in rows],
        }

    def update_user(self, user: User, data: ProfileUpdate, acting_user: User) -> User:
        changes = data.model_dump(exclude_unset=True)

        if isinstance(data, UserUpdate) and acting_user.role != UserRole.ADMIN:
            if "role" in changes or "is_active" in changes:
                raise PermissionDeniedError("Only administrators can change role or account status")

        if changes.get("email") is not None:
            changes["email"] = changes["email"].lower()
            clash = self.db.query(User).filter(User.email == changes["email"], User.id != user.id).first()
            if clash:
                raise ValidationError("Email already registered")

        if changes.get("username") is not None:
            clash = self.db.query(User).filter(User.username == changes["username"], User.id != user.id).first()
            if clash:
                raise ValidationError("Username already taken")

        for field, value in changes.items():
            if value is None:
                continue
            setattr(user, field, value)

        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User updated: {user.email} (ID: {user.id}) by {acting_user.id}")
        return user

    def delete_user(self, user: User) -> None:
        """
        Delete an account. Sessions, memberships and owned projects go with it;
        tasks, reports and comments elsewhere are detached from the user.
        """
        self.db.query(Task).filter(Task.assigned_to == user.id).update(
            {Task.assigned_to: None}, synchronize_session=False
        )
        self.db.query(Task).filter(Task.reporter_id == user.id).update(
            {Task.reporter_id: None}, synchronize_session=False
        )
        self.db.query(TaskComment).filter(TaskComment.author_id == user.id).update(
            {TaskComment.author_id: None}, synchronize_session=False
        )
        self.db.query(ProjectMember).filter(ProjectMember.user_id == user.id).delete(
            synchronize_session=False
        )

        user_id, email = user.id, user.email
        self.db.delete(user)
        self.db.commit()
        self.db.expire_all()
        logger.info(f"User deleted: {email} (ID: {user_id})")
