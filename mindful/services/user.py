# services/user.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from mindful.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from mindful.models.user import User
from mindful.schemas.user import UserCreate, UserUpdate, LoginRequest
from mindful.crud.user import crud_user

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for registration, login and profile management."""

    def __init__(self):
        self.crud = crud_user

    def register_user(self, db: Session, user_data: UserCreate) -> User:
        """
        Create a new account.

        Raises:
            ConflictError: If email or username already exists
        """
        if self.crud.get_by_email(db, email=user_data.email):
            raise ConflictError("Email already registered")
        if self.crud.get_by_username(db, username=user_data.username):
            raise ConflictError("Username already taken")

        user = self.crud.create(db, obj_in=user_data)
        logger.info(f"Registered user {user.id}")
        return user

    def authenticate_user(self, db: Session, login_data: LoginRequest) -> User:
        """
        Check credentials.

        Raises:
            UnauthorizedError: If credentials are invalid
        """
        user = self.crud.get_by_email(db, email=login_data.email)
        if not user or not self.crud.verify_password(login_data.password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")
        return user

    def get_user(self, db: Session, user_id: int) -> User:
        user = self.crud.get(db, id=user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, db: Session, user: User, update_data: UserUpdate) -> User:
        return self.crud.update(db, db_obj=user, obj_in=update_data)


user_service = UserService()
