# crud/user.py
from typing import Optional
from datetime import date
from sqlalchemy.orm import Session
from passlib.context import CryptContext

from mindful.models.user import User, SubscriptionTier
from mindful.schemas.user import UserCreate, UserUpdate

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class UserCRUD:
    """CRUD operations for User model."""

    # =====================================================================
    # HELPER METHODS
    # =====================================================================

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password."""
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        return pwd_context.verify(plain_password, hashed_password)

    # =====================================================================
    # CREATE OPERATIONS
    # =====================================================================

    def create(self, db: Session, *, obj_in: UserCreate) -> User:
        """
        Create a new user with zeroed streak fields.

        Args:
            db: Database session
            obj_in: UserCreate schema with registration data

        Returns:
            Created User instance
        """
        db_obj = User(
            username=obj_in.username,
            email=obj_in.email,
            password_hash=self.hash_password(obj_in.password),
            first_name=obj_in.first_name,
            last_name=obj_in.last_name,
            current_streak=0,
            longest_streak=0,
            last_entry_date=None,
            subscription_tier=SubscriptionTier.basic,
            ai_requests_count=0,
        )

        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get(self, db: Session, id: int) -> Optional[User]:
        """Get user by ID."""
        return db.query(User).filter(User.id == id).first()

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        """Get user by email."""
        return db.query(User).filter(User.email == email).first()

    def get_by_username(self, db: Session, username: str) -> Optional[User]:
        """Get user by username."""
        return db.query(User).filter(User.username == username).first()

    def get_by_stripe_customer(self, db: Session, customer_id: str) -> Optional[User]:
        """Get user by payment-provider customer id."""
        return db.query(User).filter(User.stripe_customer_id == customer_id).first()

    # =====================================================================
    # UPDATE OPERATIONS
    # =====================================================================

    def update(self, db: Session, *, db_obj: User, obj_in: UserUpdate) -> User:
        """
        Update user profile fields.

        Args:
            db: Database session
            db_obj: Existing User instance
            obj_in: UserUpdate schema with updated data

        Returns:
            Updated User instance
        """
        update_data = obj_in.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            if value is not None:
                setattr(db_obj, field, value)

        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update_streak(
        self,
        db: Session,
        *,
        user: User,
        current_streak: int,
        longest_streak: int,
        last_entry_date: date,
    ) -> User:
        """Persist all three streak fields in a single update."""
        user.current_streak = current_streak
        user.longest_streak = longest_streak
        user.last_entry_date = last_entry_date

        db.commit()
        db.refresh(user)
        return user

    def set_ai_usage(
        self, db: Session, *, user: User, count: int, reset_date: Optional[date] = None
    ) -> User:
        """Set the monthly AI request counter (and optionally its reset date)."""
        user.ai_requests_count = count
        if reset_date is not None:
            user.ai_requests_reset_date = reset_date

        db.commit()
        db.refresh(user)
        return user

    def set_subscription_tier(self, db: Session, *, user: User, tier: SubscriptionTier) -> User:
        """Mirror the subscription tier onto the user row."""
        user.subscription_tier = tier
        db.commit()
        db.refresh(user)
        return user

    def set_stripe_customer(self, db: Session, *, user: User, customer_id: str) -> User:
        """Store the payment-provider customer id."""
        user.stripe_customer_id = customer_id
        db.commit()
        db.refresh(user)
        return user


# Create singleton instance
crud_user = UserCRUD()
