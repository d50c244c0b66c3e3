# mindful/api/routers/auth.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from mindful.core.config import get_db
from mindful.core.security import (
    create_access_token,
    create_refresh_token,
    get_current_user,
    verify_refresh_token,
)
from mindful.services.user import user_service
from mindful.models.user import User
from mindful.schemas.user import (
    UserCreate,
    UserUpdate,
    UserOut,
    LoginRequest,
    TokenResponse,
    RefreshTokenRequest,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _issue_tokens(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(data={"sub": str(user.id)}),
        refresh_token=create_refresh_token(data={"sub": str(user.id)}),
        user=UserOut.model_validate(user),
    )


# =====================================================================
# PUBLIC ENDPOINTS - No authentication required
# =====================================================================

@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user account"
)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """
    Register a new account and sign in.

    Streak fields start at zero and the account starts on the basic tier.
    """
    user = user_service.register_user(db, user_data)
    return _issue_tokens(user)


@router.post("/login", response_model=TokenResponse, summary="Login to get access token")
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    user = user_service.authenticate_user(db, login_data)
    return _issue_tokens(user)


@router.post("/refresh", response_model=TokenResponse, summary="Refresh access token")
def refresh_token(refresh_data: RefreshTokenRequest, db: Session = Depends(get_db)):
    user_id = verify_refresh_token(refresh_data.refresh_token)
    user = user_service.get_user(db, user_id)
    return _issue_tokens(user)


# =====================================================================
# USER ENDPOINTS - Authentication required
# =====================================================================

@router.get("/me", response_model=UserOut, summary="Get current user profile")
def get_current_user_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=UserOut, summary="Update current user profile")
def update_current_user_profile(
    update_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return user_service.update_profile(db, current_user, update_data)
