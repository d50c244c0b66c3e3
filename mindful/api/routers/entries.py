# mindful/api/routers/entries.py
from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from mindful.core.config import get_db
from mindful.core.security import get_current_user
from mindful.services.journal import journal_service
from mindful.models.user import User
from mindful.schemas.journal_entry import EntryCreate, EntryUpdate, EntryOut

router = APIRouter(prefix="/api/entries", tags=["Journal Entries"])


@router.get("", response_model=List[EntryOut], summary="List my journal entries")
def list_entries(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Newest entries first."""
    return journal_service.list_entries(db, current_user, skip=skip, limit=limit)


@router.post(
    "",
    response_model=EntryOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a journal entry"
)
def create_entry(
    entry_data: EntryCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create a journal entry.

    - Runs sentiment analysis (falls back to a neutral result on provider errors)
    - Updates the daily streak and unlocks any earned achievements
    """
    return journal_service.create_entry(db, entry_data, current_user)


@router.get("/{entry_id}", response_model=EntryOut, summary="Get a journal entry")
def get_entry(
    entry_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return journal_service.get_entry(db, entry_id, current_user)


@router.put("/{entry_id}", response_model=EntryOut, summary="Update a journal entry")
def update_entry(
    entry_id: int,
    update_data: EntryUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update content, mood or tags.

    Sentiment analysis is re-run when content or mood change. Editing never
    affects the streak.
    """
    return journal_service.update_entry(db, entry_id, update_data, current_user)
