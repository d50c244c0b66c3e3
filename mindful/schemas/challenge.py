# schemas/challenge.py
from typing import Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class GeneratedChallenge(BaseModel):
    """Shape expected back from the LLM provider."""
    challenge: str = Field(..., min_length=1)
    category: str = "mindfulness"
    difficulty: str = "easy"


class ChallengeComplete(BaseModel):
    reflection_note: Optional[str] = Field(None, max_length=2000)


class ChallengeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    challenge: str
    category: str
    difficulty: str
    completed: bool
    completed_at: Optional[datetime] = None
    reflection_note: Optional[str] = None
    created_at: datetime
