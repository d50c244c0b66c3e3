# schemas/journal_entry.py
from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ----------------------
# Analysis payload
# ----------------------

class SentimentScore(BaseModel):
    score: float = Field(..., ge=1, le=5, description="1 = very negative, 5 = very positive")
    label: str


class Recommendation(BaseModel):
    activity: str
    reason: str = ""
    duration: str = ""
    benefit: str = ""


class EntryAnalysis(BaseModel):
    sentiment: SentimentScore
    themes: List[str] = Field(default_factory=list)
    insights: str = ""
    recommendations: List[Recommendation] = Field(default_factory=list)


# ----------------------
# Entry requests
# ----------------------

class EntryCreate(BaseModel):
    content: str = Field(..., min_length=1, description="Journal entry text")
    mood: int = Field(..., ge=1, le=5, description="Mood rating 1-5")
    tags: List[str] = Field(default_factory=list)


class EntryUpdate(BaseModel):
    content: Optional[str] = Field(None, min_length=1)
    mood: Optional[int] = Field(None, ge=1, le=5)
    tags: Optional[List[str]] = None


# ----------------------
# Entry responses
# ----------------------

class EntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    content: str
    mood: int
    tags: Optional[List[str]] = None
    analysis: Optional[EntryAnalysis] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
