# schemas/goal.py
from typing import Literal, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

Frequency = Literal["daily", "weekly", "monthly"]


class GoalCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    category: str = Field(..., min_length=1, max_length=100)
    target_value: int = Field(..., gt=0)
    frequency: Frequency
    start_date: datetime
    end_date: Optional[datetime] = None


class GoalUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    target_value: Optional[int] = Field(None, gt=0)
    frequency: Optional[Frequency] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_completed: Optional[bool] = None


class GoalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    category: str
    target_value: int
    current_value: int
    frequency: str
    start_date: datetime
    end_date: Optional[datetime] = None
    is_completed: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class ProgressCreate(BaseModel):
    value: int = Field(..., gt=0)
    note: Optional[str] = Field(None, max_length=1000)


class ProgressOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    goal_id: int
    value: int
    note: Optional[str] = None
    created_at: datetime
