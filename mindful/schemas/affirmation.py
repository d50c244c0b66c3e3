# schemas/affirmation.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AffirmationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content: str
    created_at: datetime
