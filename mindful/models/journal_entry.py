# models/journal_entry.py

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, Text, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship
from mindful.core.config import Base


class JournalEntry(Base):
    __tablename__ = "entries"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    content = Column(Text, nullable=False)
    mood = Column(Integer, nullable=False)  # 1 (low) .. 5 (great)
    tags = Column(JSON, nullable=True)
    analysis = Column(JSON, nullable=True)  # sentiment, themes, insights, recommendations

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="entries")
