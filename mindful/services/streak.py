# services/streak.py
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Callable, List, NamedTuple, Optional, Union

from sqlalchemy.orm import Session

from mindful.models.achievement import UserAchievement
from mindful.crud.user import crud_user
from mindful.crud.journal_entry import crud_journal_entry
from mindful.services.achievement import achievement_service

logger = logging.getLogger(__name__)


# =====================================================================
# PURE STREAK TRANSITION
# =====================================================================

class StreakResult(NamedTuple):
    current_streak: int
    # False only when today was already counted (same day or a future date)
    did_increment: bool


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _as_date(value: Optional[Union[date, datetime]]) -> Optional[date]:
    """Normalize to calendar-day granularity."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def evaluate_streak(
    last_entry_date: Optional[Union[date, datetime]],
    current_streak: int,
    today: Union[date, datetime],
) -> StreakResult:
    """
    Compute the streak after an entry written on ``today``.

    - no previous entry: streak starts at 1
    - previous entry today (or later, e.g. clock skew): unchanged, no-op
    - previous entry yesterday: streak + 1
    - any larger gap: streak restarts at 1
    """
    today = _as_date(today)
    last_entry = _as_date(last_entry_date)
    current_streak = current_streak or 0

    if last_entry is None:
        return StreakResult(1, True)
    if last_entry >= today:
        return StreakResult(current_streak, False)
    if last_entry == today - timedelta(days=1):
        return StreakResult(current_streak + 1, True)
    return StreakResult(1, True)


# =====================================================================
# EVALUATOR
# =====================================================================

@dataclass
class StreakUpdate:
    user_id: int
    current_streak: int
    longest_streak: int
    last_entry_date: Optional[date]
    did_increment: bool
    unlocked: List[UserAchievement] = field(default_factory=list)


class StreakEvaluator:
    """
    Runs once per created journal entry: updates the user's streak fields and
    unlocks streak / first-entry achievements.

    The read-modify-write on the user row is not locked. Two concurrent
    evaluations can lose one increment, but ``longest_streak >= current_streak``
    holds because every write recomputes the max.
    """

    def __init__(
        self,
        persist: Optional[Callable[..., object]] = None,
        clock: Callable[[], date] = utc_today,
    ):
        self.persist = persist or crud_user.update_streak
        self.clock = clock

    def record_entry(
        self, db: Session, user_id: int, today: Optional[date] = None
    ) -> Optional[StreakUpdate]:
        """
        Apply today's entry to the user's streak and achievements.

        Args:
            db: Database session
            user_id: Acting user
            today: Override for the current calendar day

        Returns:
            StreakUpdate, or None when the user no longer exists
        """
        user = crud_user.get(db, id=user_id)
        if user is None:
            logger.warning(f"Streak evaluation skipped: user {user_id} not found")
            return None

        today = _as_date(today) or self.clock()
        result = evaluate_streak(user.last_entry_date, user.current_streak, today)

        if result.did_increment:
            longest = max(user.longest_streak or 0, result.current_streak)
            self.persist(
                db,
                user=user,
                current_streak=result.current_streak,
                longest_streak=longest,
                last_entry_date=today,
            )
        else:
            longest = user.longest_streak or 0

        # First-entry is counted independently of the streak guard; streak
        # tiers are only evaluated when today was newly counted.
        entry_count = crud_journal_entry.count_by_user(db, user_id=user_id)
        unlocked = achievement_service.apply_unlocks(
            db,
            user_id,
            current_streak=result.current_streak if result.did_increment else None,
            entry_count=entry_count,
        )

        return StreakUpdate(
            user_id=user_id,
            current_streak=result.current_streak,
            longest_streak=longest,
            last_entry_date=today if result.did_increment else _as_date(user.last_entry_date),
            did_increment=result.did_increment,
            unlocked=unlocked,
        )


streak_evaluator = StreakEvaluator()
