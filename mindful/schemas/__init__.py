# mindful/schemas/__init__.py

from .user import (
    UserCreate,
    UserUpdate,
    UserOut,
    LoginRequest,
    TokenResponse,
    RefreshTokenRequest,
    SuccessResponse,
)
from .journal_entry import (
    SentimentScore,
    Recommendation,
    EntryAnalysis,
    EntryCreate,
    EntryUpdate,
    EntryOut,
)
from .achievement import AchievementOut, UserAchievementOut, StreakOut
from .affirmation import AffirmationOut
from .challenge import GeneratedChallenge, ChallengeComplete, ChallengeOut
from .goal import GoalCreate, GoalUpdate, GoalOut, ProgressCreate, ProgressOut
from .subscription import (
    PlanOut,
    SubscriptionOut,
    SubscriptionStatus,
    CheckoutRequest,
    CheckoutResponse,
    WebhookAck,
)
from .support import (
    TopicOut,
    GroupCreate,
    GroupOut,
    MemberOut,
    MessageCreate,
    MessageOut,
)


__all__ = [
    # Users & auth
    "UserCreate", "UserUpdate", "UserOut",
    "LoginRequest", "TokenResponse", "RefreshTokenRequest", "SuccessResponse",

    # Journal
    "SentimentScore", "Recommendation", "EntryAnalysis",
    "EntryCreate", "EntryUpdate", "EntryOut",

    # Gamification
    "AchievementOut", "UserAchievementOut", "StreakOut",
    "AffirmationOut",
    "GeneratedChallenge", "ChallengeComplete", "ChallengeOut",
    "GoalCreate", "GoalUpdate", "GoalOut", "ProgressCreate", "ProgressOut",

    # Billing
    "PlanOut", "SubscriptionOut", "SubscriptionStatus",
    "CheckoutRequest", "CheckoutResponse", "WebhookAck",

    # Support network
    "TopicOut", "GroupCreate", "GroupOut", "MemberOut", "MessageCreate", "MessageOut",
]
