# Re-export models so external code can keep using: from achievehub.models import User, Achievement, ...
from .user import User, Profile, UserRole, ROLES, STAFF_ROLES
from .achievement import (
    Achievement,
    AchievementPhoto,
    AchievementTeammate,
    AchievementCategory,
    ModerationStatus,
    CATEGORIES,
    STATUSES,
)
from .engagement import Comment, Upvote, upvote_count
from .opportunity import Opportunity

__all__ = [
    # people
    "User", "Profile", "UserRole", "ROLES", "STAFF_ROLES",
    # achievements
    "Achievement", "AchievementPhoto", "AchievementTeammate",
    "AchievementCategory", "ModerationStatus", "CATEGORIES", "STATUSES",
    # engagement
    "Comment", "Upvote", "upvote_count",
    # opportunities
    "Opportunity",
]
