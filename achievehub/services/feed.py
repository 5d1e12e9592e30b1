from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from achievehub.exceptions import NotFoundError
from achievehub.models import CATEGORIES, STAFF_ROLES, Achievement, ModerationStatus, Opportunity

APPROVED = ModerationStatus.APPROVED.value


@dataclass
class Feed:
    featured: list[Achievement] = field(default_factory=list)
    regular: list[Achievement] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.featured and not self.regular


@dataclass
class Dashboard:
    pending: list[Achievement] = field(default_factory=list)
    approved: list[Achievement] = field(default_factory=list)
    rejected: list[Achievement] = field(default_factory=list)
    pending_opportunities: list[Opportunity] = field(default_factory=list)
    approved_opportunities: list[Opportunity] = field(default_factory=list)


def normalise_category(category: Optional[str]) -> Optional[str]:
    """Map the ``category`` filter to a known value, or None for "all"/unknown."""
    if not category:
        return None
    category = category.strip().lower()
    return category if category in CATEGORIES else None


def _with_owner(query):
    return query.options(joinedload(Achievement.owner), selectinload(Achievement.photo_rows))


def explore_feed(session: Session, category: Optional[str] = None) -> Feed:
    """Approved achievements, newest first; featured ones are surfaced separately."""
    query = _with_owner(session.query(Achievement)).filter(Achievement.status == APPROVED)
    category = normalise_category(category)
    if category:
        query = query.filter(Achievement.category == category)
    rows = query.order_by(Achievement.created_at.desc(), Achievement.id.desc()).all()

    feed = Feed()
    for achievement in rows:
        (feed.featured if achievement.is_featured else feed.regular).append(achievement)
    return feed


def achievements_for_owner(session: Session, user_id: int, order: str = "created") -> list[Achievement]:
    """Every achievement of one user regardless of status."""
    query = _with_owner(session.query(Achievement)).filter(Achievement.user_id == user_id)
    if order == "date":
        query = query.order_by(Achievement.achievement_date.desc(), Achievement.id.desc())
    else:
        query = query.order_by(Achievement.created_at.desc(), Achievement.id.desc())
    return query.all()


def dashboard(session: Session) -> Dashboard:
    board = Dashboard()
    achievements = (
        _with_owner(session.query(Achievement))
        .order_by(Achievement.created_at.desc(), Achievement.id.desc())
        .all()
    )
    for achievement in achievements:
        getattr(board, achievement.status).append(achievement)

    opportunities = (
        session.query(Opportunity)
        .options(joinedload(Opportunity.created_by))
        .order_by(Opportunity.created_at.desc(), Opportunity.id.desc())
        .all()
    )
    for opportunity in opportunities:
        if opportunity.is_approved:
            board.approved_opportunities.append(opportunity)
        else:
            board.pending_opportunities.append(opportunity)
    return board


def can_view(achievement: Achievement, viewer) -> bool:
    if achievement.status == APPROVED:
        return True
    if getattr(viewer, "id", None) == achievement.user_id:
        return True
    return getattr(viewer, "role", None) in STAFF_ROLES


def visible_achievement(session: Session, achievement_id: int, viewer) -> Achievement:
    """
    Load an achievement for the detail page. Non-approved items are only visible
    to their owner and to reviewers; to everyone else they do not exist.
    """
    achievement = session.get(Achievement, achievement_id)
    if not achievement or not can_view(achievement, viewer):
        raise NotFoundError("Achievement", achievement_id)
    return achievement
