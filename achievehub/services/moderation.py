from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from achievehub.exceptions import InvalidTransitionError, NotFoundError, PermissionDeniedError
from achievehub.models import STAFF_ROLES, Achievement, ModerationStatus, Opportunity, User

logger = logging.getLogger(__name__)

PENDING = ModerationStatus.PENDING.value
APPROVED = ModerationStatus.APPROVED.value
REJECTED = ModerationStatus.REJECTED.value


def _check_reviewer(reviewer: User) -> None:
    if getattr(reviewer, "role", None) not in STAFF_ROLES:
        raise PermissionDeniedError("Only faculty and admin users can moderate.")


def _load_achievement(session: Session, achievement_id: int) -> Achievement:
    achievement = session.get(Achievement, achievement_id)
    if not achievement:
        raise NotFoundError("Achievement", achievement_id)
    return achievement


def approve_achievement(session: Session, achievement_id: int, reviewer: User) -> Achievement:
    """pending -> approved, recording who verified it."""
    _check_reviewer(reviewer)
    achievement = _load_achievement(session, achievement_id)
    if achievement.status != PENDING:
        raise InvalidTransitionError(f"Only pending achievements can be approved (is {achievement.status}).")
    achievement.status = APPROVED
    achievement.verified_by_id = reviewer.id
    session.commit()
    logger.info("Achievement %s approved by user %s", achievement.id, reviewer.id)
    return achievement


def reject_achievement(session: Session, achievement_id: int, reviewer: User) -> Achievement:
    """pending -> rejected."""
    _check_reviewer(reviewer)
    achievement = _load_achievement(session, achievement_id)
    if achievement.status != PENDING:
        raise InvalidTransitionError(f"Only pending achievements can be rejected (is {achievement.status}).")
    achievement.status = REJECTED
    session.commit()
    logger.info("Achievement %s rejected by user %s", achievement.id, reviewer.id)
    return achievement


def toggle_featured(session: Session, achievement_id: int, reviewer: User) -> Achievement:
    """Flip the featured flag of an approved achievement."""
    _check_reviewer(reviewer)
    achievement = _load_achievement(session, achievement_id)
    if achievement.status != APPROVED:
        raise InvalidTransitionError("Only approved achievements can be featured.")
    achievement.is_featured = not achievement.is_featured
    session.commit()
    logger.info(
        "Achievement %s %s by user %s",
        achievement.id,
        "featured" if achievement.is_featured else "unfeatured",
        reviewer.id,
    )
    return achievement


ACHIEVEMENT_ACTIONS = {
    "approve": approve_achievement,
    "reject": reject_achievement,
    "feature": toggle_featured,
}


def _load_opportunity(session: Session, opportunity_id: int) -> Opportunity:
    opportunity = session.get(Opportunity, opportunity_id)
    if not opportunity:
        raise NotFoundError("Opportunity", opportunity_id)
    return opportunity


def approve_opportunity(session: Session, opportunity_id: int, reviewer: User) -> Opportunity:
    _check_reviewer(reviewer)
    opportunity = _load_opportunity(session, opportunity_id)
    if opportunity.is_approved:
        raise InvalidTransitionError("Opportunity is already approved.")
    opportunity.is_approved = True
    session.commit()
    logger.info("Opportunity %s approved by user %s", opportunity.id, reviewer.id)
    return opportunity


def reject_opportunity(session: Session, opportunity_id: int, reviewer: User) -> None:
    """Rejecting an opportunity deletes it."""
    _check_reviewer(reviewer)
    opportunity = _load_opportunity(session, opportunity_id)
    session.delete(opportunity)
    session.commit()
    logger.info("Opportunity %s rejected and deleted by user %s", opportunity_id, reviewer.id)


OPPORTUNITY_ACTIONS = {
    "approve": approve_opportunity,
    "reject": reject_opportunity,
}
