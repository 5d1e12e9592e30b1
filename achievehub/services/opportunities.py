from __future__ import annotations

import logging

from pydantic import ValidationError
from sqlalchemy.orm import Session

from achievehub.exceptions import SubmissionError
from achievehub.models import STAFF_ROLES, Opportunity, User
from achievehub.schemas.achievement import first_error
from achievehub.schemas.opportunity import OpportunityForm

logger = logging.getLogger(__name__)


def create_opportunity(session: Session, creator: User, title: str, description: str) -> Opportunity:
    """Staff postings go live immediately; everyone else's wait for approval."""
    try:
        data = OpportunityForm(title=title or "", description=description or "")
    except ValidationError as e:
        raise SubmissionError(first_error(e)) from None

    opportunity = Opportunity(
        title=data.title,
        description=data.description,
        created_by_id=creator.id,
        is_approved=creator.role in STAFF_ROLES,
    )
    session.add(opportunity)
    session.commit()
    logger.info(
        "Opportunity %s created by user %s (%s)",
        opportunity.id,
        creator.id,
        "approved" if opportunity.is_approved else "pending",
    )
    return opportunity


def approved_opportunities(session: Session) -> list[Opportunity]:
    return (
        session.query(Opportunity)
        .filter(Opportunity.is_approved.is_(True))
        .order_by(Opportunity.created_at.desc(), Opportunity.id.desc())
        .all()
    )
