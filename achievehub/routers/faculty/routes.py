from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from achievehub.dependencies import get_db, require_user
from achievehub.exceptions import ShowcaseError
from achievehub.models import STATUSES, User
from achievehub.services.feed import dashboard as build_dashboard
from achievehub.services.moderation import ACHIEVEMENT_ACTIONS, OPPORTUNITY_ACTIONS
from achievehub.templating import render_template
from achievehub.utils import flash_redirect

router = APIRouter(prefix="/faculty-dashboard", tags=["faculty"])

TABS = STATUSES + ("opportunities",)
PAST_TENSE = {"approve": "approved", "reject": "rejected"}
OPPORTUNITIES_TAB = "/faculty-dashboard/?tab=opportunities"


def _turn_away(user: User, request: Request) -> Optional[RedirectResponse]:
    """Non-staff users are bounced to the home page with a notice."""
    if user.is_staff:
        return None
    return flash_redirect(request, "/", "This page is only accessible to faculty and admin users.", "danger")


@router.get("/", response_class=HTMLResponse, name="faculty.dashboard")
def dashboard(
    request: Request,
    tab: str = "pending",
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
):
    denied = _turn_away(current_user, request)
    if denied:
        return denied
    return render_template(
        "faculty/dashboard.html",
        {
            "request": request,
            "board": build_dashboard(session),
            "tab": tab if tab in TABS else "pending",
            "current_user": current_user,
        },
    )


@router.post("/achievements/{achievement_id}/{action}", name="faculty.achievement_action")
def achievement_action(
    achievement_id: int,
    action: str,
    request: Request,
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
):
    denied = _turn_away(current_user, request)
    if denied:
        return denied
    handler = ACHIEVEMENT_ACTIONS.get(action)
    if handler is None:
        raise HTTPException(status_code=404, detail="Unknown action")

    try:
        achievement = handler(session, achievement_id, current_user)
    except ShowcaseError as e:
        session.rollback()
        return flash_redirect(request, "/faculty-dashboard/", str(e), "danger")

    if action == "feature":
        done = "featured" if achievement.is_featured else "unfeatured"
        tab = "approved"
    else:
        done = PAST_TENSE[action]
        tab = "pending"
    return flash_redirect(request, f"/faculty-dashboard/?tab={tab}", f"Achievement {done} successfully", "success")


@router.post("/opportunities/{opportunity_id}/{action}", name="faculty.opportunity_action")
def opportunity_action(
    opportunity_id: int,
    action: str,
    request: Request,
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
):
    denied = _turn_away(current_user, request)
    if denied:
        return denied
    handler = OPPORTUNITY_ACTIONS.get(action)
    if handler is None:
        raise HTTPException(status_code=404, detail="Unknown action")

    try:
        handler(session, opportunity_id, current_user)
    except ShowcaseError as e:
        session.rollback()
        return flash_redirect(request, OPPORTUNITIES_TAB, str(e), "danger")

    if action == "approve":
        message = "Opportunity approved successfully"
    else:
        message = "Opportunity rejected and deleted successfully"
    return flash_redirect(request, OPPORTUNITIES_TAB, message, "success")
