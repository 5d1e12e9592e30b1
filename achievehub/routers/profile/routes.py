from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from achievehub.dependencies import get_db, require_user
from achievehub.exceptions import ShowcaseError
from achievehub.models import User
from achievehub.services.feed import achievements_for_owner
from achievehub.services.profiles import get_profile, update_profile
from achievehub.templating import render_template
from achievehub.utils import flash, redirect

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("/", response_class=HTMLResponse, name="profile.show")
def show_profile(
    request: Request,
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
):
    profile = get_profile(session, current_user)
    items = achievements_for_owner(session, current_user.id, order="date")
    return render_template(
        "profile/show.html",
        {"request": request, "profile": profile, "achievements": items, "current_user": current_user},
    )


@router.post("/", name="profile.update")
def update_profile_action(
    request: Request,
    department: str = Form(""),
    website: str = Form(""),
    avatar_url: str = Form(""),
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
):
    try:
        update_profile(session, current_user, department=department, website=website, avatar_url=avatar_url)
        flash(request, "Profile updated.", "success")
    except ShowcaseError as e:
        flash(request, str(e), "danger")
    return redirect("/profile/")
