from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy import func
from sqlalchemy.orm import Session

from achievehub.dependencies import get_db, require_user
from achievehub.models import Achievement, ModerationStatus, User
from achievehub.templating import render_template

router = APIRouter(tags=["main"])


@router.get("/", response_class=HTMLResponse, name="main.index")
def index(
    request: Request,
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
):
    """
    Renders the landing page with a few community numbers.
    """
    approved_count = session.query(func.count(Achievement.id)).filter(
        Achievement.status == ModerationStatus.APPROVED.value
    ).scalar()
    my_count = session.query(func.count(Achievement.id)).filter(
        Achievement.user_id == current_user.id
    ).scalar()
    return render_template(
        "index.html",
        {
            "request": request,
            "current_user": current_user,
            "approved_count": approved_count,
            "my_count": my_count,
        },
    )
