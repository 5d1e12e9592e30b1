from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from achievehub.dependencies import get_db, require_user
from achievehub.exceptions import ShowcaseError
from achievehub.models import User
from achievehub.services.opportunities import approved_opportunities, create_opportunity
from achievehub.templating import render_template
from achievehub.utils import flash, flash_redirect

router = APIRouter(prefix="/opportunities", tags=["opportunities"])


@router.get("/", response_class=HTMLResponse, name="opportunities.list")
def list_opportunities(
    request: Request,
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
):
    items = approved_opportunities(session)
    return render_template(
        "opportunities/list.html",
        {"request": request, "opportunities": items, "current_user": current_user},
    )


@router.get("/create", response_class=HTMLResponse, name="opportunities.create")
def create_form(request: Request, current_user: User = Depends(require_user)):
    return render_template(
        "opportunities/form.html",
        {"request": request, "form": {}, "current_user": current_user},
    )


@router.post("/create", name="opportunities.create_post")
def create_action(
    request: Request,
    title: str = Form(""),
    description: str = Form(""),
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
):
    try:
        opportunity = create_opportunity(session, current_user, title, description)
    except ShowcaseError as e:
        flash(request, str(e), "danger")
        return render_template(
            "opportunities/form.html",
            {"request": request, "form": {"title": title, "description": description}, "current_user": current_user},
            status_code=400,
        )

    message = "Opportunity created successfully."
    if not opportunity.is_approved:
        message += " It will appear once faculty approve it."
    return flash_redirect(request, "/opportunities/", message, "success")
