from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from achievehub.config import settings
from achievehub.dependencies import LOGIN_URL, Viewer, get_current_user, get_db, require_user
from achievehub.exceptions import ShowcaseError
from achievehub.models import User
from achievehub.schemas.achievement import AchievementForm
from achievehub.services.engagement import comment_thread, has_upvoted, post_comment, set_upvote, toggle_upvote
from achievehub.services.feed import achievements_for_owner, explore_feed, normalise_category, visible_achievement
from achievehub.services.images import content_type_for
from achievehub.services.photo_storage import PhotoStorage, get_photo_storage
from achievehub.services.submissions import PhotoUpload, check_photo_count, photo_too_large, submit_achievement
from achievehub.templating import render_template
from achievehub.utils import flash, flash_redirect, redirect

log = logging.getLogger(__name__)

router = APIRouter(tags=["achievements"])


@router.get("/explore", response_class=HTMLResponse, name="achievements.explore")
def explore(
    request: Request,
    category: str = "all",
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
):
    feed = explore_feed(session, category)
    return render_template(
        "achievements/explore.html",
        {
            "request": request,
            "feed": feed,
            "filter": normalise_category(category) or "all",
            "current_user": current_user,
        },
    )


@router.get("/my-achievements", response_class=HTMLResponse, name="achievements.mine")
def my_achievements(
    request: Request,
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
):
    items = achievements_for_owner(session, current_user.id)
    return render_template(
        "achievements/mine.html",
        {"request": request, "achievements": items, "current_user": current_user},
    )


@router.get("/submit", response_class=HTMLResponse, name="achievements.submit")
def submit_form(request: Request, current_user: User = Depends(require_user)):
    return render_template(
        "achievements/submit.html",
        {"request": request, "form": {}, "current_user": current_user},
    )


async def _read_uploads(photos: Optional[List[UploadFile]]) -> list[PhotoUpload]:
    """Read the chosen files, refusing oversized requests before buffering them."""
    chosen = [upload for upload in photos or [] if upload.filename]
    if len(chosen) > settings.MAX_PHOTOS:
        check_photo_count(len(chosen))

    uploads = []
    for upload in chosen:
        if upload.size is not None and upload.size > settings.MAX_PHOTO_BYTES:
            raise photo_too_large(upload.filename)
        # One byte past the limit is enough for validate_photos to reject it
        data = await upload.read(settings.MAX_PHOTO_BYTES + 1)
        uploads.append(PhotoUpload(upload.filename, data, upload.content_type or content_type_for(upload.filename)))
    return uploads


@router.post("/submit", name="achievements.submit_post")
async def submit_action(
    request: Request,
    form: dict = Depends(AchievementForm.as_form),
    teammates: str = Form(""),
    photos: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
    storage: PhotoStorage = Depends(get_photo_storage),
):
    try:
        uploads = await _read_uploads(photos)
        submit_achievement(session, storage, current_user, form, uploads, teammates=teammates)
    except ShowcaseError as e:
        flash(request, str(e), "danger")
        return render_template(
            "achievements/submit.html",
            {"request": request, "form": {**form, "teammates": teammates}, "current_user": current_user},
            status_code=400,
        )

    return flash_redirect(request, "/my-achievements", "Achievement submitted successfully! Awaiting approval.", "success")


@router.get("/achievements/{achievement_id}", response_class=HTMLResponse, name="achievements.detail")
def detail(
    achievement_id: int,
    request: Request,
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
):
    achievement = visible_achievement(session, achievement_id, current_user)
    return render_template(
        "achievements/detail.html",
        {
            "request": request,
            "achievement": achievement,
            "comments": comment_thread(session, achievement.id),
            "upvoted": has_upvoted(session, achievement.id, current_user.id),
            "current_user": current_user,
        },
    )


@router.post("/achievements/{achievement_id}/upvote", name="achievements.upvote")
def upvote(
    achievement_id: int,
    request: Request,
    intent: Optional[str] = Form(None),
    current_user: Viewer = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    if not current_user.is_authenticated:
        return flash_redirect(request, LOGIN_URL, "You must be logged in to upvote.", "danger")

    achievement = visible_achievement(session, achievement_id, current_user)
    try:
        if intent in ("add", "remove"):
            set_upvote(session, achievement, current_user, intent == "add")
        else:
            toggle_upvote(session, achievement, current_user)
    except ShowcaseError as e:
        flash(request, str(e), "danger")
    return redirect(f"/achievements/{achievement_id}")


@router.post("/achievements/{achievement_id}/comments", name="achievements.comment")
def comment(
    achievement_id: int,
    request: Request,
    body: str = Form(""),
    parent_id: str = Form(""),
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
):
    achievement = visible_achievement(session, achievement_id, current_user)
    parent = int(parent_id) if parent_id.strip().isdigit() else None
    try:
        post_comment(session, achievement, current_user, body, parent_id=parent)
        flash(request, "Comment posted!", "success")
    except ShowcaseError as e:
        flash(request, str(e), "danger")
    return redirect(f"/achievements/{achievement_id}#comments")
