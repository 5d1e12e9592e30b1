from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from achievehub.config import settings
from achievehub.exceptions import PhotoUploadError, SubmissionError
from achievehub.models import (
    Achievement,
    AchievementPhoto,
    AchievementTeammate,
    ModerationStatus,
    User,
)
from achievehub.schemas.achievement import AchievementForm, first_error
from achievehub.services.images import allowed_image, check_image_bytes
from achievehub.services.photo_storage import PhotoStorage, StoredPhoto

logger = logging.getLogger(__name__)


@dataclass
class PhotoUpload:
    filename: str
    data: bytes
    content_type: Optional[str] = None


def check_photo_count(count: int) -> None:
    if not count:
        raise SubmissionError("At least one photo is required.")
    if count > settings.MAX_PHOTOS:
        raise SubmissionError(f"You can upload a maximum of {settings.MAX_PHOTOS} photos.")


def photo_too_large(filename: str) -> SubmissionError:
    max_mb = settings.MAX_PHOTO_BYTES // (1024 * 1024)
    return SubmissionError(f"{filename} is larger than {max_mb}MB.")


def validate_photos(photos: Sequence[PhotoUpload]) -> list[PhotoUpload]:
    """Apply the count, size and format rules; returns the non-empty uploads."""
    photos = [p for p in photos if p.filename]
    check_photo_count(len(photos))

    for photo in photos:
        if not allowed_image(photo.filename):
            exts = ", ".join(sorted(e.upper() for e in settings.ALLOWED_IMAGE_EXTS))
            raise SubmissionError(f"{photo.filename}: photos must be one of {exts}.")
        if len(photo.data) > settings.MAX_PHOTO_BYTES:
            raise photo_too_large(photo.filename)
        try:
            check_image_bytes(photo.data)
        except ValueError:
            raise SubmissionError(f"{photo.filename} isn't a valid image.") from None
    return photos


def resolve_teammates(session: Session, owner: User, raw: str | None) -> list[User]:
    """Look up comma-separated teammate emails; the owner and repeats are skipped."""
    teammates: list[User] = []
    seen: set[str] = set()
    for email in (raw or "").split(","):
        email = email.strip().lower()
        if not email or email in seen or email == owner.email:
            continue
        seen.add(email)
        user = session.query(User).filter(func.lower(User.email) == email).first()
        if not user:
            raise SubmissionError(f"No user found for teammate {email}.")
        teammates.append(user)
    return teammates


def submit_achievement(
    session: Session,
    storage: PhotoStorage,
    owner: User,
    form: dict,
    photos: Sequence[PhotoUpload],
    teammates: str | None = None,
) -> Achievement:
    """
    Validate, upload photos to the bucket and insert a pending achievement.
    Uploaded objects are removed again if anything after the upload fails.
    """
    try:
        data = AchievementForm(**form)
    except ValidationError as e:
        raise SubmissionError(first_error(e)) from None

    photos = validate_photos(photos)
    team = resolve_teammates(session, owner, teammates)

    stored: list[StoredPhoto] = []
    for photo in photos:
        try:
            stored.append(storage.store(owner.id, photo.filename, photo.data))
        except OSError:
            logger.exception("Photo upload failed for user %s: %s", owner.id, photo.filename)
            _discard(storage, stored)
            raise PhotoUploadError(photo.filename) from None

    achievement = Achievement(
        user_id=owner.id,
        title=data.title,
        short_description=data.short_description,
        description=data.description,
        category=data.category.value,
        tags=data.tags,
        achievement_date=data.achievement_date,
        how_it_started=data.how_it_started,
        how_we_built_it=data.how_we_built_it,
        what_we_achieved=data.what_we_achieved,
        what_we_learned=data.what_we_learned,
        status=ModerationStatus.PENDING.value,
        is_featured=False,
        upvotes=0,
        media_url=stored[0].public_url,
    )
    for i, obj in enumerate(stored):
        achievement.photo_rows.append(
            AchievementPhoto(storage_path=obj.storage_path, public_url=obj.public_url, sort_index=i)
        )
    for user in team:
        achievement.teammates.append(AchievementTeammate(user_id=user.id))

    try:
        session.add(achievement)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        _discard(storage, stored)
        logger.exception("Failed to save achievement for user %s", owner.id)
        raise SubmissionError("Failed to submit achievement") from None

    logger.info("Achievement %s submitted by user %s with %d photo(s)", achievement.id, owner.id, len(stored))
    return achievement


def _discard(storage: PhotoStorage, stored: Sequence[StoredPhoto]) -> None:
    for obj in stored:
        try:
            storage.remove(obj.storage_path)
        except OSError:
            logger.warning("Could not remove orphaned photo %s", obj.storage_path)
