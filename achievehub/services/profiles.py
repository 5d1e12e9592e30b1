from __future__ import annotations

import logging
from datetime import datetime, timezone

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from achievehub.exceptions import NotFoundError, PermissionDeniedError, SubmissionError
from achievehub.models import ROLES, Profile, User, UserRole
from achievehub.schemas.achievement import first_error
from achievehub.schemas.auth import SignupForm
from achievehub.schemas.profile import ProfileForm

logger = logging.getLogger(__name__)


def register_user(session: Session, email: str, name: str, password: str, role: str = "student") -> User:
    """Create a user with an empty profile and a role label."""
    try:
        data = SignupForm(email=email or "", name=name or "", password=password or "")
    except ValidationError as e:
        raise SubmissionError(first_error(e)) from None
    if role not in ROLES:
        raise SubmissionError(f"Unknown role: {role}")

    if session.query(User).filter(User.email == data.email).first():
        raise SubmissionError("Email already registered.")

    user = User(email=data.email, name=data.name)
    user.set_password(data.password)
    user.profile = Profile()
    user.role_row = UserRole(role=role)
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise SubmissionError("Email already registered.") from None
    logger.info("Registered user %s as %s", user.id, role)
    return user


def get_profile(session: Session, user: User) -> Profile:
    profile = session.get(Profile, user.id)
    if profile is None:
        profile = Profile(user_id=user.id)
        session.add(profile)
        session.commit()
    return profile


def update_profile(session: Session, user: User, **fields) -> Profile:
    try:
        data = ProfileForm(**fields)
    except ValidationError as e:
        raise SubmissionError(first_error(e)) from None

    profile = get_profile(session, user)
    profile.department = data.department
    profile.website = data.website
    profile.avatar_url = data.avatar_url
    profile.updated_at = datetime.now(timezone.utc)
    session.commit()
    return profile


def set_role(session: Session, admin: User, user_id: int, role: str) -> User:
    """Replace a user's role label (admin only)."""
    if getattr(admin, "role", None) != "admin":
        raise PermissionDeniedError("Admin access required.")
    if role not in ROLES:
        raise SubmissionError(f"Unknown role: {role}")

    user = session.get(User, user_id)
    if not user:
        raise NotFoundError("User", user_id)
    if user.role_row is None:
        user.role_row = UserRole(role=role)
    else:
        user.role_row.role = role
    session.commit()
    logger.info("User %s role set to %s by admin %s", user.id, role, admin.id)
    return user
