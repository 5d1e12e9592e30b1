"""FastAPI dependencies: the per-request database session and the signed-in viewer."""
from typing import Iterator, Union

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session, joinedload

from .config import settings
from .extensions import db
from .models import User
from .security import user_id_from_token

LOGIN_URL = "/auth/login"


class AnonymousUser:
    """Stands in for the viewer when no valid auth cookie is present."""
    id = None
    email = None
    name = "Guest"
    role = "anonymous"
    is_authenticated = False
    is_staff = False


Viewer = Union[User, AnonymousUser]


def get_db() -> Iterator[Session]:
    session = db.SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_current_user(request: Request, session: Session = Depends(get_db)) -> Viewer:
    user_id = user_id_from_token(request.cookies.get(settings.AUTH_COOKIE_NAME))
    if user_id is None:
        return AnonymousUser()
    user = session.query(User).options(joinedload(User.role_row)).filter(User.id == user_id).first()
    return user or AnonymousUser()


def require_user(current_user: Viewer = Depends(get_current_user)) -> User:
    """Signed-in users only; everyone else is sent to the login page."""
    if not current_user.is_authenticated:
        raise HTTPException(status_code=status.HTTP_303_SEE_OTHER, headers={"Location": LOGIN_URL})
    return current_user


def require_role(*roles: str):
    """Dependency factory: 403 unless the signed-in user's role label is one of ``roles``."""
    def role_checker(user: User = Depends(require_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission denied")
        return user
    return role_checker
