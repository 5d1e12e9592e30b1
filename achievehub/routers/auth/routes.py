import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from achievehub.config import settings
from achievehub.dependencies import LOGIN_URL, Viewer, get_current_user, get_db
from achievehub.exceptions import SubmissionError
from achievehub.models import User
from achievehub.schemas.auth import SignupForm
from achievehub.security import create_access_token, verify_password
from achievehub.services.profiles import register_user
from achievehub.templating import render_template
from achievehub.utils import flash, flash_redirect, redirect

log = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _signed_in_response(user: User) -> RedirectResponse:
    response = redirect("/")
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=create_access_token(user.id),
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite=settings.SESSION_COOKIE_SAMESITE.lower(),
        secure=settings.SESSION_COOKIE_SECURE,
    )
    return response


@router.get("/login", response_class=HTMLResponse, name="auth.login")
def login_form(request: Request, current_user: Viewer = Depends(get_current_user)):
    """Renders the login form."""
    if current_user.is_authenticated:
        return redirect("/")
    return render_template("auth/login.html", {"request": request, "current_user": current_user})


@router.post("/login", name="auth.login_post")
def login_action(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    session: Session = Depends(get_db),
):
    """Checks the password and issues the auth cookie."""
    user = session.query(User).filter(User.email == email.lower().strip()).first()
    verified, new_hash = verify_password(password, user.password_hash if user else None)
    if not verified:
        log.info("Failed sign-in for %s", email)
        return flash_redirect(request, LOGIN_URL, "Invalid credentials", "danger")

    if new_hash:
        user.password_hash = new_hash
        session.commit()
    log.info("User %s signed in", user.id)
    return _signed_in_response(user)


@router.get("/signup", response_class=HTMLResponse, name="auth.signup")
def signup_form(request: Request, current_user: Viewer = Depends(get_current_user)):
    """Renders the self-service sign-up form."""
    if current_user.is_authenticated:
        return redirect("/")
    return render_template("auth/signup.html", {"request": request, "current_user": current_user})


@router.post("/signup", name="auth.signup_post")
def signup_action(
    request: Request,
    form: dict = Depends(SignupForm.as_form),
    session: Session = Depends(get_db),
):
    """Creates a student account and signs it in."""
    try:
        user = register_user(session, **form)
    except SubmissionError as e:
        return flash_redirect(request, "/auth/signup", str(e), "danger")
    flash(request, "Welcome to AchieveHub!", "success")
    return _signed_in_response(user)


@router.get("/logout", name="auth.logout")
def logout():
    """Clears the auth cookie."""
    response = redirect(LOGIN_URL)
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return response
