from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from achievehub.config import settings
from achievehub.exceptions import NotFoundError, PermissionDeniedError
from achievehub.extensions import db
from achievehub.logging_config import setup_logging
from achievehub.templating import render_template

log = logging.getLogger(__name__)

STATIC_DIR = os.path.join(os.path.dirname(__file__), "static")


@asynccontextmanager
async def lifespan(app: FastAPI):
    db.create_all()
    log.info("%s %s started (database: %s)", settings.APP_NAME, settings.APP_VERSION, db.engine.url)
    yield
    db.remove_session()


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SECRET_KEY,
        same_site=settings.SESSION_COOKIE_SAMESITE.lower(),
        https_only=settings.SESSION_COOKIE_SECURE,
    )

    os.makedirs(settings.PHOTO_STORAGE_DIR, exist_ok=True)
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
    app.mount(settings.PHOTO_PUBLIC_URL, StaticFiles(directory=settings.PHOTO_STORAGE_DIR, check_dir=False), name="storage")

    # Routers
    from .routers.main.routes import router as main_router
    from .routers.auth.routes import router as auth_router
    from .routers.achievements.routes import router as achievements_router
    from .routers.faculty.routes import router as faculty_router
    from .routers.opportunities.routes import router as opportunities_router
    from .routers.profile.routes import router as profile_router
    from .routers.admin.routes import router as admin_router

    app.include_router(main_router)
    app.include_router(auth_router)
    app.include_router(achievements_router)
    app.include_router(faculty_router)
    app.include_router(opportunities_router)
    app.include_router(profile_router)
    app.include_router(admin_router)

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return render_template(
            "error.html",
            {"request": request, "title": "Not found", "message": f"{exc.entity} not found."},
            status_code=404,
        )

    @app.exception_handler(PermissionDeniedError)
    async def forbidden(request: Request, exc: PermissionDeniedError):
        return render_template(
            "error.html",
            {"request": request, "title": "Permission denied", "message": str(exc)},
            status_code=403,
        )

    return app


app = create_app()
