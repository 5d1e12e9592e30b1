"""Request helpers shared by the routers: URL building and toast-style flash messages."""
from typing import Any

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.routing import NoMatchFound

FLASH_KEY = "_flashes"
FLASH_CATEGORIES = ("success", "info", "warning", "danger")


def url_for(request: Request, name: str, **params: Any) -> str:
    """
    Path for a named route. ``static`` takes a ``filename``; unknown names
    render as "#" so a missing route never breaks a page.
    """
    if name == "static":
        return str(request.url_for("static", path=params.get("filename", "")))
    try:
        return str(request.app.url_path_for(name, **params))
    except NoMatchFound:
        return "#"


def flash(request: Request, message: str, category: str = "info") -> None:
    """Queue a message for the next rendered page."""
    if category not in FLASH_CATEGORIES:
        category = "info"
    messages = request.session.get(FLASH_KEY, [])
    messages.append([category, message])
    request.session[FLASH_KEY] = messages


def get_flashed_messages(request: Request, with_categories: bool = True) -> list[Any]:
    """Pop every queued message, oldest first."""
    messages = request.session.pop(FLASH_KEY, [])
    if not with_categories:
        return [message for _, message in messages]
    return [tuple(m) for m in messages]


def redirect(url: str) -> RedirectResponse:
    """303 so a POST is always followed by a GET."""
    return RedirectResponse(url, status_code=303)


def flash_redirect(request: Request, url: str, message: str, category: str = "info") -> RedirectResponse:
    flash(request, message, category)
    return redirect(url)
