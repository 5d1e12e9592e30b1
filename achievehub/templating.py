import os
from datetime import date
from typing import Optional

from fastapi.templating import Jinja2Templates

from .config import settings
from .models import CATEGORIES
from .utils import url_for, get_flashed_messages

templates = Jinja2Templates(directory=os.path.join(os.path.dirname(__file__), "templates"))


def shortdate(value: Optional[date], fmt: str = "%b %d, %Y") -> str:
    return value.strftime(fmt) if value else ""


templates.env.filters["shortdate"] = shortdate


def render_template(template_name: str, context: dict, status_code: int = 200):
    request = context.get("request")

    standard_context = {
        "config": settings,
        "categories": CATEGORIES,
        "url_for": lambda name, **params: url_for(request, name, **params),
        "get_flashed_messages": lambda with_categories=True: get_flashed_messages(
            request, with_categories=with_categories
        ),
    }

    # Provided context takes precedence
    full_context = {**standard_context, **context}

    return templates.TemplateResponse(request, template_name, full_context, status_code=status_code)
