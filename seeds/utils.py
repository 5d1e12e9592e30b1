from __future__ import annotations

import io
from typing import Any, Dict, Optional, Tuple, Type

from PIL import Image

from achievehub.extensions import db


def get_or_create(model: Type[db.Model], defaults: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Tuple[db.Model, bool]:
    instance = db.session.query(model).filter_by(**kwargs).first()
    if instance:
        return instance, False

    params = {**kwargs, **(defaults or {})}
    instance = model(**params)
    db.session.add(instance)
    db.session.flush()
    return instance, True


def placeholder_png(color: str, size: Tuple[int, int] = (480, 480)) -> bytes:
    """A flat colour square, enough to stand in for a real photo."""
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()
