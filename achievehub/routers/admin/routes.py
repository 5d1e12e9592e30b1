from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from achievehub.dependencies import get_db, require_role
from achievehub.exceptions import ShowcaseError
from achievehub.models import ROLES, User, UserRole
from achievehub.services.profiles import set_role
from achievehub.templating import render_template
from achievehub.utils import flash, redirect

router = APIRouter(prefix="/admin", tags=["admin"])

admin_required = require_role("admin")


def paginate(query, page, per_page):
    total = query.count()
    pages = max((total + per_page - 1) // per_page, 1)
    page = min(max(page, 1), pages)
    items = query.offset((page - 1) * per_page).limit(per_page).all()
    return type('Pagination', (), {
        "items": items,
        "page": page,
        "per_page": per_page,
        "total": total,
        "pages": pages,
        "has_prev": page > 1,
        "has_next": page < pages,
        "prev_num": page - 1,
        "next_num": page + 1,
    })


@router.get("/users", response_class=HTMLResponse, name="admin.users_index")
def users_index(
    request: Request,
    q: str = "",
    role: str = "",
    page: int = 1,
    current_user: User = Depends(admin_required),
    session: Session = Depends(get_db),
):
    query = session.query(User).options(joinedload(User.role_row))

    if q:
        like = f"%{q}%"
        query = query.filter(or_(User.email.ilike(like), User.name.ilike(like), User.username.ilike(like)))

    if role in ROLES:
        query = query.outerjoin(UserRole)
        if role == "student":
            query = query.filter(or_(UserRole.role == "student", UserRole.id.is_(None)))
        else:
            query = query.filter(UserRole.role == role)

    pagination = paginate(query.order_by(User.name, User.id), page, 20)
    return render_template(
        "admin/users.html",
        {
            "request": request,
            "pagination": pagination,
            "q": q,
            "role": role,
            "roles": ROLES,
            "current_user": current_user,
        },
    )


@router.post("/users/{user_id}/role", name="admin.set_role")
def set_role_action(
    user_id: int,
    request: Request,
    role: str = Form(...),
    current_user: User = Depends(admin_required),
    session: Session = Depends(get_db),
):
    try:
        user = set_role(session, current_user, user_id, role)
        flash(request, f"{user.name} is now {role}.", "success")
    except ShowcaseError as e:
        flash(request, str(e), "danger")
    return redirect("/admin/users")
