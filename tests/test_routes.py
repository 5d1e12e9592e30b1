import pytest
from httpx import AsyncClient

from achievehub.config import settings
from achievehub.models import Achievement, Comment, Opportunity, Upvote, User

from conftest import PASSWORD, login, make_achievement, png_bytes

SUBMISSION = {
    "title": "Science Olympiad gold",
    "short_description": "Gold medal in chemistry",
    "description": "Placed first in the regional Science Olympiad chemistry event.",
    "category": "competition",
    "tags": "chemistry, olympiad",
    "achievement_date": "2024-04-20",
    "what_we_learned": "Practice pays off",
}


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/", "/explore", "/my-achievements", "/submit", "/faculty-dashboard/", "/profile/", "/opportunities/"])
async def test_pages_require_login(client: AsyncClient, path):
    response = await client.get(path)
    assert response.status_code == 303
    assert response.headers["location"] == "/auth/login"


@pytest.mark.asyncio
async def test_login_page(client: AsyncClient):
    response = await client.get("/auth/login")
    assert response.status_code == 200
    assert "Sign in" in response.text


@pytest.mark.asyncio
async def test_signup_signs_in(client: AsyncClient, session):
    response = await client.post(
        "/auth/signup", data={"email": "New@Example.com", "name": "New Student", "password": PASSWORD}
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/"
    assert settings.AUTH_COOKIE_NAME in response.cookies

    home = await client.get("/")
    assert home.status_code == 200
    assert "Welcome to AchieveHub!" in home.text
    assert session.query(User).filter_by(email="new@example.com").one().role == "student"


@pytest.mark.asyncio
async def test_signup_errors_are_flashed(client: AsyncClient, student):
    response = await client.post(
        "/auth/signup", data={"email": "student@example.com", "name": "Copy", "password": PASSWORD}
    )
    assert response.headers["location"] == "/auth/signup"
    page = await client.get("/auth/signup")
    assert "Email already registered." in page.text


@pytest.mark.asyncio
async def test_invalid_credentials(client: AsyncClient, student):
    response = await client.post("/auth/login", data={"email": "student@example.com", "password": "wrong-password"})
    assert response.status_code == 303
    assert response.headers["location"] == "/auth/login"
    page = await client.get("/auth/login")
    assert "Invalid credentials" in page.text


@pytest.mark.asyncio
async def test_unknown_email_costs_a_hash(client: AsyncClient, monkeypatch):
    from achievehub import security

    calls = []
    monkeypatch.setattr(security.pwd_context, "dummy_verify", lambda: calls.append(True))

    response = await client.post("/auth/login", data={"email": "nobody@example.com", "password": "password123"})

    assert response.status_code == 303
    assert response.headers["location"] == "/auth/login"
    assert calls == [True]


@pytest.mark.asyncio
async def test_logout_clears_cookie(client: AsyncClient, student):
    await login(client, student.email)
    response = await client.get("/auth/logout")
    assert response.headers["location"] == "/auth/login"
    assert (await client.get("/")).status_code == 303


@pytest.mark.asyncio
async def test_submit_achievement(client: AsyncClient, session, student, storage):
    await login(client, student.email)

    response = await client.post(
        "/submit",
        data=SUBMISSION,
        files=[
            ("photos", ("medal.png", png_bytes(), "image/png")),
            ("photos", ("team.png", png_bytes("blue"), "image/png")),
        ],
    )

    assert response.status_code == 303
    assert response.headers["location"] == "/my-achievements"
    achievement = session.query(Achievement).one()
    assert achievement.user_id == student.id
    assert achievement.status == "pending"
    assert achievement.tags == ["chemistry", "olympiad"]
    assert len(achievement.photo_rows) == 2
    assert storage.exists(achievement.photo_rows[0].storage_path)

    page = await client.get("/my-achievements")
    assert "Achievement submitted successfully! Awaiting approval." in page.text
    assert "Science Olympiad gold" in page.text
    assert "Pending Review" in page.text


@pytest.mark.asyncio
async def test_submit_without_photos_rerenders_form(client: AsyncClient, session, student):
    await login(client, student.email)

    response = await client.post("/submit", data=SUBMISSION)

    assert response.status_code == 400
    assert "At least one photo is required." in response.text
    assert 'value="Science Olympiad gold"' in response.text
    assert session.query(Achievement).count() == 0


@pytest.fixture
def upload_reads(monkeypatch):
    """Record the size argument of every uploaded-file read."""
    from starlette.datastructures import UploadFile

    reads = []
    read = UploadFile.read

    async def recording_read(self, size=-1):
        reads.append(size)
        return await read(self, size)

    monkeypatch.setattr(UploadFile, "read", recording_read)
    return reads


@pytest.mark.asyncio
async def test_submit_reads_photos_up_to_the_limit(client: AsyncClient, session, student, upload_reads):
    await login(client, student.email)

    response = await client.post("/submit", data=SUBMISSION, files=[("photos", ("medal.png", png_bytes(), "image/png"))])

    assert response.status_code == 303
    assert upload_reads == [settings.MAX_PHOTO_BYTES + 1]


@pytest.mark.asyncio
async def test_submit_too_many_photos_rejected_before_reading(client: AsyncClient, session, student, upload_reads, monkeypatch):
    monkeypatch.setattr(settings, "MAX_PHOTOS", 1)
    await login(client, student.email)

    response = await client.post(
        "/submit",
        data=SUBMISSION,
        files=[
            ("photos", ("medal.png", png_bytes(), "image/png")),
            ("photos", ("team.png", png_bytes("blue"), "image/png")),
        ],
    )

    assert response.status_code == 400
    assert "You can upload a maximum of 1 photos." in response.text
    assert upload_reads == []
    assert session.query(Achievement).count() == 0


@pytest.mark.asyncio
async def test_submit_oversized_photo_rejected_before_reading(client: AsyncClient, session, student, upload_reads, monkeypatch):
    monkeypatch.setattr(settings, "MAX_PHOTO_BYTES", 64)
    await login(client, student.email)

    response = await client.post("/submit", data=SUBMISSION, files=[("photos", ("big.png", b"x" * 500, "image/png"))])

    assert response.status_code == 400
    assert "big.png is larger than 0MB." in response.text
    assert upload_reads == []
    assert session.query(Achievement).count() == 0


@pytest.mark.asyncio
async def test_explore_lists_approved(client: AsyncClient, session, student, other_student):
    make_achievement(session, other_student, title="Approved robot")
    make_achievement(session, other_student, title="Secret pending", status="pending")
    make_achievement(session, other_student, title="Starred entry", featured=True)
    await login(client, student.email)

    page = await client.get("/explore")

    assert page.status_code == 200
    assert "Approved robot" in page.text
    assert "Starred entry" in page.text
    assert "Featured" in page.text
    assert "Secret pending" not in page.text

    filtered = await client.get("/explore", params={"category": "research"})
    assert "No achievements found" in filtered.text


@pytest.mark.asyncio
async def test_detail_hides_pending_from_other_students(client: AsyncClient, session, student, other_student):
    achievement = make_achievement(session, other_student, status="pending")
    await login(client, student.email)

    response = await client.get(f"/achievements/{achievement.id}")

    assert response.status_code == 404
    assert "Achievement not found." in response.text


@pytest.mark.asyncio
async def test_upvote_requires_login(client: AsyncClient, session, student):
    achievement = make_achievement(session, student)

    response = await client.post(f"/achievements/{achievement.id}/upvote", data={"intent": "add"})

    assert response.status_code == 303
    assert response.headers["location"] == "/auth/login"
    assert session.query(Upvote).count() == 0


@pytest.mark.asyncio
async def test_upvote_intent_is_idempotent(client: AsyncClient, session, student, other_student):
    achievement = make_achievement(session, other_student)
    await login(client, student.email)

    for _ in range(2):
        response = await client.post(f"/achievements/{achievement.id}/upvote", data={"intent": "add"})
        assert response.headers["location"] == f"/achievements/{achievement.id}"
    session.refresh(achievement)
    assert achievement.upvotes == 1

    await client.post(f"/achievements/{achievement.id}/upvote")
    session.refresh(achievement)
    assert achievement.upvotes == 0


@pytest.mark.asyncio
async def test_comment_and_reply(client: AsyncClient, session, student, other_student):
    achievement = make_achievement(session, other_student)
    await login(client, student.email)

    response = await client.post(f"/achievements/{achievement.id}/comments", data={"body": "Great job"})
    assert response.status_code == 303
    assert response.headers["location"] == f"/achievements/{achievement.id}#comments"
    parent = session.query(Comment).one()

    await client.post(
        f"/achievements/{achievement.id}/comments", data={"body": "Seconded", "parent_id": str(parent.id)}
    )
    reply = session.query(Comment).filter(Comment.parent_id == parent.id).one()
    assert reply.body == "Seconded"

    page = await client.get(f"/achievements/{achievement.id}")
    assert "Comment posted!" in page.text
    assert "Great job" in page.text
    assert "Seconded" in page.text


@pytest.mark.asyncio
async def test_empty_comment_is_flashed(client: AsyncClient, session, student):
    achievement = make_achievement(session, student)
    await login(client, student.email)

    await client.post(f"/achievements/{achievement.id}/comments", data={"body": "  "})

    assert session.query(Comment).count() == 0
    page = await client.get(f"/achievements/{achievement.id}")
    assert "You must be logged in and provide a comment." in page.text


@pytest.mark.asyncio
async def test_dashboard_is_staff_only(client: AsyncClient, student):
    await login(client, student.email)

    response = await client.get("/faculty-dashboard/")

    assert response.status_code == 303
    assert response.headers["location"] == "/"
    home = await client.get("/")
    assert "This page is only accessible to faculty and admin users." in home.text


@pytest.mark.asyncio
async def test_faculty_moderates_achievement(client: AsyncClient, session, student, faculty):
    achievement = make_achievement(session, student, title="Needs review", status="pending")
    await login(client, faculty.email)

    board = await client.get("/faculty-dashboard/")
    assert board.status_code == 200
    assert "Needs review" in board.text

    response = await client.post(f"/faculty-dashboard/achievements/{achievement.id}/approve")
    assert response.headers["location"] == "/faculty-dashboard/?tab=pending"
    session.refresh(achievement)
    assert achievement.status == "approved"
    assert achievement.verified_by_id == faculty.id

    response = await client.post(f"/faculty-dashboard/achievements/{achievement.id}/feature")
    assert response.headers["location"] == "/faculty-dashboard/?tab=approved"
    session.refresh(achievement)
    assert achievement.is_featured is True

    page = await client.get("/faculty-dashboard/?tab=approved")
    assert "Achievement featured successfully" in page.text


@pytest.mark.asyncio
async def test_invalid_transition_is_flashed(client: AsyncClient, session, student, faculty):
    achievement = make_achievement(session, student, status="rejected")
    await login(client, faculty.email)

    response = await client.post(f"/faculty-dashboard/achievements/{achievement.id}/approve")

    assert response.headers["location"] == "/faculty-dashboard/"
    session.refresh(achievement)
    assert achievement.status == "rejected"
    page = await client.get("/faculty-dashboard/")
    assert "Only pending achievements can be approved" in page.text


@pytest.mark.asyncio
async def test_unknown_moderation_action(client: AsyncClient, session, student, faculty):
    achievement = make_achievement(session, student, status="pending")
    await login(client, faculty.email)

    response = await client.post(f"/faculty-dashboard/achievements/{achievement.id}/delete")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_opportunity_lifecycle(client: AsyncClient, session, student, faculty):
    await login(client, student.email)
    response = await client.post(
        "/opportunities/create",
        data={"title": "Coding camp", "description": "Two weeks of coding in July."},
    )
    assert response.headers["location"] == "/opportunities/"
    listing = await client.get("/opportunities/")
    assert "It will appear once faculty approve it." in listing.text
    assert "Coding camp" not in listing.text

    opportunity = session.query(Opportunity).one()
    await client.get("/auth/logout")
    await login(client, faculty.email)
    response = await client.post(f"/faculty-dashboard/opportunities/{opportunity.id}/approve")
    assert response.headers["location"] == "/faculty-dashboard/?tab=opportunities"

    listing = await client.get("/opportunities/")
    assert "Coding camp" in listing.text


@pytest.mark.asyncio
async def test_opportunity_reject_deletes(client: AsyncClient, session, student, faculty):
    opportunity = Opportunity(title="Spam", description="Nothing useful in here.", created_by_id=student.id)
    session.add(opportunity)
    session.commit()
    opportunity_id = opportunity.id
    await login(client, faculty.email)

    await client.post(f"/faculty-dashboard/opportunities/{opportunity_id}/reject")

    session.expire_all()
    assert session.get(Opportunity, opportunity_id) is None
    page = await client.get("/faculty-dashboard/?tab=opportunities")
    assert "Opportunity rejected and deleted successfully" in page.text


@pytest.mark.asyncio
async def test_invalid_opportunity_rerenders(client: AsyncClient, student):
    await login(client, student.email)
    response = await client.post("/opportunities/create", data={"title": "Hi", "description": "Too short"})
    assert response.status_code == 400
    assert "Title must be at least 3 characters" in response.text


@pytest.mark.asyncio
async def test_profile_update(client: AsyncClient, session, student):
    make_achievement(session, student, title="Timeline entry")
    await login(client, student.email)

    response = await client.post("/profile/", data={"department": "Physics", "website": "https://sam.example.com"})
    assert response.headers["location"] == "/profile/"

    page = await client.get("/profile/")
    assert "Profile updated." in page.text
    assert "Physics" in page.text
    assert "Timeline entry" in page.text


@pytest.mark.asyncio
async def test_admin_pages_forbidden_for_students(client: AsyncClient, student):
    await login(client, student.email)
    assert (await client.get("/admin/users")).status_code == 403


@pytest.mark.asyncio
async def test_admin_changes_role(client: AsyncClient, session, admin, student, faculty):
    await login(client, admin.email)

    page = await client.get("/admin/users", params={"role": "student"})
    assert page.status_code == 200
    assert "student@example.com" in page.text
    assert "faculty@example.com" not in page.text

    response = await client.post(f"/admin/users/{student.id}/role", data={"role": "faculty"})
    assert response.headers["location"] == "/admin/users"
    session.refresh(student)
    assert student.role == "faculty"

    search = await client.get("/admin/users", params={"q": "Ada"})
    assert "admin@example.com" in search.text
    assert "student@example.com" not in search.text
