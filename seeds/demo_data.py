from __future__ import annotations

from datetime import date
from typing import Dict, List

from achievehub.extensions import db
from achievehub.models import (
    Achievement,
    AchievementPhoto,
    Comment,
    ModerationStatus,
    Opportunity,
    Profile,
    User,
    UserRole,
)
from achievehub.services.engagement import set_upvote
from achievehub.services.photo_storage import PhotoStorage

from seeds.utils import get_or_create, placeholder_png

USER_FIXTURES: List[Dict] = [
    {"email": "admin@example.com", "name": "Ada Admin", "role": "admin", "password": "Admin123!"},
    {"email": "faculty@example.com", "name": "Frank Faculty", "role": "faculty", "password": "Faculty123!",
     "department": "Computer Science"},
    {"email": "kai@example.com", "name": "Kai Nguyen", "role": "student", "password": "ChangeMe123!",
     "department": "Computer Science"},
    {"email": "mia@example.com", "name": "Mia Singh", "role": "student", "password": "ChangeMe123!",
     "department": "Chemistry"},
]

ACHIEVEMENT_FIXTURES: List[Dict] = [
    {
        "owner": "kai@example.com",
        "title": "First place at CodeFest 2025",
        "short_description": "Built a study planner in 24 hours",
        "description": "Our team of three built a study planner that syncs with the school timetable.",
        "category": "hackathon",
        "tags": ["Python", "FastAPI", "Teamwork"],
        "achievement_date": date(2025, 3, 15),
        "how_it_started": "We kept missing assignment deadlines.",
        "what_we_learned": "Scope small and demo early.",
        "status": ModerationStatus.APPROVED,
        "is_featured": True,
        "color": "#4f46e5",
    },
    {
        "owner": "mia@example.com",
        "title": "Regional Chemistry Olympiad silver",
        "short_description": "Second place out of 120 students",
        "description": "Placed second in the regional chemistry olympiad after months of practice papers.",
        "category": "competition",
        "tags": ["Chemistry"],
        "achievement_date": date(2025, 5, 2),
        "status": ModerationStatus.APPROVED,
        "color": "#059669",
    },
    {
        "owner": "mia@example.com",
        "title": "Summer lab internship",
        "short_description": "Eight weeks in a materials science lab",
        "description": "Assisted with sample preparation and data analysis for a polymer research group.",
        "category": "internship",
        "tags": ["Research", "Lab"],
        "achievement_date": date(2025, 8, 20),
        "status": ModerationStatus.PENDING,
        "color": "#d97706",
    },
    {
        "owner": "kai@example.com",
        "title": "Half-finished side project",
        "short_description": "A draft that was sent back",
        "description": "A weekend project that was submitted before it had anything to show.",
        "category": "project",
        "tags": [],
        "achievement_date": date(2025, 6, 1),
        "status": ModerationStatus.REJECTED,
        "color": "#dc2626",
    },
]

OPPORTUNITY_FIXTURES: List[Dict] = [
    {"title": "Research assistant (CS department)", "creator": "faculty@example.com", "is_approved": True,
     "description": "Help analyse survey data for a learning analytics study. Four hours a week."},
    {"title": "Inter-school robotics challenge", "creator": "kai@example.com", "is_approved": False,
     "description": "Teams of up to four build a robot for the regional challenge in November."},
]


def seed_users() -> Dict[str, User]:
    users = {}
    for fixture in USER_FIXTURES:
        user, created = get_or_create(User, email=fixture["email"], defaults={"name": fixture["name"], "password_hash": ""})
        if created:
            user.set_password(fixture["password"])
            user.profile = Profile(department=fixture.get("department"))
        role, _ = get_or_create(UserRole, user_id=user.id, defaults={"role": fixture["role"]})
        role.role = fixture["role"]
        users[user.email] = user
    db.session.commit()
    return users


def seed_achievements(users: Dict[str, User], storage: PhotoStorage) -> List[Achievement]:
    faculty = users["faculty@example.com"]
    achievements = []
    for fixture in ACHIEVEMENT_FIXTURES:
        fixture = dict(fixture)
        owner = users[fixture.pop("owner")]
        color = fixture.pop("color")
        status = fixture.pop("status")

        achievement, created = get_or_create(Achievement, user_id=owner.id, title=fixture.pop("title"), defaults=fixture)
        if created:
            photo = storage.store(owner.id, "cover.png", placeholder_png(color))
            achievement.photo_rows.append(
                AchievementPhoto(storage_path=photo.storage_path, public_url=photo.public_url, sort_index=0)
            )
            achievement.media_url = photo.public_url
            achievement.status = status.value
            if status == ModerationStatus.APPROVED:
                achievement.verified_by_id = faculty.id
        achievements.append(achievement)
    db.session.commit()
    return achievements


def seed_engagement(users: Dict[str, User], achievements: List[Achievement]) -> None:
    approved = [a for a in achievements if a.status == ModerationStatus.APPROVED.value]
    for achievement in approved:
        for user in users.values():
            if user.id != achievement.user_id:
                set_upvote(db.session, achievement, user, True)

    first = approved[0]
    if not db.session.query(Comment).filter_by(achievement_id=first.id).first():
        mia = users["mia@example.com"]
        comment = Comment(achievement_id=first.id, user_id=mia.id, body="This is brilliant, congrats!")
        db.session.add(comment)
        db.session.flush()
        db.session.add(
            Comment(achievement_id=first.id, user_id=first.user_id, body="Thanks Mia!", parent_id=comment.id)
        )
        db.session.commit()


def seed_opportunities(users: Dict[str, User]) -> None:
    for fixture in OPPORTUNITY_FIXTURES:
        get_or_create(
            Opportunity,
            title=fixture["title"],
            defaults={
                "description": fixture["description"],
                "created_by_id": users[fixture["creator"]].id,
                "is_approved": fixture["is_approved"],
            },
        )
    db.session.commit()
