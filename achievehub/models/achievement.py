import enum
from datetime import datetime, timezone

from achievehub.extensions import db


class AchievementCategory(str, enum.Enum):
    HACKATHON = "hackathon"
    RESEARCH = "research"
    INTERNSHIP = "internship"
    PROJECT = "project"
    COMPETITION = "competition"
    OTHER = "other"


class ModerationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


CATEGORIES = tuple(c.value for c in AchievementCategory)
STATUSES = tuple(s.value for s in ModerationStatus)


class Achievement(db.Model):
    __tablename__ = "achievements"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    short_description = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(20), nullable=False)
    tags = db.Column(db.JSON, nullable=False, default=list)
    achievement_date = db.Column(db.Date, nullable=False)

    how_it_started = db.Column(db.Text, nullable=True)
    how_we_built_it = db.Column(db.Text, nullable=True)
    what_we_achieved = db.Column(db.Text, nullable=True)
    what_we_learned = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(20), nullable=False, default=ModerationStatus.PENDING.value)
    is_featured = db.Column(db.Boolean, nullable=False, default=False)
    upvotes = db.Column(db.Integer, nullable=False, default=0)
    media_url = db.Column(db.String(500), nullable=True)
    verified_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    owner = db.relationship("User", foreign_keys=[user_id], backref="achievements")
    verified_by = db.relationship("User", foreign_keys=[verified_by_id])
    photo_rows = db.relationship(
        "AchievementPhoto",
        back_populates="achievement",
        order_by="AchievementPhoto.sort_index",
        cascade="all, delete-orphan",
    )
    teammates = db.relationship("AchievementTeammate", back_populates="achievement", cascade="all, delete-orphan")

    __table_args__ = (
        db.CheckConstraint("upvotes >= 0", name="ck_achievement_upvotes_nonneg"),
        db.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')", name="ck_achievement_status"
        ),
        db.Index("ix_achievement_status_created", "status", "created_at"),
        db.Index("ix_achievement_user_id", "user_id"),
    )

    @property
    def photos(self) -> list[str]:
        return [p.public_url for p in self.photo_rows]

    @property
    def narrative(self) -> list[tuple[str, str]]:
        sections = [
            ("How it started", self.how_it_started),
            ("How we built it", self.how_we_built_it),
            ("What we achieved", self.what_we_achieved),
            ("What we learned", self.what_we_learned),
        ]
        return [(heading, text) for heading, text in sections if text]

    def __repr__(self):
        return f"<Achievement id={self.id} {self.title!r} status={self.status}>"


class AchievementPhoto(db.Model):
    __tablename__ = "achievement_photos"

    id = db.Column(db.Integer, primary_key=True)
    achievement_id = db.Column(db.Integer, db.ForeignKey("achievements.id"), nullable=False)
    storage_path = db.Column(db.String(500), nullable=False)
    public_url = db.Column(db.String(500), nullable=False)
    sort_index = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    achievement = db.relationship("Achievement", back_populates="photo_rows")

    __table_args__ = (
        db.Index("ix_photo_achievement_id", "achievement_id"),
    )


class AchievementTeammate(db.Model):
    __tablename__ = "achievement_teammates"

    achievement_id = db.Column(db.Integer, db.ForeignKey("achievements.id"), primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    role = db.Column(db.String(100), nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    achievement = db.relationship("Achievement", back_populates="teammates")
    user = db.relationship("User")
