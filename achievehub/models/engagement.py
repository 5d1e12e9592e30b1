from datetime import datetime, timezone

from achievehub.extensions import db


class Comment(db.Model):
    __tablename__ = "achievement_comments"

    id = db.Column(db.Integer, primary_key=True)
    achievement_id = db.Column(db.Integer, db.ForeignKey("achievements.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    body = db.Column(db.Text, nullable=False)
    parent_id = db.Column(db.Integer, db.ForeignKey("achievement_comments.id"), nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    author = db.relationship("User")
    achievement = db.relationship("Achievement", backref=db.backref("comments", cascade="all, delete-orphan"))
    parent = db.relationship("Comment", remote_side=[id])

    __table_args__ = (
        db.Index("ix_comment_achievement_created", "achievement_id", "created_at"),
    )


class Upvote(db.Model):
    __tablename__ = "achievement_upvotes"

    achievement_id = db.Column(db.Integer, db.ForeignKey("achievements.id"), primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.Index("ix_upvote_user_id", "user_id"),
    )


def upvote_count(session, achievement_id: int) -> int:
    total = session.execute(
        db.select(db.func.count()).select_from(Upvote).where(Upvote.achievement_id == achievement_id)
    ).scalar_one()
    return int(total)
