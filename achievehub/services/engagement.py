"""Upvotes and comments on approved achievements."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from achievehub.exceptions import InvalidTransitionError, NotFoundError, SubmissionError
from achievehub.models import Achievement, Comment, ModerationStatus, Upvote, User, upvote_count

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 2000


def _require_approved(achievement: Achievement) -> None:
    if achievement.status != ModerationStatus.APPROVED.value:
        raise InvalidTransitionError("Only approved achievements accept upvotes and comments.")


def has_upvoted(session: Session, achievement_id: int, user_id: int | None) -> bool:
    if user_id is None:
        return False
    return session.get(Upvote, (achievement_id, user_id)) is not None


def _sync_counter(session: Session, achievement: Achievement) -> int:
    # Counter is a cache of the join rows; recompute instead of +/- 1
    session.flush()
    achievement.upvotes = upvote_count(session, achievement.id)
    return achievement.upvotes


def _find_upvote(session: Session, achievement_id: int, user_id: int) -> Upvote | None:
    return session.get(Upvote, (achievement_id, user_id))


def _lock_achievement(session: Session, achievement_id: int) -> Achievement:
    # Row lock serialises concurrent recounts of the same achievement
    return (
        session.query(Achievement)
        .filter(Achievement.id == achievement_id)
        .with_for_update()
        .populate_existing()
        .one()
    )


def set_upvote(session: Session, achievement: Achievement, user: User, upvoted: bool) -> int:
    """
    Make the user's upvote match ``upvoted``. Repeating the same request is a no-op.
    Returns the achievement's upvote count after the commit.
    """
    _require_approved(achievement)
    achievement_id = achievement.id
    achievement = _lock_achievement(session, achievement_id)
    existing = _find_upvote(session, achievement_id, user.id)
    if upvoted and existing is None:
        session.add(Upvote(achievement_id=achievement.id, user_id=user.id))
    elif not upvoted and existing is not None:
        session.delete(existing)

    try:
        count = _sync_counter(session, achievement)
        session.commit()
    except IntegrityError:
        # A concurrent request inserted the same row first; its state is the one we wanted
        session.rollback()
        achievement = _lock_achievement(session, achievement_id)
        count = _sync_counter(session, achievement)
        session.commit()
    return count


def toggle_upvote(session: Session, achievement: Achievement, user: User) -> tuple[bool, int]:
    """Flip the user's upvote; returns (upvoted, count)."""
    upvoted = not has_upvoted(session, achievement.id, user.id)
    count = set_upvote(session, achievement, user, upvoted)
    return upvoted, count


def post_comment(
    session: Session,
    achievement: Achievement,
    author: User,
    body: str | None,
    parent_id: int | None = None,
) -> Comment:
    _require_approved(achievement)
    body = (body or "").strip()
    if not body:
        raise SubmissionError("You must be logged in and provide a comment.")
    if len(body) > MAX_COMMENT_LENGTH:
        raise SubmissionError("Comment is too long.")

    if parent_id is not None:
        parent = session.get(Comment, parent_id)
        if not parent or parent.achievement_id != achievement.id:
            raise NotFoundError("Comment", parent_id)

    comment = Comment(achievement_id=achievement.id, user_id=author.id, body=body, parent_id=parent_id)
    session.add(comment)
    session.commit()
    logger.info("Comment %s posted on achievement %s by user %s", comment.id, achievement.id, author.id)
    return comment


@dataclass
class CommentNode:
    comment: Comment
    replies: list["CommentNode"] = field(default_factory=list)


def comment_thread(session: Session, achievement_id: int) -> list[CommentNode]:
    """Comments oldest first, with replies nested under their parent."""
    comments = (
        session.query(Comment)
        .options(joinedload(Comment.author))
        .filter(Comment.achievement_id == achievement_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )
    nodes = {c.id: CommentNode(c) for c in comments}
    roots: list[CommentNode] = []
    for c in comments:
        node = nodes[c.id]
        if c.parent_id is not None and c.parent_id in nodes:
            nodes[c.parent_id].replies.append(node)
        else:
            roots.append(node)
    return roots
