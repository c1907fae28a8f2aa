# app/services/votes.py
import logging
from typing import Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.post import Post
from app.models.vote import Vote, VoteType
from app.utils.errors import BadRequestError, NotFoundError
from app.utils.ids import is_valid_id

logger = logging.getLogger(__name__)

COUNTER = {
    VoteType.UPVOTE: Post.upvotes,
    VoteType.DOWNVOTE: Post.downvotes,
}

ALREADY = {
    VoteType.UPVOTE: "You've already upvoted this post",
    VoteType.DOWNVOTE: "You've already downvoted this post",
    None: "You've already unvoted this post",
}


def _bump(db: Session, post_id: str, vote_type: VoteType, delta: int) -> None:
    column = COUNTER[vote_type]
    result = db.execute(
        update(Post).where(Post.id == post_id).values({column.key: column + delta})
    )
    if result.rowcount != 1:
        raise NotFoundError("Post not found")


def _ensure_post(db: Session, post_id: str) -> None:
    if not is_valid_id(post_id) or db.get(Post, post_id) is None:
        raise NotFoundError("Post not found")


def current_vote(db: Session, user_id: str, post_id: str) -> Optional[Vote]:
    return db.query(Vote).filter(Vote.user_id == user_id, Vote.post_id == post_id).with_for_update().first()


def cast_vote(db: Session, user_id: str, post_id: str, vote_type: VoteType) -> None:
    """
    Move the (user, post) pair to ``vote_type``.

    NONE -> vote inserts a Vote row; the opposite vote is switched in place with
    a conditional update so two racing requests cannot both apply it. Counters
    move with SQL increments in the same transaction.
    """
    try:
        _ensure_post(db, post_id)

        existing = current_vote(db, user_id, post_id)
        if existing and existing.type == vote_type:
            raise BadRequestError(ALREADY[vote_type])

        if existing:
            previous = existing.type
            switched = db.execute(
                update(Vote)
                .where(Vote.id == existing.id, Vote.type == previous)
                .values(type=vote_type)
            )
            if switched.rowcount != 1:
                raise BadRequestError(ALREADY[vote_type])
            _bump(db, post_id, previous, -1)
        else:
            db.add(Vote(user_id=user_id, post_id=post_id, type=vote_type))
            try:
                db.flush()
            except IntegrityError:
                # A concurrent request already created the vote
                raise BadRequestError(ALREADY[vote_type])

        _bump(db, post_id, vote_type, +1)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.debug("User %s %s post %s", user_id, vote_type.value, post_id)


def remove_vote(db: Session, user_id: str, post_id: str) -> None:
    try:
        _ensure_post(db, post_id)

        existing = current_vote(db, user_id, post_id)
        if existing is None:
            raise BadRequestError(ALREADY[None])

        previous = existing.type
        removed = db.execute(
            delete(Vote).where(Vote.id == existing.id, Vote.type == previous)
        )
        if removed.rowcount != 1:
            raise BadRequestError(ALREADY[None])

        _bump(db, post_id, previous, -1)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.debug("User %s unvoted post %s", user_id, post_id)
