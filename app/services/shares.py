# app/services/shares.py
import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.database import upsert
from app.models.post import Post
from app.models.share import Share, ShareMedium
from app.models.user import User
from app.utils.errors import NotFoundError
from app.utils.ids import is_valid_id, new_id

logger = logging.getLogger(__name__)


def record_share_click(db: Session, *, post_id: str, sharer_id: str, medium) -> int:
    """
    Count one click on a shared link. The (post, sharer, medium) row is
    created on first click; each click also bumps ``Post.shares`` so the
    share-ordered feed follows real traffic. Returns the row's click total.
    """
    if not is_valid_id(sharer_id) or db.get(User, sharer_id) is None:
        raise NotFoundError("Sharer not found")
    if not is_valid_id(post_id) or db.get(Post, post_id) is None:
        raise NotFoundError("Post not found")

    resolved = ShareMedium.coerce(medium)

    try:
        stmt = upsert(db, Share).values(
            id=new_id(),
            post_id=post_id,
            sharer_id=sharer_id,
            medium=resolved,
            clicks=1,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Share.post_id, Share.sharer_id, Share.medium],
            set_={"clicks": Share.clicks + 1},
        ).returning(Share.clicks)
        clicks = db.execute(stmt).scalar_one()

        db.execute(update(Post).where(Post.id == post_id).values(shares=Post.shares + 1))
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.debug("Share click on %s by %s via %s (%d)", post_id, sharer_id, resolved.value, clicks)
    return clicks
