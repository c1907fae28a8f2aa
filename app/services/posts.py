# app/services/posts.py
import logging

from sqlalchemy.orm import Session

from app.database import upsert
from app.models.post import MediaSource, Post
from app.models.topic import Topic
from app.schemas.post_schema import PostDetail, TopicSummary
from app.utils.errors import NotFoundError
from app.utils.ids import is_valid_id, new_id
from app.utils.s3 import MediaStorage

logger = logging.getLogger(__name__)


def normalize_link(link: str | None) -> str | None:
    """Force an https scheme onto the external link: ``tiktok.com/x`` -> ``https://tiktok.com/x``."""
    if not link or not link.strip():
        return None
    return f"https://{link.strip().split('//')[-1]}"


def bump_topic(db: Session, title: str) -> str:
    """Increment the topic's post count, creating the topic on first use. Returns its id."""
    stmt = upsert(db, Topic).values(id=new_id(), title=title, posts=1)
    stmt = stmt.on_conflict_do_update(
        index_elements=[Topic.title],
        set_={"posts": Topic.posts + 1},
    ).returning(Topic.id)
    return db.execute(stmt).scalar_one()


def create_post(
    db: Session,
    storage: MediaStorage,
    *,
    author_id: str,
    topic: str,
    caption: str | None,
    tiktok: str | None,
    filename: str,
    body: bytes,
    content_type: str,
) -> str:
    key = storage.key_for(filename)
    media_url = storage.upload(key, body, content_type)

    # Upload succeeded; if the rows can't be written, remove the orphaned object
    try:
        topic_id = bump_topic(db, topic)
        post_id = new_id()
        db.add(Post(
            id=post_id,
            topic_id=topic_id,
            author_id=author_id,
            caption=caption,
            media_url=media_url,
            tiktok=normalize_link(tiktok),
            media_source=MediaSource.UPLOAD,
        ))
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Post write failed after upload of %s, removing object", key)
        storage.delete(key)
        raise

    logger.info("Post %s created by %s in topic %r", post_id, author_id, topic)
    return post_id


def get_post(db: Session, post_id: str) -> PostDetail:
    if not is_valid_id(post_id):
        raise NotFoundError("Post not found")

    row = (
        db.query(Post, Topic)
        .join(Topic, Post.topic_id == Topic.id)
        .filter(Post.id == post_id)
        .first()
    )
    if not row:
        raise NotFoundError("Post not found")

    post, topic = row
    return PostDetail(
        id=post.id,
        topic_id=TopicSummary.model_validate(topic),
        author_id=post.author_id,
        caption=post.caption,
        media_url=post.media_url,
        tiktok=post.tiktok,
        upvotes=post.upvotes,
        downvotes=post.downvotes,
        shares=post.shares,
        created_at=post.created_at,
    )
