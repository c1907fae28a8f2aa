# app/services/feed.py
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import asc, desc, func, select
from sqlalchemy.orm import Session

from app.models.post import Post
from app.models.topic import Topic
from app.models.user import User
from app.models.vote import Vote, VoteType
from app.schemas.auth_schema import AuthIdentity
from app.schemas.post_schema import AuthorSummary, PageMeta, PostListItem, TopicSummary
from app.utils.errors import BadRequestError
from app.utils.ids import is_valid_id

SORT_FIELDS = {
    "rec": Post.created_at,
    "top": Post.upvotes,
    "rand": Post.shares,
}

MAX_PAGE_SIZE = 100
# Largest offset a BIGINT OFFSET clause accepts
MAX_OFFSET = 2**63 - 1

SINCE_WINDOWS = {
    "1h": timedelta(hours=1),
    "6h": timedelta(hours=6),
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
}


@dataclass
class FeedQuery:
    page: int = 1
    limit: int = 20
    sort: Optional[str] = None
    order: Optional[str] = None
    since: Optional[str] = None
    topic: Optional[str] = None
    author: Optional[str] = None


def parse_sort(sort_by: Optional[str], sort_order: Optional[str]):
    """
    Map the public sort key onto a column and direction.

    Absent or unrecognized keys fall back to newest first; a recognized key
    sorts ascending unless ``order`` is ``desc``.
    """
    column = SORT_FIELDS.get((sort_by or "").lower())
    if column is None:
        return desc(Post.created_at)
    if (sort_order or "").lower() == "desc":
        return desc(column)
    return asc(column)


def parse_since(since: Optional[str], now: Optional[datetime] = None) -> Optional[datetime]:
    window = SINCE_WINDOWS.get(since or "")
    if window is None:
        return None
    return (now or datetime.now(timezone.utc)) - window


def total_pages(total: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return math.ceil(total / limit)


def _check_paging(query: FeedQuery) -> None:
    if query.page < 1 or query.limit < 0 or query.limit > MAX_PAGE_SIZE:
        raise BadRequestError("Invalid page or limit")
    if (query.page - 1) * query.limit > MAX_OFFSET:
        raise BadRequestError("Page out of range")


def _filters(query: FeedQuery, now: Optional[datetime] = None) -> list:
    conditions = []
    if query.topic:
        if not is_valid_id(query.topic):
            raise BadRequestError("Invalid topic id")
        conditions.append(Post.topic_id == query.topic)
    if query.author:
        if not is_valid_id(query.author):
            raise BadRequestError("Invalid author id")
        conditions.append(Post.author_id == query.author)
    cutoff = parse_since(query.since, now)
    if cutoff is not None:
        conditions.append(Post.created_at >= cutoff)
    return conditions


def _vote_flags(db: Session, user_id: str, post_ids: list[str]) -> dict[str, VoteType]:
    if not post_ids:
        return {}
    rows = db.execute(
        select(Vote.post_id, Vote.type).where(Vote.user_id == user_id, Vote.post_id.in_(post_ids))
    ).all()
    return {post_id: vote_type for post_id, vote_type in rows}


def list_posts(
    db: Session,
    query: FeedQuery,
    identity: Optional[AuthIdentity] = None,
    now: Optional[datetime] = None,
) -> tuple[list[dict], PageMeta]:
    _check_paging(query)
    conditions = _filters(query, now)
    order_by = parse_sort(query.sort, query.order)

    total = db.execute(select(func.count(Post.id)).where(*conditions)).scalar_one()

    rows = []
    if query.limit > 0:
        stmt = (
            select(Post, User, Topic)
            .join(User, Post.author_id == User.id)
            .join(Topic, Post.topic_id == Topic.id)
            .where(*conditions)
            # id breaks ties so pages never overlap
            .order_by(order_by, Post.id)
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
        )
        rows = db.execute(stmt).all()

    votes = _vote_flags(db, identity.id, [post.id for post, _, _ in rows]) if identity else {}

    docs = []
    for post, author, topic in rows:
        item = PostListItem(
            id=post.id,
            upvotes=post.upvotes,
            downvotes=post.downvotes,
            shares=post.shares,
            caption=post.caption,
            media_url=post.media_url,
            tiktok=post.tiktok,
            media_source=post.media_source,
            created_at=post.created_at,
            author=AuthorSummary.model_validate(author),
            topic=TopicSummary.model_validate(topic),
        )
        exclude = {"upvoted", "downvoted"}
        if identity:
            vote = votes.get(post.id)
            item.upvoted = vote == VoteType.UPVOTE
            item.downvoted = vote == VoteType.DOWNVOTE
            exclude = set()
        docs.append(item.model_dump(mode="json", by_alias=True, exclude=exclude))

    meta = PageMeta(
        page=query.page,
        limit=query.limit,
        total_count=total,
        total_pages=total_pages(total, query.limit),
    )
    return docs, meta
