from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from app.auth.token import get_current_user, get_optional_user
from app.core.config import settings
from app.database import get_db
from app.models.vote import VoteType
from app.schemas.auth_schema import AuthIdentity
from app.schemas.common import envelope
from app.schemas.post_schema import PostCreated
from app.services.feed import MAX_PAGE_SIZE, FeedQuery, list_posts
from app.services.posts import create_post, get_post
from app.services.votes import cast_vote, remove_vote
from app.utils.errors import BadRequestError
from app.utils.s3 import MediaStorage, get_storage


router = APIRouter(prefix="/post", tags=["Posts"])


def _read_media(media: Optional[UploadFile]) -> bytes:
    # Everything here runs before storage or db work
    if media is None or not media.filename:
        raise BadRequestError("No file uploaded")
    if media.content_type not in settings.ALLOWED_MEDIA_TYPES:
        raise BadRequestError("Unsupported file type")
    if media.size is not None and media.size > settings.MAX_UPLOAD_BYTES:
        raise BadRequestError("File too large")

    body = media.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(body) > settings.MAX_UPLOAD_BYTES:
        raise BadRequestError("File too large")
    return body


@router.post("")
def create(
    media: Optional[UploadFile] = File(None),
    topic: str = Form(""),
    caption: Optional[str] = Form(None),
    tiktok: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    storage: MediaStorage = Depends(get_storage),
    user: AuthIdentity = Depends(get_current_user),
):
    body = _read_media(media)

    if not topic.strip():
        raise BadRequestError("You cannot leave these fields empty: topic")

    post_id = create_post(
        db,
        storage,
        author_id=user.id,
        topic=topic.strip(),
        caption=caption,
        tiktok=tiktok,
        filename=media.filename,
        body=body,
        content_type=media.content_type,
    )

    return envelope(PostCreated(id=post_id).model_dump(by_alias=True), message="Post created")


@router.get("")
def get_all_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=0, le=MAX_PAGE_SIZE),
    sort: Optional[str] = None,
    order: Optional[str] = None,
    since: Optional[str] = None,
    topic: Optional[str] = None,
    author: Optional[str] = None,
    db: Session = Depends(get_db),
    user: Optional[AuthIdentity] = Depends(get_optional_user),
):
    query = FeedQuery(
        page=page,
        limit=limit,
        sort=sort,
        order=order,
        since=since,
        topic=topic,
        author=author,
    )
    docs, meta = list_posts(db, query, identity=user)
    return envelope({"docs": docs, "meta": meta.model_dump()})


@router.get("/{post_id}")
def get_post_by_id(
    post_id: str,
    db: Session = Depends(get_db),
    user: Optional[AuthIdentity] = Depends(get_optional_user),
):
    post = get_post(db, post_id)
    return envelope(post.model_dump(mode="json", by_alias=True))


@router.patch("/{post_id}/upvote")
def upvote(post_id: str, db: Session = Depends(get_db), user: AuthIdentity = Depends(get_current_user)):
    cast_vote(db, user.id, post_id, VoteType.UPVOTE)
    return envelope(message="Post upvoted")


@router.patch("/{post_id}/downvote")
def downvote(post_id: str, db: Session = Depends(get_db), user: AuthIdentity = Depends(get_current_user)):
    cast_vote(db, user.id, post_id, VoteType.DOWNVOTE)
    return envelope(message="Post downvoted")


@router.patch("/{post_id}/unvote")
def unvote(post_id: str, db: Session = Depends(get_db), user: AuthIdentity = Depends(get_current_user)):
    remove_vote(db, user.id, post_id)
    return envelope(message="Post unvoted")
