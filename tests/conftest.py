# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ.setdefault("AWS_REGION", "eu-north-1")
os.environ.setdefault("S3_BUCKET_NAME", "bitcast-test")

from eth_account import Account
from eth_account.messages import encode_defunct
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.auth.token import create_user_token
from app.database import Base, SessionLocal, create_tables, engine, get_db
from app.main import app as fastapi_app
from app.models import MediaSource, Post, Topic, User
from app.utils.ids import new_id
from app.utils.s3 import MediaStorage, get_storage

_POST_COUNTER = count(1)


class FakeS3Client:
    """Records what MediaStorage sends to S3 instead of talking to AWS."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_uploads = False

    def upload_fileobj(self, Fileobj, Bucket, Key, ExtraArgs=None):
        if self.fail_uploads:
            raise RuntimeError("S3 unavailable")
        self.objects[Key] = Fileobj.read()

    def delete_object(self, Bucket, Key):
        self.deleted.append(Key)
        self.objects.pop(Key, None)


@pytest.fixture()
def db_session() -> Iterator[Session]:
    create_tables()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture()
def storage(s3_client: FakeS3Client) -> MediaStorage:
    return MediaStorage(s3_client, bucket="bitcast-test", prefix="media", region="eu-north-1")


@pytest.fixture()
def client(db_session: Session, storage: MediaStorage) -> Iterator[TestClient]:
    def _get_session_override():
        yield db_session

    fastapi_app.dependency_overrides[get_db] = _get_session_override
    fastapi_app.dependency_overrides[get_storage] = lambda: storage
    try:
        yield TestClient(fastapi_app)
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def wallet():
    return Account.create()


def sign(account, message: str) -> str:
    signed = Account.sign_message(encode_defunct(text=message), private_key=account.key)
    return "0x" + signed.signature.hex().removeprefix("0x")


def make_user(db: Session, address: str | None = None) -> User:
    user = User(address=(address or Account.create().address).lower())
    db.add(user)
    db.commit()
    return user


def make_post(
    db: Session,
    author: User,
    topic_title: str = "memes",
    *,
    created_at: datetime | None = None,
    upvotes: int = 0,
    shares: int = 0,
) -> Post:
    topic = db.query(Topic).filter_by(title=topic_title).first()
    if topic is None:
        topic = Topic(title=topic_title, posts=0)
        db.add(topic)
        db.flush()
    topic.posts += 1

    n = next(_POST_COUNTER)
    post = Post(
        id=new_id(),
        topic_id=topic.id,
        author_id=author.id,
        caption=f"clip {n}",
        media_url=f"https://bitcast-test.s3.eu-north-1.amazonaws.com/media/clip-{n}.mp4",
        tiktok="https://www.tiktok.com/@someone/video/1",
        media_source=MediaSource.UPLOAD,
        upvotes=upvotes,
        shares=shares,
        created_at=created_at or datetime.now(timezone.utc),
    )
    db.add(post)
    db.commit()
    return post


def auth_header(user: User, bearer: bool = True) -> dict[str, str]:
    token = create_user_token(user)
    return {"Authorization": f"Bearer {token}" if bearer else token}


def minutes_ago(minutes: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(minutes=minutes)
