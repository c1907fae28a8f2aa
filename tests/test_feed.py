# tests/test_feed.py
from datetime import datetime, timedelta, timezone

import pytest

from app.models import Vote, VoteType
from app.services.feed import FeedQuery, list_posts, parse_since, parse_sort, total_pages
from app.utils.errors import BadRequestError
from conftest import auth_header, make_post, make_user, minutes_ago


def _ids(res):
    return [doc["_id"] for doc in res.json()["data"]["docs"]]


def test_total_pages_rounds_up(client, db_session):
    user = make_user(db_session)
    for _ in range(45):
        make_post(db_session, user)

    res = client.get("/post", params={"page": 1, "limit": 20})
    assert res.status_code == 200
    meta = res.json()["data"]["meta"]
    assert meta == {"page": 1, "limit": 20, "total_count": 45, "total_pages": 3}
    assert len(res.json()["data"]["docs"]) == 20

    last = client.get("/post", params={"page": 3, "limit": 20}).json()["data"]
    assert len(last["docs"]) == 5


def test_pages_do_not_overlap(client, db_session):
    user = make_user(db_session)
    for _ in range(7):
        make_post(db_session, user, created_at=minutes_ago(5))

    seen = []
    for page in (1, 2, 3):
        seen += _ids(client.get("/post", params={"page": page, "limit": 3}))
    assert len(seen) == 7
    assert len(set(seen)) == 7


def test_zero_limit_has_no_pages(client, db_session):
    user = make_user(db_session)
    make_post(db_session, user)
    data = client.get("/post", params={"limit": 0}).json()["data"]
    assert data["docs"] == []
    assert data["meta"]["total_count"] == 1
    assert data["meta"]["total_pages"] == 0


def test_default_sort_is_newest_first(client, db_session):
    user = make_user(db_session)
    old = make_post(db_session, user, created_at=minutes_ago(30))
    new = make_post(db_session, user, created_at=minutes_ago(1))
    mid = make_post(db_session, user, created_at=minutes_ago(10))

    assert _ids(client.get("/post")) == [new.id, mid.id, old.id]
    # unknown sort keys fall back to the same ordering, whatever the direction
    assert _ids(client.get("/post", params={"sort": "hot", "order": "asc"})) == [new.id, mid.id, old.id]


def test_sort_top_and_shares(client, db_session):
    user = make_user(db_session)
    a = make_post(db_session, user, upvotes=5, shares=1)
    b = make_post(db_session, user, upvotes=1, shares=9)
    c = make_post(db_session, user, upvotes=3, shares=4)

    assert _ids(client.get("/post", params={"sort": "top", "order": "desc"})) == [a.id, c.id, b.id]
    assert _ids(client.get("/post", params={"sort": "top"})) == [b.id, c.id, a.id]
    assert _ids(client.get("/post", params={"sort": "rand", "order": "DESC"})) == [b.id, c.id, a.id]


def test_sort_rec_ascending(client, db_session):
    user = make_user(db_session)
    old = make_post(db_session, user, created_at=minutes_ago(30))
    new = make_post(db_session, user, created_at=minutes_ago(1))
    assert _ids(client.get("/post", params={"sort": "rec", "order": "asc"})) == [old.id, new.id]


def test_since_window(client, db_session):
    user = make_user(db_session)
    recent = make_post(db_session, user, created_at=minutes_ago(10))
    stale = make_post(db_session, user, created_at=minutes_ago(120))
    ancient = make_post(db_session, user, created_at=minutes_ago(60 * 24 * 30))

    assert _ids(client.get("/post", params={"since": "1h"})) == [recent.id]
    assert _ids(client.get("/post", params={"since": "6h"})) == [recent.id, stale.id]
    assert _ids(client.get("/post")) == [recent.id, stale.id, ancient.id]
    # unsupported windows are ignored
    assert len(_ids(client.get("/post", params={"since": "3w"}))) == 3


def test_filter_by_topic_and_author(client, db_session):
    alice = make_user(db_session)
    bob = make_user(db_session)
    cat = make_post(db_session, alice, "cats")
    make_post(db_session, bob, "dogs")
    bob_cat = make_post(db_session, bob, "cats")

    by_topic = _ids(client.get("/post", params={"topic": cat.topic_id}))
    assert set(by_topic) == {cat.id, bob_cat.id}

    both = _ids(client.get("/post", params={"topic": cat.topic_id, "author": bob.id}))
    assert both == [bob_cat.id]


def test_malformed_filter_ids_rejected(client, db_session):
    res = client.get("/post", params={"topic": "cats"})
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid topic id"

    res = client.get("/post", params={"author": "0xabc"})
    assert res.status_code == 400


def test_bad_paging_values_rejected(client, db_session):
    assert client.get("/post", params={"page": 0}).status_code == 400
    assert client.get("/post", params={"limit": -1}).status_code == 400
    assert client.get("/post", params={"page": "two"}).status_code == 400


def test_oversized_paging_values_rejected(client, db_session):
    res = client.get("/post", params={"page": 10**17, "limit": 100})
    assert res.status_code == 400
    assert res.json()["message"] == "Page out of range"

    assert client.get("/post", params={"limit": 10**19}).status_code == 400
    assert client.get("/post", params={"limit": 101}).status_code == 400
    assert client.get("/post", params={"limit": 100}).status_code == 200

    with pytest.raises(BadRequestError):
        list_posts(db_session, FeedQuery(page=2**62, limit=100))


def test_docs_shape_for_anonymous_callers(client, db_session):
    user = make_user(db_session)
    post = make_post(db_session, user, "music")

    doc = client.get("/post").json()["data"]["docs"][0]
    assert doc["_id"] == post.id
    assert doc["author"] == {"_id": user.id, "address": user.address}
    assert doc["topic"] == {"_id": post.topic_id, "title": "music"}
    assert doc["media_source"] == "UPLOAD"
    assert "upvoted" not in doc
    assert "downvoted" not in doc


def test_vote_flags_for_authenticated_callers(client, db_session):
    author = make_user(db_session)
    viewer = make_user(db_session)
    liked = make_post(db_session, author, created_at=minutes_ago(3))
    disliked = make_post(db_session, author, created_at=minutes_ago(2))
    untouched = make_post(db_session, author, created_at=minutes_ago(1))
    db_session.add_all([
        Vote(user_id=viewer.id, post_id=liked.id, type=VoteType.UPVOTE),
        Vote(user_id=viewer.id, post_id=disliked.id, type=VoteType.DOWNVOTE),
        Vote(user_id=author.id, post_id=untouched.id, type=VoteType.UPVOTE),
    ])
    db_session.commit()

    docs = client.get("/post", headers=auth_header(viewer)).json()["data"]["docs"]
    flags = {d["_id"]: (d["upvoted"], d["downvoted"]) for d in docs}
    assert flags == {
        liked.id: (True, False),
        disliked.id: (False, True),
        untouched.id: (False, False),
    }


def test_invalid_token_on_feed_rejected(client, db_session):
    res = client.get("/post", headers={"Authorization": "Bearer nope"})
    assert res.status_code == 401


def test_parse_helpers():
    now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert parse_since("1h", now) == now - timedelta(hours=1)
    assert parse_since("7d", now) == now - timedelta(days=7)
    assert parse_since(None, now) is None
    assert parse_since("forever", now) is None

    assert str(parse_sort(None, "asc")) == str(parse_sort("nope", "desc"))
    assert total_pages(45, 20) == 3
    assert total_pages(40, 20) == 2
    assert total_pages(0, 20) == 0
    assert total_pages(10, 0) == 0


def test_list_posts_service_counts_with_filters(db_session):
    user = make_user(db_session)
    make_post(db_session, user, created_at=minutes_ago(5))
    make_post(db_session, user, created_at=minutes_ago(600))

    docs, meta = list_posts(db_session, FeedQuery(since="1h", limit=1))
    assert meta.total_count == 1
    assert meta.total_pages == 1
    assert len(docs) == 1
