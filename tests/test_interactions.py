import uuid

import pytest

from charity_api.errors import BusinessError, CommonErrorCode, PostErrorCode
from charity_api.services import comment_service, like_service, share_service, view_service

POST_ID = str(uuid.uuid4())


@pytest.fixture
def post(monkeypatch, no_db):
    """One post with its counters; counter changes land here."""
    no_db(like_service, comment_service, share_service, view_service)
    row = {
        "id": POST_ID,
        "likes_count": 0,
        "comments_count": 0,
        "shares_count": 0,
        "views_count": 0,
    }

    def adjust(cur, post_id, column, delta):
        row[column] += delta

    for module in (like_service, comment_service, share_service, view_service):
        monkeypatch.setattr(module, "get_post_for_update", lambda cur, pid: row if pid == POST_ID else None)
        monkeypatch.setattr(module, "get_post", lambda pid: row if pid == POST_ID else None)
        monkeypatch.setattr(module, "adjust_counter", adjust)
    return row


@pytest.fixture
def likes(post, monkeypatch):
    rows = set()

    def insert(cur, post_id, user_id):
        if (post_id, user_id) in rows:
            return None
        rows.add((post_id, user_id))
        return {"post_id": post_id, "user_id": user_id}

    def delete(cur, post_id, user_id):
        if (post_id, user_id) not in rows:
            return False
        rows.discard((post_id, user_id))
        return True

    monkeypatch.setattr(like_service, "insert_like", insert)
    monkeypatch.setattr(like_service, "delete_like", delete)
    monkeypatch.setattr(like_service, "count_likes", lambda post_id: len(rows))
    return rows


def test_like_increments_counter_once(post, likes):
    like_service.like_post(POST_ID, "u1")

    with pytest.raises(BusinessError) as exc:
        like_service.like_post(POST_ID, "u1")
    assert exc.value.error_code == PostErrorCode.ALREADY_LIKED
    assert exc.value.status == 409
    assert post["likes_count"] == 1
    assert like_service.likes_count(POST_ID) == {"count": 1}


def test_unlike_without_like(post, likes):
    with pytest.raises(BusinessError) as exc:
        like_service.unlike_post(POST_ID, "u1")
    assert exc.value.error_code == PostErrorCode.NOT_LIKED
    assert post["likes_count"] == 0


def test_like_then_unlike_restores_counter(post, likes):
    like_service.like_post(POST_ID, "u1")
    like_service.like_post(POST_ID, "u2")
    like_service.unlike_post(POST_ID, "u1")

    assert post["likes_count"] == len(likes) == 1


def test_like_missing_post(post, likes):
    with pytest.raises(BusinessError) as exc:
        like_service.like_post(str(uuid.uuid4()), "u1")
    assert exc.value.error_code == PostErrorCode.NOT_FOUND
    assert exc.value.status == 404


@pytest.fixture
def comments(post, monkeypatch):
    rows = {}
    replies = {}

    def insert(cur, data):
        comment = {**data, "id": str(uuid.uuid4())}
        rows[comment["id"]] = comment
        return comment

    def adjust_replies(cur, comment_id, delta):
        replies[comment_id] = replies.get(comment_id, 0) + delta

    monkeypatch.setattr(comment_service, "insert_comment", insert)
    monkeypatch.setattr(comment_service, "get_comment_for_update", lambda cur, cid: rows.get(cid))
    monkeypatch.setattr(comment_service, "get_comment", lambda cid: rows.get(cid))
    monkeypatch.setattr(comment_service, "adjust_replies", adjust_replies)
    monkeypatch.setattr(comment_service, "soft_delete_comment", lambda cur, cid: bool(rows.pop(cid)))
    return {"rows": rows, "replies": replies}


def test_reply_bumps_post_and_parent(post, comments):
    parent = comment_service.add_comment(POST_ID, "u1", "First!")
    comment_service.add_comment(POST_ID, "u2", "Welcome", parent_comment_id=parent["id"])

    assert post["comments_count"] == 2
    assert comments["replies"] == {parent["id"]: 1}


def test_reply_to_comment_of_other_post(post, comments):
    stray = {"id": "c-x", "post_id": str(uuid.uuid4()), "user_id": "u9", "parent_comment_id": None}
    comments["rows"]["c-x"] = stray

    with pytest.raises(BusinessError) as exc:
        comment_service.add_comment(POST_ID, "u1", "hi", parent_comment_id="c-x")
    assert exc.value.error_code == PostErrorCode.COMMENT_NOT_FOUND
    assert post["comments_count"] == 0


def test_blank_comment_is_refused(post, comments):
    with pytest.raises(BusinessError) as exc:
        comment_service.add_comment(POST_ID, "u1", "   ")
    assert exc.value.error_code == PostErrorCode.CONTENT_REQUIRED


def test_delete_reply_decrements_both_counters(post, comments):
    parent = comment_service.add_comment(POST_ID, "u1", "Question?")
    reply = comment_service.add_comment(POST_ID, "u2", "Answer", parent_comment_id=parent["id"])

    comment_service.delete_comment(reply["id"], "u2")

    assert post["comments_count"] == 1
    assert comments["replies"][parent["id"]] == 0


def test_only_author_deletes_comment(post, comments):
    comment = comment_service.add_comment(POST_ID, "u1", "mine")

    with pytest.raises(BusinessError) as exc:
        comment_service.delete_comment(comment["id"], "u2")
    assert exc.value.error_code == PostErrorCode.NOT_OWNER
    assert exc.value.status == 403
    assert post["comments_count"] == 1


@pytest.fixture
def shares(post, monkeypatch):
    rows = set()

    def insert(cur, data):
        key = (data["post_id"], data["user_id"])
        if key in rows:
            return None
        rows.add(key)
        return dict(data)

    def delete(cur, post_id, user_id):
        if (post_id, user_id) not in rows:
            return False
        rows.discard((post_id, user_id))
        return True

    monkeypatch.setattr(share_service, "insert_share", insert)
    monkeypatch.setattr(share_service, "delete_share", delete)
    monkeypatch.setattr(share_service, "count_shares", lambda post_id: len(rows))
    return rows


def test_quote_share_needs_text(post, shares):
    with pytest.raises(BusinessError) as exc:
        share_service.share_post(POST_ID, "u1", share_type="quote")
    assert exc.value.error_code == PostErrorCode.CONTENT_REQUIRED


def test_share_twice(post, shares):
    share_service.share_post(POST_ID, "u1")

    with pytest.raises(BusinessError) as exc:
        share_service.share_post(POST_ID, "u1")
    assert exc.value.error_code == PostErrorCode.ALREADY_SHARED
    assert post["shares_count"] == 1


def test_unshare_without_share(post, shares):
    with pytest.raises(BusinessError) as exc:
        share_service.unshare_post(POST_ID, "u1")
    assert exc.value.error_code == PostErrorCode.NOT_SHARED
    assert exc.value.status == 400
    assert post["shares_count"] == 0


def test_share_then_unshare_restores_counter(post, shares):
    share_service.share_post(POST_ID, "u1")
    share_service.share_post(POST_ID, "u2")

    assert share_service.unshare_post(POST_ID, "u1") == {"post_id": POST_ID, "shared": False}
    assert post["shares_count"] == len(shares) == 1
    assert share_service.shares_count(POST_ID) == {"count": 1}


def test_unshare_missing_post(post, shares):
    with pytest.raises(BusinessError) as exc:
        share_service.unshare_post(str(uuid.uuid4()), "u1")
    assert exc.value.error_code == PostErrorCode.NOT_FOUND


@pytest.fixture
def views(post, monkeypatch):
    seen = set()

    def insert(cur, data):
        key = (data["user_id"], data["session_id"])
        if key in seen:
            return None
        seen.add(key)
        return {"post_id": data["post_id"], "user_id": data["user_id"]}

    monkeypatch.setattr(view_service, "insert_view", insert)
    monkeypatch.setattr(
        view_service,
        "touch_view",
        lambda cur, post_id, user_id, session_id, referrer: {"post_id": post_id, "user_id": user_id},
    )
    return seen


def test_repeat_view_does_not_count(post, views):
    first = view_service.record_view(POST_ID, session_id="s-1")
    again = view_service.record_view(POST_ID, session_id="s-1")
    view_service.record_view(POST_ID, user_id="u1")

    assert first["is_new_view"] is True
    assert again["is_new_view"] is False
    assert post["views_count"] == 2


def test_duration_needs_identity(post, views):
    with pytest.raises(BusinessError) as exc:
        view_service.record_duration(POST_ID, 30)
    assert exc.value.error_code == CommonErrorCode.BAD_REQUEST


def test_duration_for_unknown_view(post, views, monkeypatch):
    monkeypatch.setattr(view_service, "update_duration", lambda *args: None)

    with pytest.raises(BusinessError) as exc:
        view_service.record_duration(POST_ID, 30, session_id="never-seen")
    assert exc.value.status == 404
