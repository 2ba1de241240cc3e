import pytest

from charity_api.errors import BusinessError, PostErrorCode
from charity_api.services import post_service
from tests.conftest import make_user


@pytest.fixture
def posts(monkeypatch):
    rows = {}
    author = make_user(id="author", name="Minh", email="minh@example.com", reputation=72)

    def insert(data):
        row = {**data, "id": f"p-{len(rows) + 1}"}
        rows[row["id"]] = row
        return dict(row)

    def update(post_id, fields):
        rows[post_id].update(fields)
        return dict(rows[post_id])

    monkeypatch.setattr(post_service, "get_user", lambda uid: author if uid == "author" else None)
    monkeypatch.setattr(post_service, "get_campaign", lambda cid: {"id": cid} if cid == "c-1" else None)
    monkeypatch.setattr(post_service, "insert_post", insert)
    monkeypatch.setattr(post_service, "get_post", lambda pid: dict(rows[pid]) if pid in rows else None)
    monkeypatch.setattr(post_service, "update_post", update)
    monkeypatch.setattr(post_service, "soft_delete_post", lambda pid: bool(rows.pop(pid, None)))
    return rows


def test_create_snapshots_creator(posts):
    post = post_service.create_post({"content": {"text": "Day one"}}, "author")

    assert post["type"] == "text"
    assert post["visibility"] == "public"
    assert post["creator"] == {
        "name": "Minh",
        "email": "minh@example.com",
        "avatar": None,
        "reputation": 72,
    }


def test_empty_post_is_refused(posts):
    with pytest.raises(BusinessError) as exc:
        post_service.create_post({"content": {}}, "author")
    assert exc.value.error_code == PostErrorCode.CONTENT_REQUIRED


def test_long_text_is_refused(posts):
    with pytest.raises(BusinessError) as exc:
        post_service.create_post({"content": {"text": "x" * 2001}}, "author")
    assert exc.value.error_code == PostErrorCode.CONTENT_TOO_LONG


def test_unknown_campaign(posts):
    with pytest.raises(BusinessError) as exc:
        post_service.create_post({"content": {"text": "hi"}, "campaign_id": "c-404"}, "author")
    assert exc.value.error_code == PostErrorCode.CAMPAIGN_NOT_FOUND
    assert exc.value.status == 404


def test_private_post_visible_to_creator_only(posts):
    post = post_service.create_post({"content": {"text": "notes"}, "visibility": "private"}, "author")

    assert post_service.get_visible_post(post["id"], "author")["id"] == post["id"]
    with pytest.raises(BusinessError) as exc:
        post_service.get_visible_post(post["id"], None)
    assert exc.value.error_code == PostErrorCode.PRIVATE_POST


def test_edit_merges_content_and_rederives_type(posts):
    post = post_service.create_post({"content": {"text": "before"}}, "author")

    updated = post_service.update_post_details(
        post["id"], {"content": {"images": [{"url": "https://img/1.png"}]}}, "author"
    )

    assert updated["content"]["text"] == "before"
    assert updated["type"] == "image"


def test_only_owner_edits_or_deletes(posts):
    post = post_service.create_post({"content": {"text": "mine"}}, "author")

    for action in (
        lambda: post_service.update_post_details(post["id"], {"visibility": "private"}, "other"),
        lambda: post_service.remove_post(post["id"], "other"),
    ):
        with pytest.raises(BusinessError) as exc:
            action()
        assert exc.value.error_code == PostErrorCode.NOT_OWNER
    assert post_service.remove_post(post["id"], "author")["deleted"] is True
