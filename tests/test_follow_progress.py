import uuid

import pytest

from charity_api.errors import BusinessError, CampaignErrorCode, ProgressErrorCode
from charity_api.services import follow_service, progress_service
from tests.conftest import make_user

CAMPAIGN_ID = str(uuid.uuid4())


@pytest.fixture
def campaign(monkeypatch, no_db):
    no_db(follow_service, progress_service)
    row = {
        "id": CAMPAIGN_ID,
        "title": "Books for Lao Cai",
        "status": "implementation",
        "creator_id": "creator-1",
        "followers_count": 0,
        "milestones": [
            {"title": "Buy books", "status": "active", "progress_percentage": 0, "progress_updates_count": 0},
            {"title": "Deliver", "status": "pending", "progress_percentage": 0, "progress_updates_count": 0},
        ],
    }

    def by_id(cur, cid):
        return dict(row) if cid == CAMPAIGN_ID else None

    def adjust(cur, cid, delta):
        row["followers_count"] += delta

    def update(cur, cid, fields):
        row.update(fields)
        return row

    for module in (follow_service, progress_service):
        monkeypatch.setattr(module, "get_campaign_for_update", by_id)
        monkeypatch.setattr(module, "get_campaign", lambda cid: by_id(None, cid))
    monkeypatch.setattr(follow_service, "adjust_followers", adjust)
    monkeypatch.setattr(progress_service, "update_campaign", update)
    return row


@pytest.fixture
def follows(campaign, monkeypatch):
    rows = {}

    def upsert(cur, cid, uid, title, name):
        rows[(cid, uid)] = {"campaign_id": cid, "user_id": uid, "is_following": True}
        return dict(rows[(cid, uid)])

    def unfollow(cur, cid, uid):
        row = rows.get((cid, uid))
        if not row or not row["is_following"]:
            return None
        row["is_following"] = False
        return row

    monkeypatch.setattr(follow_service, "get_follow_for_update", lambda cur, cid, uid: rows.get((cid, uid)))
    monkeypatch.setattr(follow_service, "get_follow", lambda cid, uid: rows.get((cid, uid)))
    monkeypatch.setattr(follow_service, "upsert_follow", upsert)
    monkeypatch.setattr(follow_service, "mark_unfollowed", unfollow)
    return rows


def test_follow_counts_and_refuses_duplicates(campaign, follows):
    user = make_user(id="u1")

    result = follow_service.follow_campaign(CAMPAIGN_ID, user)
    assert result["followers_count"] == 1

    with pytest.raises(BusinessError) as exc:
        follow_service.follow_campaign(CAMPAIGN_ID, user)
    assert exc.value.error_code == CampaignErrorCode.ALREADY_FOLLOWING
    assert exc.value.status == 409
    assert campaign["followers_count"] == 1


def test_unfollow_then_follow_again(campaign, follows):
    user = make_user(id="u1")
    follow_service.follow_campaign(CAMPAIGN_ID, user)
    follow_service.unfollow_campaign(CAMPAIGN_ID, "u1")

    assert campaign["followers_count"] == 0
    assert follow_service.follow_status(CAMPAIGN_ID, "u1") == {"is_following": False}

    follow_service.follow_campaign(CAMPAIGN_ID, user)
    assert campaign["followers_count"] == 1


def test_unfollow_without_follow(campaign, follows):
    with pytest.raises(BusinessError) as exc:
        follow_service.unfollow_campaign(CAMPAIGN_ID, "u1")
    assert exc.value.error_code == CampaignErrorCode.NOT_FOLLOWING
    assert campaign["followers_count"] == 0


def test_follow_unknown_campaign(campaign, follows):
    with pytest.raises(BusinessError) as exc:
        follow_service.follow_campaign(str(uuid.uuid4()), make_user())
    assert exc.value.status == 404


@pytest.fixture
def progress(campaign, monkeypatch):
    inserted = []

    def insert(cur, data):
        inserted.append(data)
        return {**data, "id": str(uuid.uuid4())}

    monkeypatch.setattr(progress_service, "insert_progress", insert)
    return inserted


def report(index=0, pct=40):
    return {
        "campaign_id": CAMPAIGN_ID,
        "milestone_index": index,
        "description": "Ordered the first batch",
        "progress_percentage": pct,
        "work_completed": "ordering",
    }


def test_progress_updates_milestone(campaign, progress):
    creator = make_user(id="creator-1", name="Lan")

    update = progress_service.record_progress(report(pct=40), creator)

    assert update["updated_by_name"] == "Lan"
    assert update["milestone_title"] == "Buy books"
    assert update["metadata"] == {"work_completed": "ordering"}
    milestone = campaign["milestones"][0]
    assert milestone["progress_percentage"] == 40
    assert milestone["progress_updates_count"] == 1


def test_progress_only_by_creator(campaign, progress):
    with pytest.raises(BusinessError) as exc:
        progress_service.record_progress(report(), make_user(id="someone-else"))
    assert exc.value.error_code == ProgressErrorCode.NOT_ALLOWED
    assert exc.value.status == 403
    assert progress == []


def test_progress_only_during_implementation(campaign, progress):
    campaign["status"] = "fundraising"

    with pytest.raises(BusinessError) as exc:
        progress_service.record_progress(report(), make_user(id="creator-1"))
    assert exc.value.error_code == ProgressErrorCode.CAMPAIGN_NOT_IN_IMPLEMENTATION


def test_progress_on_inactive_milestone(campaign, progress):
    with pytest.raises(BusinessError) as exc:
        progress_service.record_progress(report(index=1), make_user(id="creator-1"))
    assert exc.value.error_code == ProgressErrorCode.MILESTONE_NOT_ACTIVE


def test_progress_on_missing_milestone(campaign, progress):
    with pytest.raises(BusinessError) as exc:
        progress_service.record_progress(report(index=7), make_user(id="creator-1"))
    assert exc.value.error_code == CampaignErrorCode.MILESTONE_NOT_FOUND


def test_progress_delete_permissions(campaign, monkeypatch):
    update = {"id": "p-1", "campaign_id": CAMPAIGN_ID, "updated_by": "author"}
    deleted = []
    monkeypatch.setattr(progress_service, "get_progress", lambda pid: update)
    monkeypatch.setattr(progress_service, "delete_progress", lambda pid: deleted.append(pid) or True)

    with pytest.raises(BusinessError):
        progress_service.remove_progress("p-1", make_user(id="stranger"))
    progress_service.remove_progress("p-1", make_user(id="creator-1"))
    progress_service.remove_progress("p-1", make_user(id="admin", role="admin"))

    assert deleted == ["p-1", "p-1"]
