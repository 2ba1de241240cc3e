import uuid
from datetime import datetime, timedelta, timezone

import pytest

from charity_api.errors import BusinessError, CampaignErrorCode
from charity_api.services import campaign_service as svc
from tests.conftest import make_user

START = datetime(2025, 1, 1, tzinfo=timezone.utc)


def campaign_row(**overrides):
    row = {
        "id": str(uuid.uuid4()),
        "title": "Clean water for Ha Giang",
        "type": "normal",
        "funding_type": "fixed",
        "status": "pending_review",
        "creator_id": "creator-1",
        "target_amount": 1000,
        "current_amount": 0,
        "review_fee": 0,
        "milestones": [
            {"title": "Wells", "budget": 600, "duration_days": 30, "status": "pending"},
            {"title": "Pipes", "budget": 400, "duration_days": 20, "status": "pending"},
        ],
    }
    row.update(overrides)
    return row


@pytest.fixture
def store(app, monkeypatch, no_db):
    """In-memory campaigns and users behind campaign_service."""
    no_db(svc)
    state = {"campaigns": {}, "users": {}, "active": 0, "donations": 0, "stats": [], "titles": []}

    def update(cur, campaign_id, fields):
        state["campaigns"][campaign_id].update(fields)
        return dict(state["campaigns"][campaign_id])

    def insert(cur, row):
        row = {**row, "id": str(uuid.uuid4()), "current_amount": 0}
        state["campaigns"][row["id"]] = row
        return dict(row)

    monkeypatch.setattr(svc, "get_campaign_for_update", lambda cur, cid: state["campaigns"].get(cid))
    monkeypatch.setattr(svc, "get_campaign", lambda cid: state["campaigns"].get(cid))
    monkeypatch.setattr(svc, "update_campaign", update)
    monkeypatch.setattr(svc, "insert_campaign", insert)
    monkeypatch.setattr(svc, "delete_campaign", lambda cur, cid: state["campaigns"].pop(cid) and True)
    monkeypatch.setattr(svc, "count_creator_campaigns", lambda cur, uid, statuses: state["active"])
    monkeypatch.setattr(svc, "count_campaign_donations", lambda cur, cid: state["donations"])
    monkeypatch.setattr(svc, "get_user_for_update", lambda cur, uid: state["users"].get(uid))
    monkeypatch.setattr(svc, "get_user", lambda uid: state["users"].get(uid))
    monkeypatch.setattr(
        svc, "adjust_campaign_stats", lambda cur, uid, **deltas: state["stats"].append((uid, deltas))
    )
    monkeypatch.setattr(svc, "set_campaign_title", lambda cur, cid, t: state["titles"].append(("follows", t)))
    monkeypatch.setattr(
        svc, "set_progress_campaign_title", lambda cur, cid, t: state["titles"].append(("progress", t))
    )
    monkeypatch.setattr(svc, "invalidate", lambda *keys: None)
    return state


def new_campaign(**overrides):
    data = {
        "title": "School roof",
        "description": "Fix the roof before the rainy season",
        "type": "normal",
        "funding_type": "fixed",
        "target_amount": 1000,
        "review_fee": 0,
        "milestones": [
            {"title": "Materials", "budget": 700, "duration_days": 10},
            {"title": "Labour", "budget": 300, "duration_days": 5},
        ],
    }
    data.update(overrides)
    return data


def test_quota_depends_on_reputation():
    assert svc.max_active_campaigns(95) == 5
    assert svc.max_active_campaigns(80) == 5
    assert svc.max_active_campaigns(60) == 3
    assert svc.max_active_campaigns(59) == 2


def test_review_priority_thresholds():
    assert svc.review_priority(500000) == (4, "urgent")
    assert svc.review_priority(200000) == (3, "high")
    assert svc.review_priority(50000) == (2, "medium")
    assert svc.review_priority(0) == (1, "low")


def test_create_starts_pending_review_and_counts_creator(store):
    creator = make_user(id="creator-1", reputation=70)
    store["users"]["creator-1"] = creator

    campaign = svc.create_campaign(new_campaign(), "creator-1")

    assert campaign["status"] == "pending_review"
    assert campaign["creator_name"] == creator["name"]
    assert [m["status"] for m in campaign["milestones"]] == ["pending", "pending"]
    assert campaign["milestones"][0]["progress_percentage"] == 0
    assert store["stats"] == [("creator-1", {"created": 1})]


def test_create_refuses_unknown_creator(store):
    with pytest.raises(BusinessError) as exc:
        svc.create_campaign(new_campaign(), "ghost")
    assert exc.value.error_code == CampaignErrorCode.CREATOR_NOT_FOUND
    assert exc.value.status == 404


def test_create_refuses_when_quota_reached(store):
    store["users"]["creator-1"] = make_user(id="creator-1", reputation=60)
    store["active"] = 3

    with pytest.raises(BusinessError) as exc:
        svc.create_campaign(new_campaign(), "creator-1")
    assert exc.value.error_code == CampaignErrorCode.ACTIVE_LIMIT_EXCEEDED
    assert exc.value.status == 403
    assert store["campaigns"] == {}


def test_milestone_budgets_must_match_target(store):
    store["users"]["creator-1"] = make_user(id="creator-1")
    data = new_campaign(target_amount=1200)

    with pytest.raises(BusinessError) as exc:
        svc.create_campaign(data, "creator-1")
    assert exc.value.error_code == CampaignErrorCode.MILESTONE_BUDGET_MISMATCH


def test_milestone_duration_bounds(store):
    store["users"]["creator-1"] = make_user(id="creator-1")
    data = new_campaign(
        milestones=[{"title": "Everything", "budget": 1000, "duration_days": 400}]
    )

    with pytest.raises(BusinessError) as exc:
        svc.create_campaign(data, "creator-1")
    assert exc.value.error_code == CampaignErrorCode.MILESTONE_DURATION_INVALID


def test_start_must_precede_end(store):
    store["users"]["creator-1"] = make_user(id="creator-1")
    data = new_campaign(start_date=START, end_date=START)

    with pytest.raises(BusinessError) as exc:
        svc.create_campaign(data, "creator-1")
    assert exc.value.error_code == CampaignErrorCode.END_DATE_BEFORE_START


def test_emergency_needs_reputation(store):
    store["users"]["creator-1"] = make_user(id="creator-1", reputation=59)
    data = new_campaign(type="emergency", milestones=[])

    with pytest.raises(BusinessError) as exc:
        svc.create_campaign(data, "creator-1")
    assert exc.value.error_code == CampaignErrorCode.EMERGENCY_REPUTATION_TOO_LOW
    assert exc.value.status == 403


def test_emergency_refuses_several_milestones(store):
    store["users"]["creator-1"] = make_user(id="creator-1", reputation=90)

    with pytest.raises(BusinessError) as exc:
        svc.create_campaign(new_campaign(type="emergency"), "creator-1")
    assert exc.value.error_code == CampaignErrorCode.EMERGENCY_MULTIPLE_MILESTONES


def test_emergency_gets_single_full_budget_milestone(store):
    store["users"]["creator-1"] = make_user(id="creator-1", reputation=90)
    data = new_campaign(
        type="emergency",
        milestones=[],
        start_date=START,
        end_date=START + timedelta(days=45),
    )

    campaign = svc.create_campaign(data, "creator-1")

    (milestone,) = campaign["milestones"]
    assert milestone["budget"] == 1000
    assert milestone["duration_days"] == 45
    assert milestone["title"] == "Full disbursement"
    assert milestone["due_date"] is None


def test_approve_sets_cumulative_due_dates(store):
    store["users"]["admin"] = make_user(id="admin", role="admin", name="Reviewer")
    campaign = campaign_row(review_fee=250000)
    store["campaigns"][campaign["id"]] = campaign

    approved = svc.approve_campaign(campaign["id"], "admin", "looks good")

    assert approved["status"] == "approved"
    first = datetime.fromisoformat(approved["milestones"][0]["due_date"])
    second = datetime.fromisoformat(approved["milestones"][1]["due_date"])
    assert first - approved["approved_at"] == timedelta(days=30)
    assert second - first == timedelta(days=20)
    assert approved["review"]["reviewer_name"] == "Reviewer"
    assert approved["review"]["priority_label"] == "high"


def test_emergency_due_date_is_set_by_approval(store):
    store["users"]["creator-1"] = make_user(id="creator-1", reputation=90)
    store["users"]["admin"] = make_user(id="admin", role="admin")
    data = new_campaign(
        type="emergency", milestones=[], start_date=START, end_date=START + timedelta(days=45)
    )
    (milestone,) = svc.create_campaign(data, "creator-1")["milestones"]
    campaign = campaign_row(type="emergency", milestones=[milestone])
    store["campaigns"][campaign["id"]] = campaign

    approved = svc.approve_campaign(campaign["id"], "admin")

    due = datetime.fromisoformat(approved["milestones"][0]["due_date"])
    assert due - approved["approved_at"] == timedelta(days=45)


def test_only_pending_campaigns_can_be_reviewed(store):
    store["users"]["admin"] = make_user(id="admin", role="admin")
    campaign = campaign_row(status="approved")
    store["campaigns"][campaign["id"]] = campaign

    with pytest.raises(BusinessError) as exc:
        svc.reject_campaign(campaign["id"], "admin", "duplicate")
    assert exc.value.error_code == CampaignErrorCode.CANNOT_EDIT


def test_reject_records_reason(store):
    store["users"]["admin"] = make_user(id="admin", role="admin")
    campaign = campaign_row()
    store["campaigns"][campaign["id"]] = campaign

    rejected = svc.reject_campaign(campaign["id"], "admin", "missing documents")

    assert rejected["status"] == "rejected"
    assert rejected["rejection_reason"] == "missing documents"
    assert rejected["review"]["status"] == "rejected"


def test_invalid_transition_is_refused(store):
    campaign = campaign_row(status="fundraising")
    store["campaigns"][campaign["id"]] = campaign
    admin = make_user(role="admin")

    with pytest.raises(BusinessError) as exc:
        svc.change_status(campaign["id"], "completed", admin)
    assert exc.value.error_code == CampaignErrorCode.INVALID_STATUS_TRANSITION


def test_implementation_activates_first_pending_milestone(store):
    campaign = campaign_row(status="fundraising")
    store["campaigns"][campaign["id"]] = campaign

    updated = svc.change_status(campaign["id"], "implementation", make_user(role="admin"))

    assert [m["status"] for m in updated["milestones"]] == ["active", "pending"]
    assert updated["milestones"][0]["started_at"]


def test_completion_counts_as_successful(store):
    campaign = campaign_row(status="implementation")
    store["campaigns"][campaign["id"]] = campaign

    updated = svc.change_status(campaign["id"], "completed", make_user(role="admin"))

    assert updated["completed_at"] is not None
    assert store["stats"] == [("creator-1", {"successful": 1})]


def test_creator_cannot_drive_lifecycle(store):
    campaign = campaign_row(status="approved")
    store["campaigns"][campaign["id"]] = campaign
    creator = make_user(id="creator-1")

    with pytest.raises(BusinessError) as exc:
        svc.change_status(campaign["id"], "fundraising", creator)
    assert exc.value.status == 403


def test_cancel_refused_once_money_arrived(store):
    campaign = campaign_row(status="approved", current_amount=50)
    store["campaigns"][campaign["id"]] = campaign

    with pytest.raises(BusinessError) as exc:
        svc.change_status(campaign["id"], "cancelled", make_user(id="creator-1"))
    assert exc.value.error_code == CampaignErrorCode.HAS_DONATIONS


def test_milestone_transitions_follow_order(store):
    campaign = campaign_row(status="implementation")
    campaign["milestones"][0]["status"] = "active"
    store["campaigns"][campaign["id"]] = campaign

    updated = svc.change_milestone_status(campaign["id"], 0, "completed")
    assert updated["milestones"][0]["status"] == "completed"
    assert updated["milestones"][0]["completed_at"]

    with pytest.raises(BusinessError) as exc:
        svc.change_milestone_status(campaign["id"], 1, "verified")
    assert exc.value.error_code == CampaignErrorCode.MILESTONE_INVALID_STATUS_TRANSITION

    with pytest.raises(BusinessError) as exc:
        svc.change_milestone_status(campaign["id"], 5, "active")
    assert exc.value.error_code == CampaignErrorCode.MILESTONE_NOT_FOUND


def test_edit_locked_campaign_is_refused(store):
    campaign = campaign_row(status="completed")
    store["campaigns"][campaign["id"]] = campaign

    with pytest.raises(BusinessError) as exc:
        svc.update_campaign_details(campaign["id"], {"title": "New"}, make_user(id="creator-1"))
    assert exc.value.error_code == CampaignErrorCode.CANNOT_EDIT


def test_edit_by_stranger_is_refused(store):
    campaign = campaign_row()
    store["campaigns"][campaign["id"]] = campaign

    with pytest.raises(BusinessError) as exc:
        svc.update_campaign_details(campaign["id"], {"title": "Mine now"}, make_user())
    assert exc.value.error_code == CampaignErrorCode.NOT_OWNER


def test_rename_propagates_to_snapshots(store):
    campaign = campaign_row()
    store["campaigns"][campaign["id"]] = campaign

    svc.update_campaign_details(campaign["id"], {"title": "Clean water II"}, make_user(id="creator-1"))

    assert store["titles"] == [("follows", "Clean water II"), ("progress", "Clean water II")]


def test_emergency_target_change_resizes_milestone(store):
    campaign = campaign_row(
        type="emergency",
        milestones=[{"title": "Full disbursement", "budget": 1000, "duration_days": 30, "status": "pending"}],
    )
    store["campaigns"][campaign["id"]] = campaign

    updated = svc.update_campaign_details(
        campaign["id"], {"target_amount": 5000}, make_user(id="creator-1")
    )

    assert updated["milestones"][0]["budget"] == 5000


def test_remove_refused_with_donation_records(store):
    campaign = campaign_row()
    store["campaigns"][campaign["id"]] = campaign
    store["donations"] = 1

    with pytest.raises(BusinessError) as exc:
        svc.remove_campaign(campaign["id"], make_user(id="creator-1"))
    assert exc.value.error_code == CampaignErrorCode.HAS_DONATIONS
    assert campaign["id"] in store["campaigns"]


def test_remove_decrements_created_count(store):
    campaign = campaign_row()
    store["campaigns"][campaign["id"]] = campaign

    result = svc.remove_campaign(campaign["id"], make_user(id="creator-1"))

    assert result["deleted"] is True
    assert store["campaigns"] == {}
    assert store["stats"] == [("creator-1", {"created": -1})]
