import logging
from typing import Any, Dict

from charity_api.errors import BusinessError, CampaignErrorCode
from charity_api.models.campaign import adjust_followers, get_campaign, get_campaign_for_update
from charity_api.models.campaign_follow import (
    get_follow,
    get_follow_for_update,
    list_followed,
    list_followers,
    mark_unfollowed,
    upsert_follow,
)
from charity_api.utils.db import db_cursor
from charity_api.utils.pagination import paginate

logger = logging.getLogger(__name__)


def follow_campaign(campaign_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
    with db_cursor() as cur:
        campaign = get_campaign_for_update(cur, campaign_id)
        if not campaign:
            raise BusinessError(
                CampaignErrorCode.NOT_FOUND, f"Campaign {campaign_id} not found", 404
            )
        existing = get_follow_for_update(cur, campaign_id, user["id"])
        if existing and existing["is_following"]:
            raise BusinessError(
                CampaignErrorCode.ALREADY_FOLLOWING,
                f"You are already following campaign {campaign_id}",
                409,
            )
        follow = upsert_follow(cur, campaign_id, user["id"], campaign["title"], user["name"])
        adjust_followers(cur, campaign_id, 1)

    follow["followers_count"] = campaign["followers_count"] + 1
    logger.info("user %s followed campaign %s", user["id"], campaign_id)
    return follow


def unfollow_campaign(campaign_id: str, user_id: str) -> Dict[str, Any]:
    with db_cursor() as cur:
        if not get_campaign_for_update(cur, campaign_id):
            raise BusinessError(
                CampaignErrorCode.NOT_FOUND, f"Campaign {campaign_id} not found", 404
            )
        if not mark_unfollowed(cur, campaign_id, user_id):
            raise BusinessError(
                CampaignErrorCode.NOT_FOLLOWING,
                f"You are not following campaign {campaign_id}",
            )
        adjust_followers(cur, campaign_id, -1)
    return {"message": "Unfollowed campaign successfully"}


def followed_campaigns(user_id: str, page: int, limit: int, offset: int) -> dict:
    items, total = list_followed(user_id, limit, offset)
    return paginate(items, total, page, limit)


def campaign_followers(campaign_id: str, page: int, limit: int, offset: int) -> dict:
    if not get_campaign(campaign_id):
        raise BusinessError(
            CampaignErrorCode.NOT_FOUND, f"Campaign {campaign_id} not found", 404
        )
    items, total = list_followers(campaign_id, limit, offset)
    return paginate(items, total, page, limit)


def follow_status(campaign_id: str, user_id: str) -> Dict[str, Any]:
    follow = get_follow(campaign_id, user_id)
    if not follow or not follow["is_following"]:
        return {"is_following": False}
    return {"is_following": True, "followed_at": follow["followed_at"]}
