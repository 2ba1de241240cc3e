from flask import Blueprint

from charity_api.services.campaign_service import categories
from charity_api.utils.responses import respond

category_bp = Blueprint("categories", __name__)


@category_bp.get("/")
def list_all():
    return respond(categories())
