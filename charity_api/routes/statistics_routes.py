from flask import Blueprint

from charity_api.enums import UserRole
from charity_api.services.campaign_service import statistics
from charity_api.utils.authz import auth_required
from charity_api.utils.responses import respond

statistics_bp = Blueprint("statistics", __name__)


@statistics_bp.get("/campaigns")
@auth_required(UserRole.ADMIN)
def campaigns(viewer):
    return respond(statistics())
