from .auth_routes import auth_bp
from .campaign_routes import campaign_bp
from .category_routes import category_bp
from .core_routes import core_bp
from .follow_routes import follow_bp
from .interaction_routes import interaction_bp
from .media_routes import media_bp
from .post_routes import post_bp
from .progress_routes import progress_bp
from .statistics_routes import statistics_bp
from .user_routes import user_bp

__all__ = [
    "auth_bp",
    "campaign_bp",
    "category_bp",
    "core_bp",
    "follow_bp",
    "interaction_bp",
    "media_bp",
    "post_bp",
    "progress_bp",
    "statistics_bp",
    "user_bp",
]
