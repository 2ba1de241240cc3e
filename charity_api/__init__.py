import logging
import time

from dotenv import load_dotenv
from flask import Flask, g, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager

from charity_api.config import load_config
from charity_api.errors import CommonErrorCode, error_response, register_error_handlers
from charity_api.routes import (
    auth_bp,
    campaign_bp,
    category_bp,
    core_bp,
    follow_bp,
    interaction_bp,
    media_bp,
    post_bp,
    progress_bp,
    statistics_bp,
    user_bp,
)
from charity_api.utils.rate_limit import rate_limit_key
from charity_api.utils.responses import ApiJSONProvider

load_dotenv(dotenv_path=".env")

logger = logging.getLogger("charity_api.http")


def _init_jwt(app: Flask) -> None:
    jwt = JWTManager(app)

    @jwt.unauthorized_loader
    def _missing(reason):
        return error_response(401, CommonErrorCode.UNAUTHORIZED, reason)

    @jwt.invalid_token_loader
    def _invalid(reason):
        return error_response(401, CommonErrorCode.UNAUTHORIZED, f"Invalid token: {reason}")

    @jwt.expired_token_loader
    def _expired(jwt_header, jwt_payload):
        return error_response(401, CommonErrorCode.UNAUTHORIZED, "Token has expired")


def _init_request_log(app: Flask) -> None:
    @app.before_request
    def _start_timer():
        g.started_at = time.perf_counter()

    @app.after_request
    def _log_request(response):
        started = g.pop("started_at", None)
        elapsed = (time.perf_counter() - started) * 1000 if started else 0.0
        logger.info(
            "%s %s %s %.1fms - %s %s",
            request.method,
            request.path,
            response.status_code,
            elapsed,
            request.headers.get("User-Agent", "-"),
            rate_limit_key(),
        )
        return response


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__)
    app.config.update(load_config())
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.url_map.strict_slashes = False
    app.json = ApiJSONProvider(app)
    CORS(app, origins=app.config["URL_CLIENT"], supports_credentials=True)
    _init_jwt(app)
    _init_request_log(app)
    register_error_handlers(app)

    prefix = "/" + app.config["API_PREFIX"]
    app.register_blueprint(core_bp, url_prefix=prefix)
    app.register_blueprint(auth_bp, url_prefix=f"{prefix}/auth")
    app.register_blueprint(user_bp, url_prefix=f"{prefix}/users")
    app.register_blueprint(campaign_bp, url_prefix=f"{prefix}/campaigns")
    app.register_blueprint(category_bp, url_prefix=f"{prefix}/categories")
    app.register_blueprint(statistics_bp, url_prefix=f"{prefix}/statistics")
    app.register_blueprint(follow_bp, url_prefix=f"{prefix}/campaign-follows")
    app.register_blueprint(progress_bp, url_prefix=f"{prefix}/progress")
    app.register_blueprint(post_bp, url_prefix=f"{prefix}/posts")
    app.register_blueprint(interaction_bp, url_prefix=prefix)
    app.register_blueprint(media_bp, url_prefix=f"{prefix}/media")

    logger.debug("registered %d routes under %s", len(list(app.url_map.iter_rules())), prefix)
    return app
