from flask import Blueprint, request

from charity_api.errors import BusinessError, MediaErrorCode
from charity_api.services.media_service import (
    delete_media,
    download_url,
    get_media_for_viewer,
    search_media,
    update_media_details,
    upload_media,
    view_url,
)
from charity_api.utils.authz import auth_required
from charity_api.utils.pagination import parse_pagination
from charity_api.utils.responses import respond
from charity_api.utils.validation import require_uuid
from charity_api.validators.media import (
    validate_download,
    validate_media_query,
    validate_media_update,
    validate_upload_form,
)

media_bp = Blueprint("media", __name__)


def _media_id(media_id: str) -> str:
    return require_uuid(media_id, MediaErrorCode.NOT_FOUND, "media id")


# POST /api/media/upload  multipart: file, type?, provider?, tags?, description?, altText?, isPublic?
@media_bp.post("/upload")
@auth_required()
def upload(viewer):
    file = request.files.get("file")
    if file is None or not file.filename:
        raise BusinessError(MediaErrorCode.UPLOAD_FAILED, "No file provided")
    form = validate_upload_form(request.form.to_dict())
    media = upload_media(
        user_id=viewer["id"],
        data=file.read(),
        filename=file.filename,
        content_type=file.mimetype or "application/octet-stream",
        media_type=form.get("type"),
        provider=form.get("provider"),
        tags=form.get("tags"),
        description=form.get("description"),
        alt_text=form.get("alt_text"),
        is_public=bool(form.get("is_public")),
    )
    return respond(media, 201)


@media_bp.get("/")
@auth_required()
def list_all(viewer):
    p = validate_media_query(request.args.to_dict())
    page, limit, offset = parse_pagination(p)
    filters = p.raise_if_invalid()
    return respond(search_media(viewer["id"], filters, page, limit, offset))


@media_bp.get("/<media_id>")
@auth_required()
def get_one(media_id, viewer):
    return respond(get_media_for_viewer(_media_id(media_id), viewer["id"]))


@media_bp.put("/<media_id>")
@auth_required()
def update(media_id, viewer):
    changes = validate_media_update(request.get_json(force=True, silent=True) or {})
    return respond(update_media_details(_media_id(media_id), viewer["id"], changes))


@media_bp.delete("/<media_id>")
@auth_required()
def delete(media_id, viewer):
    return respond(delete_media(_media_id(media_id), viewer["id"]))


@media_bp.get("/<media_id>/download")
@auth_required()
def download(media_id, viewer):
    args = validate_download(request.args.to_dict())
    return respond(
        download_url(_media_id(media_id), viewer["id"], args.get("expires_in") or 3600)
    )


@media_bp.get("/<media_id>/view")
@auth_required()
def view(media_id, viewer):
    return respond(view_url(_media_id(media_id), viewer["id"]))
