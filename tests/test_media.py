from datetime import datetime, timezone

import pytest
from google.auth.exceptions import DefaultCredentialsError

from charity_api.errors import BusinessError, CommonErrorCode, MediaErrorCode
from charity_api.services import media_service
from charity_api.storage import StorageError, build_path, safe_name
from charity_api.storage import gcs
from charity_api.utils.media_validators import (
    infer_media_type_from_content_type,
    validate_filename,
    validate_size,
)


class FakeStorage:
    def __init__(self, fail=False):
        self.fail = fail
        self.uploaded = {}
        self.deleted = []

    def upload(self, data, path, content_type, is_public=True, metadata=None):
        if self.fail:
            raise StorageError("bucket unreachable")
        self.uploaded[path] = data
        return {"url": f"https://cdn.example.com/{path}", "path": path, "size": len(data)}

    def delete(self, path):
        self.deleted.append(path)
        return True

    def signed_url(self, path, expires_in=3600):
        return f"https://signed.example.com/{path}?ttl={expires_in}"


@pytest.fixture
def media_store(app, monkeypatch):
    rows = {}

    def create(**fields):
        row = {**fields, "id": f"m-{len(rows) + 1}", "status": "uploading", "url": None,
               "view_count": 0, "download_count": 0}
        rows[row["id"]] = row
        return dict(row)

    def update(media_id, **fields):
        rows[media_id].update(fields)
        return dict(rows[media_id])

    monkeypatch.setattr(media_service, "create_media", create)
    monkeypatch.setattr(media_service, "update_media", update)
    monkeypatch.setattr(media_service, "get_media", lambda mid: dict(rows[mid]) if mid in rows else None)
    monkeypatch.setattr(media_service, "increment_counter", lambda mid, col: None)
    monkeypatch.setattr(media_service, "mark_deleted", lambda mid: rows[mid].update(status="deleted") or True)
    return rows


def use_storage(monkeypatch, storage):
    monkeypatch.setattr(media_service, "get_storage", lambda provider: storage)
    return storage


def test_path_layout():
    now = datetime(2025, 3, 7, tzinfo=timezone.utc)
    path = build_path("s3", "image", "Ảnh Đẹp.JPG", now=now)

    prefix, name = path.rsplit("/", 1)
    assert prefix == "media/s3/images/2025/03/07"
    hex_part, rest = name.split("_", 1)
    assert len(hex_part) == 32
    assert rest == "anh-dep.jpg"


def test_safe_name_falls_back():
    assert safe_name("???") == "file"


def test_media_validators():
    assert infer_media_type_from_content_type("image/png") == "image"
    assert infer_media_type_from_content_type("application/zip") is None
    assert validate_filename("report.pdf", "document") == (True, None)
    ok, err = validate_filename("virus.exe", "image")
    assert not ok and err
    ok, _ = validate_size(11, "image", 10)
    assert not ok


def test_upload_stores_blob_and_marks_ready(media_store, monkeypatch):
    storage = use_storage(monkeypatch, FakeStorage())

    media = media_service.upload_media(
        user_id="u1", data=b"\x89PNG...", filename="cover.png", content_type="image/png"
    )

    assert media["status"] == "ready"
    assert media["type"] == "image"
    assert media["provider"] == "s3"
    assert media["url"].startswith("https://cdn.example.com/media/s3/images/")
    assert list(storage.uploaded) == [media["cloud_path"]]


def test_upload_rejects_wrong_extension(media_store, monkeypatch):
    use_storage(monkeypatch, FakeStorage())

    with pytest.raises(BusinessError) as exc:
        media_service.upload_media(
            user_id="u1", data=b"x", filename="cover.exe", content_type="image/png"
        )
    assert exc.value.error_code == MediaErrorCode.INVALID_FILE_TYPE
    assert media_store == {}


def test_upload_rejects_oversized_file(app, media_store, monkeypatch):
    use_storage(monkeypatch, FakeStorage())
    app.config["MAX_IMAGE_SIZE"] = 4

    with pytest.raises(BusinessError) as exc:
        media_service.upload_media(
            user_id="u1", data=b"12345", filename="a.png", content_type="image/png"
        )
    assert exc.value.error_code == MediaErrorCode.FILE_TOO_LARGE
    assert exc.value.status == 413


def test_storage_failure_marks_row_failed(media_store, monkeypatch):
    use_storage(monkeypatch, FakeStorage(fail=True))

    with pytest.raises(BusinessError) as exc:
        media_service.upload_media(
            user_id="u1", data=b"abc", filename="notes.txt", content_type="text/plain"
        )
    assert exc.value.error_code == MediaErrorCode.UPLOAD_FAILED
    (row,) = media_store.values()
    assert row["status"] == "failed"


@pytest.fixture
def gcs_without_credentials(monkeypatch):
    def no_credentials(*args, **kwargs):
        raise DefaultCredentialsError("Could not automatically determine credentials")

    monkeypatch.delenv("GCS_KEY_FILE", raising=False)
    monkeypatch.setattr(gcs.storage, "Client", no_credentials)
    return gcs.GCSStorage()


def test_gcs_credential_failure_is_a_storage_error(gcs_without_credentials):
    with pytest.raises(StorageError):
        gcs_without_credentials.upload(b"abc", "media/x.txt", "text/plain")
    with pytest.raises(StorageError):
        gcs_without_credentials.signed_url("media/x.txt")
    assert gcs_without_credentials.delete("media/x.txt") is False


def test_gcs_credential_failure_marks_row_failed(media_store, monkeypatch, gcs_without_credentials):
    use_storage(monkeypatch, gcs_without_credentials)

    with pytest.raises(BusinessError) as exc:
        media_service.upload_media(
            user_id="u1",
            data=b"abc",
            filename="notes.txt",
            content_type="text/plain",
            provider="google_cloud",
        )
    assert exc.value.error_code == MediaErrorCode.UPLOAD_FAILED
    assert exc.value.status == 502
    (row,) = media_store.values()
    assert row["status"] == "failed"


def test_private_media_hidden_from_others(media_store, monkeypatch):
    use_storage(monkeypatch, FakeStorage())
    media = media_service.upload_media(
        user_id="owner", data=b"abc", filename="a.png", content_type="image/png"
    )

    with pytest.raises(BusinessError) as exc:
        media_service.get_media_for_viewer(media["id"], "stranger")
    assert exc.value.status == 404
    assert media_service.get_media_for_viewer(media["id"], "owner")["view_count"] == 1


def test_only_owner_deletes(media_store, monkeypatch):
    storage = use_storage(monkeypatch, FakeStorage())
    media = media_service.upload_media(
        user_id="owner", data=b"abc", filename="a.png", content_type="image/png", is_public=True
    )

    with pytest.raises(BusinessError) as exc:
        media_service.delete_media(media["id"], "stranger")
    assert exc.value.error_code == CommonErrorCode.FORBIDDEN

    media_service.delete_media(media["id"], "owner")
    assert storage.deleted == [media["cloud_path"]]
    assert media_store[media["id"]]["status"] == "deleted"


def test_view_url_signs_private_files(media_store, monkeypatch):
    use_storage(monkeypatch, FakeStorage())
    media = media_service.upload_media(
        user_id="owner", data=b"abc", filename="a.png", content_type="image/png"
    )

    result = media_service.view_url(media["id"], "owner")

    assert result["expires_in"] == 24 * 3600
    assert result["url"].startswith("https://signed.example.com/")
