import logging
import os
from datetime import timedelta

from google.api_core.exceptions import GoogleAPIError, NotFound
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage

from charity_api.storage.base import Storage, StorageError

logger = logging.getLogger(__name__)

# OSError covers an unreadable key file
_FAILURES = (GoogleAPIError, GoogleAuthError, OSError)


class GCSStorage(Storage):
    """Google Cloud Storage bucket."""

    provider = "google_cloud"

    def __init__(self):
        self.bucket_name = os.getenv("GCS_BUCKET_NAME", "charity-media-dev")
        self.key_file = os.getenv("GCS_KEY_FILE")
        self._bucket = None

    def bucket(self):
        if self._bucket is None:
            if self.key_file:
                client = storage.Client.from_service_account_json(self.key_file)
            else:
                client = storage.Client()
            self._bucket = client.bucket(self.bucket_name)
        return self._bucket

    def public_url(self, path: str) -> str:
        return f"https://storage.googleapis.com/{self.bucket_name}/{path}"

    def upload(self, data, path, content_type, is_public=True, metadata=None):
        try:
            blob = self.bucket().blob(path)
            if metadata:
                blob.metadata = {str(k): str(v) for k, v in metadata.items()}
            blob.upload_from_string(data, content_type=content_type)
            if is_public:
                blob.make_public()
        except _FAILURES as e:
            raise StorageError(f"GCS upload failed for {path}: {e}") from e
        url = self.public_url(path) if is_public else self.signed_url(path, 24 * 3600)
        return {"url": url, "path": path, "size": len(data)}

    def delete(self, path):
        try:
            self.bucket().blob(path).delete()
        except NotFound:
            logger.warning("GCS object already gone: %s", path)
            return False
        except _FAILURES as e:
            logger.error("GCS delete failed for %s: %s", path, e)
            return False
        return True

    def signed_url(self, path, expires_in=3600):
        try:
            return self.bucket().blob(path).generate_signed_url(
                version="v4", expiration=timedelta(seconds=expires_in), method="GET"
            )
        # AttributeError: the credentials carry no private key to sign with
        except (*_FAILURES, AttributeError) as e:
            raise StorageError(f"GCS signing failed for {path}: {e}") from e
