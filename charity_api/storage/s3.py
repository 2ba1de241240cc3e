import logging
import os
from urllib.parse import urlparse

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from charity_api.storage.base import Storage, StorageError

logger = logging.getLogger(__name__)


class S3Storage(Storage):
    """S3-compatible bucket (AWS or MinIO)."""

    provider = "s3"

    def __init__(self):
        self.endpoint = os.getenv("S3_ENDPOINT", "http://127.0.0.1:9000")
        self.region = os.getenv("S3_REGION", "us-east-1")
        self.bucket = os.getenv("S3_BUCKET", "media-dev")
        self.use_path = os.getenv("S3_USE_PATH_STYLE", "true").lower() == "true"
        self._s3 = None

    def _client(self):
        if self._s3 is None:
            self._s3 = boto3.client(
                "s3",
                endpoint_url=self.endpoint,
                region_name=self.region,
                aws_access_key_id=os.getenv("S3_ACCESS_KEY", "minioadmin"),
                aws_secret_access_key=os.getenv("S3_SECRET_KEY", "minioadmin"),
                config=Config(
                    s3={"addressing_style": "path" if self.use_path else "virtual"}
                ),
            )
        return self._s3

    def public_url(self, key: str) -> str:
        if self.use_path:
            return f"{self.endpoint.rstrip('/')}/{self.bucket}/{key}"
        ep = urlparse(self.endpoint)
        return f"{ep.scheme}://{self.bucket}.{ep.netloc}/{key}"

    def upload(self, data, path, content_type, is_public=True, metadata=None):
        extra = {"ContentType": content_type}
        if is_public:
            extra["ACL"] = "public-read"
        if metadata:
            extra["Metadata"] = {str(k): str(v) for k, v in metadata.items()}
        try:
            self._client().put_object(Bucket=self.bucket, Key=path, Body=data, **extra)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"S3 upload failed for {path}: {e}") from e
        url = self.public_url(path) if is_public else self.signed_url(path, 24 * 3600)
        return {"url": url, "path": path, "size": len(data)}

    def delete(self, path):
        try:
            self._client().delete_object(Bucket=self.bucket, Key=path)
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 delete failed for %s: %s", path, e)
            return False
        return True

    def signed_url(self, path, expires_in=3600):
        try:
            return self._client().generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self.bucket, "Key": path},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"S3 signing failed for {path}: {e}") from e
