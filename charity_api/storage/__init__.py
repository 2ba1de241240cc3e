from charity_api.storage.base import Storage, StorageError, build_path, safe_name

_instances: dict[str, Storage] = {}


def _factories():
    from charity_api.storage.gcs import GCSStorage
    from charity_api.storage.s3 import S3Storage

    return {"s3": S3Storage, "google_cloud": GCSStorage}


def get_storage(provider: str) -> Storage:
    """Lazily built, process-wide storage backend for `provider`."""
    if provider not in _instances:
        factory = _factories().get(provider)
        if factory is None:
            raise ValueError(f"unknown storage provider: {provider}")
        _instances[provider] = factory()
    return _instances[provider]


__all__ = ["Storage", "StorageError", "build_path", "safe_name", "get_storage"]
