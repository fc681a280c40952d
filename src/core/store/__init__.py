"""Blob storage abstraction layer."""

from pathlib import Path

from core.store.interface import BlobStore
from core.store.legacy import LegacyKeyReader, record_key
from core.store.local import LocalBlobStore
from core.store.s3 import S3BlobStore

__all__ = ["BlobStore", "LegacyKeyReader", "LocalBlobStore", "S3BlobStore", "get_blob_store", "record_key"]


def get_blob_store(name: str | None = None) -> BlobStore:
    from core.config import get_config

    config = get_config()
    namespace = name or config.store_name
    if config.environment == "local" and not config.s3_endpoint:
        return LocalBlobStore(Path(config.local_store_dir), namespace)

    from core.clients import get_s3_client

    return S3BlobStore(get_s3_client(), config.bookings_bucket, namespace)
