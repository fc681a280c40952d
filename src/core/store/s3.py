"""S3-backed blob store: one bucket, one key namespace per named store."""

import logging
from collections.abc import Iterator
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.errors import StorageFailure

from .interface import JSON_CONTENT_TYPE, BlobStore

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


class S3BlobStore(BlobStore):
    def __init__(self, client: Any, bucket: str, namespace: str):
        self._client = client
        self._bucket = bucket
        self._namespace = namespace.strip("/")

    def _full_key(self, key: str) -> str:
        return f"{self._namespace}/{key}"

    def get(self, key: str) -> bytes | None:
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=self._full_key(key))
            return response["Body"].read()
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_KEY_CODES:
                return None
            raise StorageFailure(f"get {key} failed: {e}") from e
        except BotoCoreError as e:
            raise StorageFailure(f"get {key} failed: {e}") from e

    def set(self, key: str, data: bytes, content_type: str = JSON_CONTENT_TYPE) -> None:
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=self._full_key(key),
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageFailure(f"set {key} failed: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self._bucket, Key=self._full_key(key))
        except (ClientError, BotoCoreError) as e:
            raise StorageFailure(f"delete {key} failed: {e}") from e

    def list(self, prefix: str = "") -> Iterator[str]:
        strip = len(self._namespace) + 1
        paginator = self._client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=self._bucket, Prefix=self._full_key(prefix)):
                for obj in page.get("Contents", []):
                    yield obj["Key"][strip:]
        except (ClientError, BotoCoreError) as e:
            raise StorageFailure(f"list {prefix!r} failed: {e}") from e
