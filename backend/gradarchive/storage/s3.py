"""S3 / MinIO implementation of :class:`DocumentStorage`.

Credentials are resolved by ``boto3`` in the standard order when
``AWS_ACCESS_KEY_ID`` / ``AWS_SECRET_ACCESS_KEY`` are not configured:
env vars → ``~/.aws/credentials`` → IAM instance role.

boto3 is blocking, so every call is pushed onto a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import boto3
from botocore.config import Config

from gradarchive.config import settings
from gradarchive.storage.base import DocumentStorage

logger = logging.getLogger("gradarchive.storage")


class S3DocumentStorage(DocumentStorage):
    def __init__(
        self,
        bucket: str | None = None,
        region_name: str | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        self.bucket = bucket or settings.AWS_BUCKET_NAME
        self.region_name = region_name or settings.AWS_BUCKET_REGION
        self.endpoint_url = endpoint_url or settings.AWS_ENDPOINT_URL
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazy initialization of the S3 client."""
        if self._client is None:
            kwargs: dict[str, Any] = {
                "region_name": self.region_name,
                "config": Config(signature_version="s3v4"),
            }
            if self.endpoint_url:
                kwargs["endpoint_url"] = self.endpoint_url
            if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
                kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
                kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
            self._client = boto3.client("s3", **kwargs)
            logger.info("S3 client ready for bucket %s", self.bucket)
        return self._client

    async def put(self, document_path: str, data: bytes, content_type: str | None = None) -> None:
        params: dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": self.object_key(document_path),
            "Body": data,
        }
        if content_type:
            params["ContentType"] = content_type
        await asyncio.to_thread(self._get_client().put_object, **params)
        logger.info("Stored document %s (%d bytes)", params["Key"], len(data))

    async def delete(self, document_path: str) -> None:
        key = self.object_key(document_path)
        await asyncio.to_thread(self._get_client().delete_object, Bucket=self.bucket, Key=key)
        logger.info("Deleted document %s", key)

    async def signed_url(self, document_path: str, expires_in: int) -> str:
        return await asyncio.to_thread(
            self._get_client().generate_presigned_url,
            "get_object",
            Params={"Bucket": self.bucket, "Key": self.object_key(document_path)},
            ExpiresIn=expires_in,
        )


_storage: DocumentStorage | None = None


def get_storage() -> DocumentStorage:
    """FastAPI dependency: the process-wide document store."""
    global _storage
    if _storage is None:
        _storage = S3DocumentStorage()
    return _storage
