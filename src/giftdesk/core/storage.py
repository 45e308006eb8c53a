"""Object storage for proof-of-delivery images.

Every ``put`` writes a fresh key, so retries may leave orphaned objects but
never overwrite an existing one.
"""

from __future__ import annotations

import logging
import mimetypes
import re
import time
import uuid
from dataclasses import dataclass
from pathlib import Path

from .config import Settings
from .errors import StorageUnavailable

logger = logging.getLogger(__name__)


def _sanitize_filename(name: str | None) -> str:
    name = (name or "").strip()
    name = re.sub(r"[^a-zA-Z0-9._-]+", "_", name)
    return name[:128] or "upload"


def build_object_key(media_type: str, filename: str | None = None) -> str:
    """Return a unique key of the form ``<millis>-<uuid>-<filename>``."""

    safe_name = _sanitize_filename(filename)
    if "." not in safe_name:
        safe_name += mimetypes.guess_extension(media_type) or ""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex}-{safe_name}"


class ObjectStore:
    def put(self, data: bytes, media_type: str, *, filename: str | None = None) -> str:
        """Store ``data`` durably and return a retrievable URL."""
        raise NotImplementedError


@dataclass(frozen=True)
class LocalObjectStore(ObjectStore):
    root: Path
    base_url: str

    def put(self, data: bytes, media_type: str, *, filename: str | None = None) -> str:
        key = build_object_key(media_type, filename)
        path = self.root / key
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("xb") as fh:
                fh.write(data)
        except OSError as exc:
            logger.error("local object write failed (key=%s): %s", key, exc)
            raise StorageUnavailable("Image storage is unavailable, please retry.") from exc
        return f"{self.base_url.rstrip('/')}/{key}"


@dataclass(frozen=True)
class S3ObjectStore(ObjectStore):
    endpoint: str
    region: str
    bucket: str
    access_key_id: str
    secret_access_key: str
    public_url: str = ""

    def _client(self):
        import boto3

        return boto3.client(
            "s3",
            endpoint_url=f"https://{self.endpoint}" if self.endpoint else None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
        )

    def _url_for(self, key: str) -> str:
        if self.public_url:
            return f"{self.public_url.rstrip('/')}/{key}"
        if self.endpoint:
            return f"https://{self.endpoint}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def put(self, data: bytes, media_type: str, *, filename: str | None = None) -> str:
        from botocore.exceptions import BotoCoreError, ClientError

        key = build_object_key(media_type, filename)
        try:
            self._client().put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=media_type)
        except (BotoCoreError, ClientError) as exc:
            logger.error("s3 upload failed (bucket=%s key=%s): %s", self.bucket, key, exc)
            raise StorageUnavailable("Image storage is unavailable, please retry.") from exc
        return self._url_for(key)


def object_store_from_settings(settings: Settings) -> ObjectStore:
    backend = (settings.storage_backend or "local").strip().lower()
    if backend == "s3":
        return S3ObjectStore(
            endpoint=settings.s3_endpoint.strip(),
            region=settings.s3_region.strip(),
            bucket=settings.s3_bucket.strip(),
            access_key_id=settings.s3_access_key_id.strip(),
            secret_access_key=settings.s3_secret_access_key.strip(),
            public_url=settings.s3_public_url.strip(),
        )
    # default local
    return LocalObjectStore(root=Path(settings.storage_root), base_url=settings.media_base_url)
