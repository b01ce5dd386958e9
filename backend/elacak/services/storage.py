"""
Blob storage for document attachments.

S3 is used when S3_ATTACHMENTS_BUCKET is configured; otherwise files are
written below UPLOAD_DIR and addressed as <UPLOAD_URL_PREFIX>/<filename>.
"""
import logging
import re
import secrets
import string
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from elacak.core.config import get_settings
from elacak.core.errors import StorageError

logger = logging.getLogger(__name__)

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_EXTENSION_PATTERN = re.compile(r"[A-Za-z0-9]{1,10}")


@dataclass(frozen=True)
class StoredBlob:
    path: str
    size: int


class BlobStore(Protocol):
    def save(self, filename: str, data: bytes, content_type: str) -> StoredBlob: ...


def generate_blob_name(document_type: str, original_name: str | None) -> str:
    """
    <DOCUMENT_TYPE>_<epoch-millis>_<random>[.<ext>]

    The extension is kept only when it is 1-10 ASCII letters or digits.
    """
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(13))
    stem = f"{document_type}_{int(time.time() * 1000)}_{suffix}"
    parts = (original_name or "").rsplit(".", 1)
    if len(parts) == 2 and _EXTENSION_PATTERN.fullmatch(parts[1]):
        return f"{stem}.{parts[1]}"
    return stem


class LocalBlobStore:
    def __init__(self, root: str | Path, url_prefix: str):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def save(self, filename: str, data: bytes, content_type: str) -> StoredBlob:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / filename).write_bytes(data)
        except OSError as exc:
            logger.error("Failed to write blob %s: %s", filename, exc)
            raise StorageError("Failed to store uploaded file") from exc
        return StoredBlob(path=f"{self.url_prefix}/{filename}", size=len(data))


class S3BlobStore:
    def __init__(self, bucket: str, region: str, prefix: str = "documents"):
        import boto3

        self.bucket = bucket
        self.prefix = prefix
        self.client = boto3.client("s3", region_name=region)

    def save(self, filename: str, data: bytes, content_type: str) -> StoredBlob:
        key = f"{self.prefix}/{filename}"
        try:
            self.client.put_object(
                Bucket=self.bucket, Key=key, Body=data, ContentType=content_type
            )
        except Exception as exc:
            logger.error("S3 PutObject failed for %s: %s", key, exc)
            raise StorageError("Failed to store uploaded file") from exc
        return StoredBlob(path=f"s3://{self.bucket}/{key}", size=len(data))


def get_blob_store() -> BlobStore:
    """FastAPI dependency; overridden in tests."""
    settings = get_settings()
    if settings.s3_attachments_bucket:
        return S3BlobStore(settings.s3_attachments_bucket, settings.aws_region)
    return LocalBlobStore(settings.upload_dir, settings.upload_url_prefix)
