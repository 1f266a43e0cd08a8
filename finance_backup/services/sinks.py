"""File-delivery sinks.

A sink receives finished artifact bytes plus a filename and a MIME type; it
never sees snapshots. Delivery is blocking I/O and is run off the event loop
by the caller.
"""

from __future__ import annotations

import os
import tempfile
import threading
from pathlib import Path
from typing import Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from finance_backup.config import settings
from finance_backup.logger import get_logger

logger = get_logger(__name__)


class SinkError(Exception):
    """Raised when an artifact cannot be delivered."""


class FileSink(Protocol):
    def deliver(self, content: bytes, filename: str, mime_type: str) -> str: ...


def _safe_filename(filename: str) -> str:
    name = Path(filename).name
    if not name or name in (".", "..") or name != filename:
        raise SinkError(f"Refusing to write unsafe filename: {filename!r}")
    return name


class LocalDirectorySink:
    """Write artifacts into a local directory, atomically per file."""

    def __init__(self, directory: str | Path | None = None) -> None:
        self.directory = Path(directory or settings.export_dir)

    def deliver(self, content: bytes, filename: str, mime_type: str) -> str:
        target = self.directory / _safe_filename(filename)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{target.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(content)
                os.replace(tmp_path, target)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.error("Failed to write artifact", path=str(target), error=str(exc))
            raise SinkError(f"Failed to write {target}: {exc}") from exc

        logger.info("Artifact written", path=str(target), bytes=len(content), mime_type=mime_type)
        return str(target)


class ObjectStoreSink:
    """Upload artifacts to S3/MinIO."""

    _checked_buckets: set[str] = set()
    _bucket_lock = threading.Lock()

    def __init__(self, bucket: str | None = None, prefix: str | None = None) -> None:
        self.bucket = bucket or settings.s3_bucket
        self.prefix = (settings.s3_prefix if prefix is None else prefix).strip("/")
        self.client = boto3.client(
            "s3",
            endpoint_url=settings.s3_endpoint,
            aws_access_key_id=settings.s3_access_key,
            aws_secret_access_key=settings.s3_secret_key,
            region_name=settings.s3_region,
            config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
        )

    def _ensure_bucket(self) -> None:
        with self._bucket_lock:
            if self.bucket in self._checked_buckets:
                return
            try:
                self.client.head_bucket(Bucket=self.bucket)
            except ClientError as exc:
                code = exc.response.get("Error", {}).get("Code")
                if code not in ("404", "NoSuchBucket", "NotFound"):
                    raise SinkError(f"Failed to access bucket {self.bucket}") from exc
                try:
                    if settings.s3_region and settings.s3_region != "us-east-1":
                        self.client.create_bucket(
                            Bucket=self.bucket,
                            CreateBucketConfiguration={"LocationConstraint": settings.s3_region},
                        )
                    else:
                        self.client.create_bucket(Bucket=self.bucket)
                except (BotoCoreError, ClientError) as create_exc:
                    raise SinkError(f"Failed to create bucket {self.bucket}") from create_exc
            except BotoCoreError as exc:
                raise SinkError(f"Failed to access bucket {self.bucket}") from exc
            self._checked_buckets.add(self.bucket)

    def object_key(self, filename: str) -> str:
        name = _safe_filename(filename)
        return f"{self.prefix}/{name}" if self.prefix else name

    def deliver(self, content: bytes, filename: str, mime_type: str) -> str:
        key = self.object_key(filename)
        self._ensure_bucket()
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=mime_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Failed to upload to S3", bucket=self.bucket, key=key, error=str(exc))
            raise SinkError(f"Failed to upload {key} to {self.bucket}") from exc

        logger.info("Artifact uploaded", bucket=self.bucket, key=key, bytes=len(content))
        return f"s3://{self.bucket}/{key}"


def build_sink(kind: str | None = None, *, directory: str | Path | None = None) -> FileSink:
    """Build the sink named by settings (``local`` or ``s3``)."""
    kind = (kind or settings.export_sink).lower()
    if kind == "local":
        return LocalDirectorySink(directory)
    if kind == "s3":
        return ObjectStoreSink()
    raise ValueError(f"Unsupported export sink: {kind}")
