from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Iterator

import boto3
from boto3.exceptions import Boto3Error
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from s3cli.exceptions import ConfigurationError, ObjectNotFoundError, StorageError, TransferError
from s3cli.settings import ConnectionSettings
from s3cli.storage import Existence, ExistenceResult

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}

SDK_ERRORS = (ClientError, BotoCoreError, Boto3Error)
TRANSFER_ERRORS = SDK_ERRORS + (OSError,)


def is_not_found(exc: ClientError) -> bool:
    error = exc.response.get("Error", {}) or {}
    if str(error.get("Code", "")) in NOT_FOUND_CODES:
        return True
    status = (exc.response.get("ResponseMetadata", {}) or {}).get("HTTPStatusCode")
    return status == 404


def build_client(settings: ConnectionSettings) -> Any:
    """Create an S3 client for an S3-compatible endpoint."""
    config = BotoConfig(signature_version="s3v4", s3={"addressing_style": "path"})
    try:
        session = boto3.session.Session(
            aws_access_key_id=settings.access_key,
            aws_secret_access_key=settings.secret_key,
            region_name=settings.region,
        )
        return session.client("s3", endpoint_url=settings.endpoint, config=config)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid endpoint: {settings.endpoint}", {"endpoint": settings.endpoint}) from exc
    except BotoCoreError as exc:
        # e.g. ProfileNotFound for a stale AWS_PROFILE
        raise StorageError(str(exc), {"endpoint": settings.endpoint}) from exc


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


class S3Storage:
    def __init__(self, bucket: str, client: Any) -> None:
        self.bucket = bucket
        self.client = client

    @classmethod
    def from_settings(cls, settings: ConnectionSettings) -> "S3Storage":
        logger.debug("Connecting to {endpoint} bucket={bucket}", endpoint=settings.endpoint, bucket=settings.bucket)
        return cls(settings.bucket, build_client(settings))

    def _failed(self, action: str, key: str, exc: Exception) -> TransferError:
        logger.debug("{action} failed for {key}: {exc}", action=action, key=key, exc=exc)
        return TransferError(str(exc), {"action": action, "bucket": self.bucket, "key": key})

    def iter_keys(self, prefix: str = "") -> Iterator[str]:
        """Yield every key under ``prefix``, one page at a time."""
        params: dict[str, Any] = {"Bucket": self.bucket}
        if prefix:
            params["Prefix"] = prefix
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(**params):
                contents = page.get("Contents", []) or []
                logger.debug("Listed page with {count} objects", count=len(contents))
                for obj in contents:
                    yield obj["Key"]
        except SDK_ERRORS as exc:
            raise self._failed("list", prefix, exc) from exc

    def head(self, key: str) -> ExistenceResult:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if is_not_found(exc):
                return ExistenceResult(Existence.NOT_FOUND)
            return ExistenceResult(Existence.ERROR, exc)
        except BotoCoreError as exc:
            return ExistenceResult(Existence.ERROR, exc)
        return ExistenceResult(Existence.EXISTS)

    def upload_file(self, local_path: Path, key: str) -> None:
        try:
            self.client.upload_file(str(local_path), self.bucket, key)
        except TRANSFER_ERRORS as exc:
            raise self._failed("upload", key, exc) from exc
        logger.info("Uploaded {path} to s3://{bucket}/{key}", path=local_path, bucket=self.bucket, key=key)

    def download_file(self, key: str, local_path: Path) -> None:
        """Download ``key`` to ``local_path`` via a sibling temporary file.

        The destination only appears once the transfer has completed; on
        failure the temporary file is removed and the destination is untouched.
        """
        target = Path(local_path)
        tmp_name: str | None = None
        completed = False
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".part")
            os.close(fd)
            # mkstemp creates 0600
            os.chmod(tmp_name, 0o666 & ~_current_umask())
            self.client.download_file(self.bucket, key, tmp_name)
            os.replace(tmp_name, target)
            completed = True
        except TRANSFER_ERRORS as exc:
            if isinstance(exc, ClientError) and is_not_found(exc):
                raise ObjectNotFoundError(f"Object not found: {key}", {"bucket": self.bucket, "key": key}) from exc
            raise self._failed("download", key, exc) from exc
        finally:
            if not completed and tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
        logger.info("Downloaded s3://{bucket}/{key} to {path}", bucket=self.bucket, key=key, path=target)

    def delete_object(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except SDK_ERRORS as exc:
            raise self._failed("delete", key, exc) from exc
        logger.info("Deleted s3://{bucket}/{key}", bucket=self.bucket, key=key)


__all__ = ["S3Storage", "build_client", "is_not_found"]
