"""Single-object operations gated on an existence check.

Every operation reports through an ``OperationResult``; nothing here exits
the process. Lines meant for the user go through ``echo``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from loguru import logger

from s3cli.exceptions import ObjectNotFoundError, StorageError
from s3cli.keys import is_directory_marker, relative_key
from s3cli.storage import Existence, ObjectStorage

Echo = Callable[[str], None]


class Status(enum.Enum):
    OK = "ok"
    NOT_FOUND = "not-found"
    CONFLICT = "conflict"
    ERROR = "error"


@dataclass(frozen=True)
class OperationResult:
    status: Status
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is Status.OK


OK = OperationResult(Status.OK)


def _remote_gate(storage: ObjectStorage, key: str) -> OperationResult | None:
    """Return a result that stops the operation, or ``None`` to proceed."""
    existence = storage.head(key)
    if existence.not_found:
        logger.debug("Gate stopped on missing object {key}", key=key)
        return OperationResult(Status.NOT_FOUND, f"Object not found: {key}")
    if existence.state is Existence.ERROR:
        return OperationResult(Status.ERROR, str(existence.cause))
    return None


def list_objects(storage: ObjectStorage, prefix: str | None = None, echo: Echo = print) -> OperationResult:
    """Print every non-directory key under ``prefix``, relative to it."""
    try:
        for key in storage.iter_keys(prefix or ""):
            if is_directory_marker(key):
                continue
            name = relative_key(key, prefix)
            if name:
                echo(name)
    except StorageError as exc:
        return OperationResult(Status.ERROR, exc.message)
    return OK


def object_exists(storage: ObjectStorage, key: str, echo: Echo = print) -> OperationResult:
    existence = storage.head(key)
    if existence.exists:
        echo("exists")
        return OK
    if existence.not_found:
        echo("not found")
        return OperationResult(Status.NOT_FOUND, f"Object not found: {key}")
    return OperationResult(Status.ERROR, str(existence.cause))


def upload(
    storage: ObjectStorage,
    local_path: Path,
    key: str,
    *,
    overwrite: bool = True,
    echo: Echo = print,
) -> OperationResult:
    """Upload one local file.

    The gate checks the local source. With ``overwrite`` off the remote key is
    checked as well and an existing object is left alone.
    """
    echo(f"Upload {local_path} to {key}")
    if not local_path.is_file():
        return OperationResult(Status.NOT_FOUND, f"Local file not found: {local_path}")
    if not overwrite:
        existence = storage.head(key)
        if existence.exists:
            return OperationResult(Status.CONFLICT, f"Object already exists: {key}")
        if existence.state is Existence.ERROR:
            return OperationResult(Status.ERROR, str(existence.cause))
    try:
        storage.upload_file(local_path, key)
    except StorageError as exc:
        return OperationResult(Status.ERROR, exc.message)
    return OK


def download(
    storage: ObjectStorage,
    key: str,
    local_path: Path,
    *,
    overwrite: bool = True,
    echo: Echo = print,
) -> OperationResult:
    echo(f"Download {key} to {local_path}")
    stop = _remote_gate(storage, key)
    if stop is not None:
        return stop
    if not overwrite and local_path.exists():
        return OperationResult(Status.CONFLICT, f"Local file already exists: {local_path}")
    try:
        storage.download_file(key, local_path)
    except ObjectNotFoundError as exc:
        return OperationResult(Status.NOT_FOUND, exc.message)
    except StorageError as exc:
        return OperationResult(Status.ERROR, exc.message)
    return OK


def delete(storage: ObjectStorage, key: str, echo: Echo = print) -> OperationResult:
    echo(f"Delete {key}")
    stop = _remote_gate(storage, key)
    if stop is not None:
        return stop
    try:
        storage.delete_object(key)
    except StorageError as exc:
        return OperationResult(Status.ERROR, exc.message)
    return OK


__all__ = [
    "Status",
    "OperationResult",
    "list_objects",
    "object_exists",
    "upload",
    "download",
    "delete",
]
