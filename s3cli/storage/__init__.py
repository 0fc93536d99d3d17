"""Storage abstraction over an S3-compatible object store."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Protocol


class Existence(enum.Enum):
    EXISTS = "exists"
    NOT_FOUND = "not-found"
    ERROR = "error"


@dataclass(frozen=True)
class ExistenceResult:
    """Outcome of a metadata-only HEAD request. ``cause`` is set for ``ERROR``."""

    state: Existence
    cause: Exception | None = None

    @property
    def exists(self) -> bool:
        return self.state is Existence.EXISTS

    @property
    def not_found(self) -> bool:
        return self.state is Existence.NOT_FOUND


class ObjectStorage(Protocol):
    def iter_keys(self, prefix: str = "") -> Iterator[str]:
        ...

    def head(self, key: str) -> ExistenceResult:
        ...

    def upload_file(self, local_path: Path, key: str) -> None:
        ...

    def download_file(self, key: str, local_path: Path) -> None:
        ...

    def delete_object(self, key: str) -> None:
        ...


__all__ = ["Existence", "ExistenceResult", "ObjectStorage"]
