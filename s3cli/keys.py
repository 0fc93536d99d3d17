"""Object-key resolution.

Keys are joined with a single ``/`` between prefix and key. Slashes inside a
key are kept verbatim; only the seam between the two parts is normalised.
"""

from __future__ import annotations

from s3cli.exceptions import ConfigurationError


def join_path(prefix: str | None, key: str) -> str:
    """Join ``prefix`` and ``key`` without doubling or dropping the separator.

    >>> join_path("pre/", "/a")
    'pre/a'
    >>> join_path("/", "a")
    'a'
    """
    normalized = (prefix or "").rstrip("/")
    if not normalized:
        return key
    return f"{normalized}/{key.lstrip('/')}"


def base_name(local_path: str) -> str:
    name = local_path.replace("\\", "/").rsplit("/", 1)[-1]
    if not name:
        raise ConfigurationError(
            "Cannot derive an object key from a directory path",
            {"local_path": local_path},
        )
    return name


def resolve_key(prefix: str | None, explicit_key: str | None, local_path: str | None) -> str:
    """Return the remote key an operation works on.

    An explicit key wins; otherwise the file name of ``local_path`` is used.
    Either way the prefix is joined in front.
    """
    if explicit_key:
        return join_path(prefix, explicit_key)
    if not local_path:
        raise ConfigurationError("An object key or a local path is required")
    return join_path(prefix, base_name(local_path))


def relative_key(key: str, prefix: str | None) -> str:
    if prefix and key.startswith(prefix):
        key = key[len(prefix):]
    return key.lstrip("/")


def is_directory_marker(key: str) -> bool:
    return key.endswith("/")


__all__ = [
    "join_path",
    "base_name",
    "resolve_key",
    "relative_key",
    "is_directory_marker",
]
