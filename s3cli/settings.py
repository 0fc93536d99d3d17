from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ValidationError, validator

from s3cli.exceptions import ConfigurationError

# Field name -> environment variables, first hit wins.
ENV_VARS: dict[str, tuple[str, ...]] = {
    "endpoint": ("S3_ENDPOINT",),
    "access_key": ("S3_ACCESS_KEY", "AWS_ACCESS_KEY_ID"),
    "secret_key": ("S3_SECRET_KEY", "AWS_SECRET_ACCESS_KEY"),
    "bucket": ("S3_BUCKET",),
    "region": ("S3_REGION", "AWS_REGION"),
    "prefix": ("S3_PREFIX",),
}

LOG_LEVEL_ENV = "S3CLI_LOG_LEVEL"


def _normalise_url(value: str) -> str:
    if "//" in value:
        return value
    return f"https://{value}"


class ConnectionSettings(BaseModel):
    """Everything needed to reach one bucket. Immutable per invocation."""

    endpoint: str
    access_key: str
    secret_key: str
    bucket: str
    region: str | None = None
    prefix: str = ""

    class Config:
        frozen = True

    @validator("endpoint", "access_key", "secret_key", "bucket", pre=True)
    def _not_blank(cls, value: Any) -> str:  # noqa: D401
        if value is None or not str(value).strip():
            raise ValueError("must not be empty")
        return str(value).strip()

    @validator("endpoint")
    def _with_scheme(cls, value: str) -> str:  # noqa: D401
        return _normalise_url(value)

    @validator("region", pre=True)
    def _blank_region(cls, value: Any) -> str | None:  # noqa: D401
        if value is None or not str(value).strip():
            return None
        return str(value).strip()

    @validator("prefix", pre=True)
    def _default_prefix(cls, value: Any) -> str:  # noqa: D401
        if value is None:
            return ""
        return str(value)


def load_environment(env_file: Path | None = None) -> bool:
    """Load a dotenv file into ``os.environ`` without overriding set variables.

    Without ``env_file`` a ``.env`` is searched upwards from the working
    directory. Returns whether a file was loaded.
    """
    if env_file is not None:
        if not env_file.exists():
            raise ConfigurationError(f"Environment file not found: {env_file}", {"env_file": str(env_file)})
        return load_dotenv(env_file, override=False)
    discovered = find_dotenv(usecwd=True)
    if not discovered:
        return False
    return load_dotenv(discovered, override=False)


def load_settings_file(path: Path) -> dict[str, Any]:
    """Read connection fields from a YAML settings file.

    Args:
        path: YAML file holding a mapping with the ``ConnectionSettings`` fields.

    Returns:
        The mapping as loaded, unknown keys dropped.

    Raises:
        ConfigurationError: If the file is missing or is not a mapping.
    """
    if not path.exists():
        raise ConfigurationError(f"Settings file not found: {path}", {"settings": str(path)})
    with path.open("r", encoding="utf-8") as fp:
        try:
            payload = yaml.safe_load(fp) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid settings file {path}: {exc}", {"settings": str(path)}) from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Settings file {path} must contain a mapping", {"settings": str(path)})
    return {key: value for key, value in payload.items() if key in ENV_VARS}


def settings_from_env(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    environ = os.environ if environ is None else environ
    values: dict[str, str] = {}
    for field, names in ENV_VARS.items():
        for name in names:
            if environ.get(name):
                values[field] = environ[name]
                break
    return values


def resolve_connection(
    cli_values: Mapping[str, Any],
    settings_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ConnectionSettings:
    """Merge flags, settings file and environment into ``ConnectionSettings``.

    A flag beats the settings file, which beats the environment.
    """
    merged: dict[str, Any] = settings_from_env(environ)
    if settings_file is not None:
        merged.update({k: v for k, v in load_settings_file(settings_file).items() if v is not None})
    merged.update({k: v for k, v in cli_values.items() if k in ENV_VARS and v is not None})
    try:
        return ConnectionSettings(**merged)
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise ConfigurationError(
            "Missing or invalid connection settings: " + ", ".join(fields),
            {"fields": ",".join(fields)},
        ) from exc


__all__ = [
    "ConnectionSettings",
    "ENV_VARS",
    "LOG_LEVEL_ENV",
    "load_environment",
    "load_settings_file",
    "settings_from_env",
    "resolve_connection",
]
