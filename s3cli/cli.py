"""CLI for listing, checking, uploading, downloading and deleting objects."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Sequence

from loguru import logger

from s3cli import __version__
from s3cli.exceptions import ConfigurationError, StorageError
from s3cli.keys import resolve_key
from s3cli.logging_config import DEFAULT_LEVEL, setup_logging
from s3cli.operations import (
    OperationResult,
    Status,
    delete,
    download,
    list_objects,
    object_exists,
    upload,
)
from s3cli.settings import LOG_LEVEL_ENV, ConnectionSettings, load_environment, resolve_connection
from s3cli.storage import ObjectStorage
from s3cli.storage.s3 import S3Storage

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

EXIT_CODES = {
    Status.OK: EXIT_OK,
    Status.NOT_FOUND: 404,
    Status.CONFLICT: 409,
    Status.ERROR: 500,
}

StorageFactory = Callable[[ConnectionSettings], ObjectStorage]


@dataclass(frozen=True)
class OptionSpec:
    """Definition of one command-line option, built fresh for each subcommand."""

    flags: tuple[str, ...]
    help: str
    options: dict[str, Any] = field(default_factory=dict)

    def add_to(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(*self.flags, help=self.help, **self.options)


def connection_options() -> list[OptionSpec]:
    return [
        OptionSpec(("--endpoint", "--service-url"), "The endpoint URL with the protocol, e.g. https://s3.example.com.", {"dest": "endpoint"}),
        OptionSpec(("--access-key", "--access-key-id"), "The access key.", {"dest": "access_key"}),
        OptionSpec(("--secret-key", "--secret-key-id"), "The secret key.", {"dest": "secret_key"}),
        OptionSpec(("--bucket", "--bucket-name"), "The bucket.", {"dest": "bucket"}),
        OptionSpec(("--region",), "The region name, if the endpoint needs one.", {"dest": "region"}),
        OptionSpec(("--prefix",), "Prefix joined in front of object keys.", {"dest": "prefix"}),
        OptionSpec(("--settings",), "YAML settings file with connection fields.", {"type": Path, "metavar": "FILE"}),
    ]


def runtime_options() -> list[OptionSpec]:
    return [
        OptionSpec(("--env-file",), "Environment file loaded at start (default: nearest .env).", {"type": Path, "metavar": "FILE"}),
        OptionSpec(("--log-level",), f"Log level for stderr diagnostics (default: {DEFAULT_LEVEL}).", {"metavar": "LEVEL"}),
        OptionSpec(("--log-json",), "Write diagnostics as JSON lines.", {"action": "store_true"}),
    ]


def object_key_option(help_text: str, required: bool = True) -> OptionSpec:
    return OptionSpec(("--object-key",), help_text, {"dest": "object_key", "required": required})


def local_path_option(help_text: str) -> OptionSpec:
    return OptionSpec(("--local-path", "--local-filename"), help_text, {"dest": "local_path", "type": Path, "required": True})


def overwrite_option(help_text: str) -> OptionSpec:
    return OptionSpec(("--overwrite",), help_text, {"action": argparse.BooleanOptionalAction, "default": True})


def _run_list(args: argparse.Namespace, settings: ConnectionSettings, storage_factory: StorageFactory) -> OperationResult:
    return list_objects(storage_factory(settings), settings.prefix)


def _run_exists(args: argparse.Namespace, settings: ConnectionSettings, storage_factory: StorageFactory) -> OperationResult:
    key = resolve_key(settings.prefix, args.object_key, None)
    return object_exists(storage_factory(settings), key)


def _run_upload(args: argparse.Namespace, settings: ConnectionSettings, storage_factory: StorageFactory) -> OperationResult:
    key = resolve_key(settings.prefix, args.object_key, str(args.local_path))
    return upload(storage_factory(settings), args.local_path, key, overwrite=args.overwrite)


def _run_download(args: argparse.Namespace, settings: ConnectionSettings, storage_factory: StorageFactory) -> OperationResult:
    key = resolve_key(settings.prefix, args.object_key, None)
    return download(storage_factory(settings), key, args.local_path, overwrite=args.overwrite)


def _run_delete(args: argparse.Namespace, settings: ConnectionSettings, storage_factory: StorageFactory) -> OperationResult:
    key = resolve_key(settings.prefix, args.object_key, None)
    return delete(storage_factory(settings), key)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s3cli",
        description="List, check, upload, download and delete objects in an S3-compatible store.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    commands: list[tuple[str, list[str], str, list[OptionSpec], Callable[..., OperationResult]]] = [
        ("list", ["ls"], "List all objects, relative to the prefix", [], _run_list),
        (
            "exists",
            ["has"],
            "Check whether one object exists",
            [object_key_option("The object key to look for.")],
            _run_exists,
        ),
        (
            "upload",
            ["put"],
            "Upload one file",
            [
                local_path_option("The local path to the file to be uploaded."),
                object_key_option("The object key (defaults to the local file name).", required=False),
                overwrite_option("Replace an existing object (default). --no-overwrite refuses instead."),
            ],
            _run_upload,
        ),
        (
            "download",
            ["get"],
            "Download one object, referenced by key or prefix plus key",
            [
                local_path_option("The local path to the download target."),
                object_key_option("The object key to download."),
                overwrite_option("Replace an existing local file (default). --no-overwrite refuses instead."),
            ],
            _run_download,
        ),
        ("delete", ["rm"], "Remove one object", [object_key_option("The object key to remove.")], _run_delete),
    ]

    for name, aliases, help_text, specs, handler in commands:
        sub = subparsers.add_parser(name, aliases=aliases, help=help_text, description=help_text)
        for spec in specs + connection_options() + runtime_options():
            spec.add_to(sub)
        sub.set_defaults(handler=handler, command_parser=sub)
    return parser


def main(argv: Sequence[str] | None = None, storage_factory: StorageFactory = S3Storage.from_settings) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    command_parser = args.command_parser

    try:
        load_environment(args.env_file)
    except ConfigurationError as exc:
        command_parser.error(exc.message)

    level = args.log_level or os.environ.get(LOG_LEVEL_ENV, DEFAULT_LEVEL)
    try:
        setup_logging(level=level, json_format=args.log_json)
    except ValueError:
        command_parser.error(f"unknown log level: {level}")

    try:
        settings = resolve_connection(vars(args), args.settings)
        logger.debug("Running {command} against {endpoint}", command=args.command, endpoint=settings.endpoint)
        result = args.handler(args, settings, storage_factory)
    except ConfigurationError as exc:
        logger.debug("Configuration rejected: {details}", details=exc.details)
        command_parser.error(exc.message)
    except StorageError as exc:
        result = OperationResult(Status.ERROR, exc.message)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return EXIT_INTERRUPTED

    if not result.ok:
        print(f"ERROR: {result.message}", file=sys.stderr)
    return EXIT_CODES[result.status]


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
