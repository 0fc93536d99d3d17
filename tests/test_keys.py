"""Tests for object-key resolution."""

import pytest

from s3cli.exceptions import ConfigurationError
from s3cli.keys import base_name, is_directory_marker, join_path, relative_key, resolve_key


@pytest.mark.parametrize(
    ("prefix", "key", "expected"),
    [
        ("", "a/b", "a/b"),
        (None, "a/b", "a/b"),
        ("pre/", "a", "pre/a"),
        ("pre", "/a", "pre/a"),
        ("pre///", "//a", "pre/a"),
        ("/", "a", "a"),
        ("///", "a", "a"),
        ("pre", "a//b/c", "pre/a//b/c"),
        ("/abs/pre", "a", "/abs/pre/a"),
    ],
)
def test_join_path(prefix, key, expected):
    assert join_path(prefix, key) == expected


@pytest.mark.parametrize("prefix", ["p", "deep/er", "x.y"])
@pytest.mark.parametrize("key", ["k", "a/b", "file.tar.gz"])
def test_join_path_round_trips(prefix, key):
    joined = join_path(prefix, key)
    assert joined.startswith(prefix + "/")
    assert joined[len(prefix) + 1:] == key


def test_base_name():
    assert base_name("/tmp/upload/report.csv") == "report.csv"
    assert base_name("report.csv") == "report.csv"
    assert base_name("C:\\data\\report.csv") == "report.csv"


def test_base_name_rejects_directory_path():
    with pytest.raises(ConfigurationError):
        base_name("/tmp/upload/")


def test_resolve_key_prefers_explicit_key():
    assert resolve_key("pre/", "/remote.bin", "/tmp/local.bin") == "pre/remote.bin"


def test_resolve_key_derives_from_local_path():
    assert resolve_key("pre", None, "/tmp/local.bin") == "pre/local.bin"
    assert resolve_key(None, "", "nested/dir/local.bin") == "local.bin"


def test_resolve_key_needs_key_or_path():
    with pytest.raises(ConfigurationError):
        resolve_key("pre", None, None)


def test_relative_key():
    assert relative_key("logs/a.txt", "logs/") == "a.txt"
    assert relative_key("logs/a.txt", "logs") == "a.txt"
    assert relative_key("logs/a.txt", None) == "logs/a.txt"
    assert relative_key("other/a.txt", "logs/") == "other/a.txt"


def test_is_directory_marker():
    assert is_directory_marker("logs/b/")
    assert not is_directory_marker("logs/b")
