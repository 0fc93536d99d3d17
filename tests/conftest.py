from __future__ import annotations

import os

import pytest
from loguru import logger

from s3cli.settings import ENV_VARS, LOG_LEVEL_ENV
from s3cli.storage.s3 import S3Storage
from tests.fake_s3 import FakeS3Client


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep real credentials and stray .env files out of the tests."""
    for names in ENV_VARS.values():
        for name in names:
            monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.setenv("AWS_CONFIG_FILE", str(tmp_path / "no-aws-config"))
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "no-aws-credentials"))
    monkeypatch.chdir(tmp_path)
    yield
    # dotenv writes straight into os.environ
    for names in ENV_VARS.values():
        for name in names:
            os.environ.pop(name, None)
    # main() points loguru at the captured stderr of the test that ran it
    logger.remove()


@pytest.fixture()
def fake_client() -> FakeS3Client:
    return FakeS3Client(
        {
            "logs/a.txt": b"alpha",
            "logs/b/": b"",
            "logs/c.txt": b"gamma",
            "data/report.csv": b"id,value\n1,2\n",
        }
    )


@pytest.fixture()
def storage(fake_client: FakeS3Client) -> S3Storage:
    return S3Storage("test-bucket", fake_client)
