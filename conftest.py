"""Pytest configuration and shared fixtures for the tenant usage audit."""

# pylint: disable=wrong-import-position

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

_ISOLATED_ENV_VARS = (
    "DB_USER",
    "DB_PASSWORD",
    "TENANT_TABLE",
    "TENANT_ID_COLUMN",
    "TENANT_STATUS_COLUMN",
    "TENANT_USAGE_LOG_FILE",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_SESSION_TOKEN",
)


@pytest.fixture(autouse=True)
def mock_env_file(tmp_path, monkeypatch):
    """Point TENANT_USAGE_ENV_FILE at an empty temporary .env and clear audit variables.

    Keeps a developer's ~/.env from leaking credentials or table overrides into tests.
    """
    env_file = tmp_path / ".env"
    env_file.write_text("")
    monkeypatch.setenv("TENANT_USAGE_ENV_FILE", str(env_file))
    for name in _ISOLATED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield str(env_file)

