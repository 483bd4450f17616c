"""Tests for tenant_usage/clients.py"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from tenant_usage import clients
from tenant_usage.errors import DataAccessError
from tests.assertions import assert_equal


def test_resolve_env_path_priority(monkeypatch):
    """Explicit path wins over TENANT_USAGE_ENV_FILE, which wins over ~/.env."""
    monkeypatch.setenv("TENANT_USAGE_ENV_FILE", "/tmp/from-env")
    assert_equal(clients._resolve_env_path("/tmp/explicit"), "/tmp/explicit")  # pylint: disable=protected-access
    assert_equal(clients._resolve_env_path(), "/tmp/from-env")  # pylint: disable=protected-access

    monkeypatch.delenv("TENANT_USAGE_ENV_FILE")
    assert_equal(clients._resolve_env_path(), str(Path.home() / ".env"))  # pylint: disable=protected-access


def test_load_env_file_populates_environment(tmp_path):
    """Variables from the .env file become visible to os.environ."""
    env_file = tmp_path / "audit.env"
    env_file.write_text("TENANT_USAGE_TEST_MARKER=loaded\n")
    try:
        resolved = clients.load_env_file(str(env_file))
        assert_equal(resolved, str(env_file))
        assert_equal(os.environ.get("TENANT_USAGE_TEST_MARKER"), "loaded")
    finally:
        os.environ.pop("TENANT_USAGE_TEST_MARKER", None)


def test_db_credentials_from_environment(monkeypatch):
    """DB_USER and DB_PASSWORD skip the prompt."""
    monkeypatch.setenv("DB_USER", "auditor")
    monkeypatch.setenv("DB_PASSWORD", "s3cret")
    prompt = MagicMock()

    assert_equal(clients.resolve_db_credentials(prompt), ("auditor", "s3cret"))
    prompt.assert_not_called()


def test_db_credentials_fall_back_to_prompt(monkeypatch):
    """Missing environment credentials trigger the prompt."""
    monkeypatch.setenv("DB_USER", "auditor")
    prompt = MagicMock(return_value=("typed", "pw"))

    assert_equal(clients.resolve_db_credentials(prompt), ("typed", "pw"))
    prompt.assert_called_once_with()


def test_load_db_credentials_missing():
    """Without variables a ValueError is raised."""
    with pytest.raises(ValueError, match="DB_USER"):
        clients.load_db_credentials_from_env()


def test_prompt_db_credentials_hides_password():
    """The password is read with getpass."""
    with patch("builtins.input", return_value=" auditor "), patch(
        "tenant_usage.clients.getpass.getpass", return_value="pw"
    ) as mock_getpass:
        assert_equal(clients.prompt_db_credentials(), ("auditor", "pw"))
    mock_getpass.assert_called_once()


def test_create_s3_client_default_chain():
    """Without keys only the region is passed to boto3."""
    with patch("tenant_usage.clients.boto3.client") as mock_client:
        clients.create_s3_client("sa-east-1")
    mock_client.assert_called_once_with("s3", region_name="sa-east-1")


def test_create_s3_client_with_keys(monkeypatch):
    """Explicit keys and an env session token are forwarded."""
    monkeypatch.setenv("AWS_SESSION_TOKEN", "token")
    with patch("tenant_usage.clients.boto3.client") as mock_client:
        clients.create_s3_client("us-east-1", "AKIA", "secret")
    mock_client.assert_called_once_with(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="AKIA",
        aws_secret_access_key="secret",
        aws_session_token="token",
    )


def test_aws_credentials_from_environment(monkeypatch):
    """AWS keys set by the .env file are used for the S3 client."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKIA")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "secret")

    assert_equal(clients.resolve_aws_credentials(), ("AKIA", "secret"))


def test_aws_credentials_fall_back_to_default_chain(monkeypatch):
    """A lone access key is ignored and boto3 resolves credentials itself."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKIA")

    assert_equal(clients.resolve_aws_credentials(), (None, None))
    with pytest.raises(ValueError, match="AWS_SECRET_ACCESS_KEY"):
        clients.load_aws_credentials_from_env()


def test_aws_credentials_loaded_from_env_file(mock_env_file):
    """Keys written to the resolved .env file are picked up after loading it."""
    Path(mock_env_file).write_text("AWS_ACCESS_KEY_ID=AKIAFILE\nAWS_SECRET_ACCESS_KEY=filesecret\n")
    try:
        clients.load_env_file()
        assert_equal(clients.resolve_aws_credentials(), ("AKIAFILE", "filesecret"))
    finally:
        os.environ.pop("AWS_ACCESS_KEY_ID", None)
        os.environ.pop("AWS_SECRET_ACCESS_KEY", None)


def test_connect_database_passes_timeout():
    """The connection uses the configured timeout."""
    with patch("tenant_usage.clients.psycopg2.connect") as mock_connect:
        conn = clients.connect_database("db.internal", 5432, "medicdb", "auditor", "pw")
    assert conn is mock_connect.return_value
    mock_connect.assert_called_once_with(
        host="db.internal",
        port=5432,
        database="medicdb",
        user="auditor",
        password="pw",
        connect_timeout=clients.DB_CONNECT_TIMEOUT_SECONDS,
    )


def test_connect_database_failure():
    """Connection errors become DataAccessError."""
    with patch(
        "tenant_usage.clients.psycopg2.connect",
        side_effect=psycopg2.OperationalError("could not connect"),
    ):
        with pytest.raises(DataAccessError, match="could not connect"):
            clients.connect_database("db.internal", 5432, "medicdb", "auditor", "pw")
