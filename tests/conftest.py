"""Shared pytest fixtures for test files."""

from __future__ import annotations

from unittest import mock

import pytest

from tenant_usage.config import AuditSettings
from tests.fakes import FIXED_NOW, RecordingSink, make_pages


@pytest.fixture(name="settings")
def fixture_settings():
    """Settings for bucket b1 with statuses Y,B and optional passes disabled."""
    return AuditSettings(
        bucket="b1",
        region="us-east-1",
        base_prefix="uploads/",
        db_host="db.internal",
        db_name="medicdb",
        output_schema="medic_global",
        output_table="global_medic_clinica_storage",
        statuses=("Y", "B"),
    )


@pytest.fixture(name="s3_mock")
def fixture_s3_mock():
    """Mock boto3 S3 client whose paginator returns one empty page."""
    s3 = mock.Mock()
    s3.get_paginator.return_value.paginate.return_value = make_pages([])
    return s3


@pytest.fixture(name="conn_mock")
def fixture_conn_mock():
    """MagicMock psycopg2 connection handing out a single shared cursor."""
    conn = mock.MagicMock()
    cursor = mock.MagicMock()
    conn.cursor.return_value = cursor
    cursor.__enter__.return_value = cursor
    cursor.__iter__.return_value = iter([])
    return conn


@pytest.fixture(name="recording_sink")
def fixture_recording_sink():
    """Sink that keeps rows in memory."""
    return RecordingSink()


@pytest.fixture(name="fixed_clock")
def fixture_fixed_clock():
    """Clock returning FIXED_NOW."""
    return lambda: FIXED_NOW
