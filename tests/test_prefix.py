"""Tests for tenant_usage/prefix.py"""

from __future__ import annotations

import pytest

from tenant_usage.prefix import decode_tenant_prefix, encode_tenant_id, encode_tenant_prefix
from tests.assertions import assert_equal


def test_encode_tenant_id():
    """The tenant id's decimal string is base64 encoded."""
    assert_equal(encode_tenant_id(123456), "MTIzNDU2")


def test_encode_tenant_prefix_with_trailing_slash():
    """A trailing slash on the base prefix is not doubled."""
    assert_equal(encode_tenant_prefix("uploads/", 123456), "uploads/MTIzNDU2/")


def test_encode_tenant_prefix_without_trailing_slash():
    """A missing trailing slash is added."""
    assert_equal(encode_tenant_prefix("uploads", 123456), "uploads/MTIzNDU2/")


def test_encode_tenant_prefix_strips_repeated_slashes():
    """All trailing slashes collapse to one separator."""
    assert_equal(encode_tenant_prefix("data/uploads//", 100000), "data/uploads/MTAwMDAw/")


@pytest.mark.parametrize("tenant_id", [100000, 123456, 500001, 999999])
def test_decode_round_trip(tenant_id):
    """Decoding the trailing segment recovers the tenant id."""
    assert_equal(decode_tenant_prefix(encode_tenant_prefix("uploads/", tenant_id)), tenant_id)


def test_decode_rejects_invalid_segment():
    """Segments that are not base64 integers raise ValueError."""
    with pytest.raises(ValueError):
        decode_tenant_prefix("uploads/not-base64!/")


def test_decode_rejects_empty_prefix():
    """A prefix without segments has nothing to decode."""
    with pytest.raises(ValueError, match="no tenant segment"):
        decode_tenant_prefix("/")
