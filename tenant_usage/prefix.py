"""Tenant prefix derivation: uploads/{base64(tenant_id)}/"""

import base64
import binascii


def encode_tenant_id(tenant_id: int) -> str:
    """Base64 of the tenant id's decimal string, e.g. 123456 -> "MTIzNDU2"."""
    return base64.b64encode(str(tenant_id).encode("ascii")).decode("ascii")


def encode_tenant_prefix(base_prefix: str, tenant_id: int) -> str:
    """Build the S3 prefix holding a tenant's objects."""
    return f"{base_prefix.rstrip('/')}/{encode_tenant_id(tenant_id)}/"


def decode_tenant_prefix(prefix: str) -> int:
    """
    Recover the tenant id from a prefix built by encode_tenant_prefix.

    Raises:
        ValueError: If the last path segment is not a base64-encoded integer
    """
    segments = [segment for segment in prefix.split("/") if segment]
    if not segments:
        raise ValueError(f"Prefix has no tenant segment: {prefix!r}")
    try:
        decoded = base64.b64decode(segments[-1], validate=True).decode("ascii")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise ValueError(f"Invalid tenant segment in prefix: {prefix!r}") from exc
    return int(decoded)
