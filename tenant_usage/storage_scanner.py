"""Paginated S3 listing that sums object sizes under a prefix"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from botocore.exceptions import BotoCoreError, ClientError

from .config import PAGE_SIZE
from .cost_model import bytes_to_decimal_gb, estimate_cost_usd
from .errors import StorageProviderError

WHOLE_BUCKET = "(whole bucket)"


@dataclass(frozen=True)
class ScanResult:
    """Totals produced by one prefix scan."""

    bytes_total: int = 0
    objects_count: int = 0
    api_calls: int = 0

    @property
    def gb_total(self) -> Decimal:
        """Scanned size in decimal GB."""
        return bytes_to_decimal_gb(self.bytes_total)

    @property
    def cost_estimated_usd(self) -> Decimal:
        """Estimated cost of the listing calls."""
        return estimate_cost_usd(self.api_calls)


def _describe_error(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        return f"{error.get('Code', 'Unknown')}: {error.get('Message', exc)}"
    return str(exc)


class StorageScanner:  # pylint: disable=too-few-public-methods
    """Sums object sizes under S3 prefixes with list_objects_v2"""

    def __init__(self, s3):
        self.s3 = s3

    def sum_prefix_size(self, bucket: str, prefix: str | None = None) -> ScanResult:
        """
        List every object under a prefix and sum their sizes.

        Each page is one ListObjectsV2 request of up to PAGE_SIZE keys; the
        first page is counted even when it comes back empty.

        Args:
            bucket: Bucket to list
            prefix: Key prefix to restrict the listing to. None lists the
                    whole bucket, which can be slow and costly.

        Returns:
            ScanResult: bytes, object count and number of requests issued

        Raises:
            StorageProviderError: If any listing request fails
        """
        params = {"Bucket": bucket, "PaginationConfig": {"PageSize": PAGE_SIZE}}
        if prefix is not None:
            params["Prefix"] = prefix

        bytes_total = 0
        objects_count = 0
        api_calls = 0
        try:
            paginator = self.s3.get_paginator("list_objects_v2")
            for page in paginator.paginate(**params):
                api_calls += 1
                for obj in page.get("Contents", []):
                    bytes_total += int(obj["Size"])
                    objects_count += 1
        except (ClientError, BotoCoreError) as exc:
            label = WHOLE_BUCKET if prefix is None else prefix
            message = _describe_error(exc)
            logging.error("S3 error listing prefix [%s] in bucket %s: %s", label, bucket, message)
            raise StorageProviderError(
                bucket, prefix, f"Listing s3://{bucket}/{prefix or ''} failed: {message}"
            ) from exc

        return ScanResult(bytes_total=bytes_total, objects_count=objects_count, api_calls=api_calls)
