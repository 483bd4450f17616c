"""
Tenant storage usage audit.
Sums S3 usage per tenant prefix, estimates listing cost, and records the results.
"""

from .cost_model import bytes_to_decimal_gb, estimate_cost_usd
from .orchestrator import PassTotals, RunReport, UsageAggregator
from .prefix import decode_tenant_prefix, encode_tenant_prefix
from .result_sink import ResultSink, Scope, UsageRow
from .storage_scanner import ScanResult, StorageScanner
from .tenant_repository import TenantRecord, TenantRepository

__all__ = [
    "bytes_to_decimal_gb",
    "estimate_cost_usd",
    "PassTotals",
    "RunReport",
    "UsageAggregator",
    "decode_tenant_prefix",
    "encode_tenant_prefix",
    "ResultSink",
    "Scope",
    "UsageRow",
    "ScanResult",
    "StorageScanner",
    "TenantRecord",
    "TenantRepository",
]
