"""
Aggregation workflow for one audit run.

Passes run one after another, each tenant one at a time:
1. IN pass: tenants whose status is in the filter (always runs)
2. NOT IN pass: every other qualifying tenant (optional)
3. Bucket total: the whole bucket without a prefix (optional, slow and costly)

Every row written during a run carries the same run_id. A storage or
database failure aborts the run; rows already written are kept.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterable, Optional

from .config import AuditSettings
from .cost_model import bytes_to_decimal_gb, estimate_cost_usd
from .errors import DataAccessError, StorageProviderError
from .prefix import encode_tenant_id, encode_tenant_prefix
from .result_sink import ResultSink, Scope, SummaryNote, UsageRow
from .storage_scanner import ScanResult, StorageScanner
from .tenant_repository import TenantRecord, TenantRepository


@dataclass(frozen=True)
class PassTotals:
    """Running totals for one pass, folded one scan at a time."""

    label: str
    tenants_processed: int = 0
    bytes_total: int = 0
    objects_count: int = 0
    api_calls: int = 0

    def add(self, scan: ScanResult, tenants: int = 1) -> "PassTotals":
        """Return new totals including scan."""
        return replace(
            self,
            tenants_processed=self.tenants_processed + tenants,
            bytes_total=self.bytes_total + scan.bytes_total,
            objects_count=self.objects_count + scan.objects_count,
            api_calls=self.api_calls + scan.api_calls,
        )

    @property
    def gb_total(self) -> Decimal:
        """Pass size in decimal GB."""
        return bytes_to_decimal_gb(self.bytes_total)

    @property
    def cost_estimated_usd(self) -> Decimal:
        """Estimated listing cost of the pass."""
        return estimate_cost_usd(self.api_calls)


@dataclass(frozen=True)
class RunReport:
    """Outcome of a completed run."""

    run_id: str
    statuses_filter: str
    in_pass: PassTotals
    not_in_pass: Optional[PassTotals] = None
    bucket_total: Optional[PassTotals] = None

    def _tenant_passes(self) -> list[PassTotals]:
        return [totals for totals in (self.in_pass, self.not_in_pass) if totals is not None]

    @property
    def tenants_processed(self) -> int:
        """Tenants scanned across the IN and NOT IN passes."""
        return sum(totals.tenants_processed for totals in self._tenant_passes())

    @property
    def total_gb(self) -> Decimal:
        """GB across tenant passes; the bucket total overlaps them and is excluded."""
        return sum((totals.gb_total for totals in self._tenant_passes()), Decimal("0"))

    @property
    def total_cost_usd(self) -> Decimal:
        """Estimated cost of every pass that ran, bucket total included."""
        passes = self._tenant_passes()
        if self.bucket_total is not None:
            passes.append(self.bucket_total)
        return sum((totals.cost_estimated_usd for totals in passes), Decimal("0"))


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UsageAggregator:
    """Drives the IN / NOT IN / bucket total passes for one run"""

    def __init__(  # pylint: disable=too-many-arguments,too-many-positional-arguments
        self,
        repository: TenantRepository,
        scanner: StorageScanner,
        sink: ResultSink,
        settings: AuditSettings,
        run_id: Optional[str] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.repository = repository
        self.scanner = scanner
        self.sink = sink
        self.settings = settings
        self.run_id = run_id or str(uuid.uuid4())
        self.clock = clock

    def _summary_row(self, totals: PassTotals, note: SummaryNote, base_prefix: str) -> UsageRow:
        return UsageRow(
            run_id=self.run_id,
            computed_at=self.clock(),
            scope=Scope.SUMMARY,
            bucket=self.settings.bucket,
            base_prefix=base_prefix,
            tenant_identifier=None,
            status=None,
            prefix_encoded=None,
            objects_count=totals.objects_count,
            bytes_total=totals.bytes_total,
            gb_total=totals.gb_total,
            api_calls=totals.api_calls,
            cost_estimated_usd=totals.cost_estimated_usd,
            statuses_filter=self.settings.statuses_filter,
            extra_note=note,
        )

    def scan_tenant(self, tenant: TenantRecord) -> ScanResult:
        """Scan one tenant's prefix and write its CLIENT row."""
        settings = self.settings
        encoded = encode_tenant_id(tenant.identifier)
        prefix = encode_tenant_prefix(settings.base_prefix, tenant.identifier)

        scan = self.scanner.sum_prefix_size(settings.bucket, prefix)
        logging.info(
            "Tenant %d (%s): %.2f GB | Objects=%d | Calls=%d | Cost=$%.6f",
            tenant.identifier,
            encoded,
            scan.gb_total,
            scan.objects_count,
            scan.api_calls,
            scan.cost_estimated_usd,
        )

        self.sink.insert_usage_row(
            UsageRow(
                run_id=self.run_id,
                computed_at=self.clock(),
                scope=Scope.CLIENT,
                bucket=settings.bucket,
                base_prefix=settings.base_prefix,
                tenant_identifier=tenant.identifier,
                status=tenant.status,
                prefix_encoded=encoded,
                objects_count=scan.objects_count,
                bytes_total=scan.bytes_total,
                gb_total=scan.gb_total,
                api_calls=scan.api_calls,
                cost_estimated_usd=scan.cost_estimated_usd,
                statuses_filter=settings.statuses_filter,
            )
        )
        return scan

    def _scan_tenants(self, label: str, tenants: Iterable[TenantRecord]) -> PassTotals:
        totals = PassTotals(label=label)
        for tenant in tenants:
            try:
                scan = self.scan_tenant(tenant)
            except (StorageProviderError, DataAccessError):
                logging.error(
                    "Aborting %s pass at tenant %d after %d tenant(s) (run %s)",
                    label,
                    tenant.identifier,
                    totals.tenants_processed,
                    self.run_id,
                )
                raise
            totals = totals.add(scan)

        logging.info(
            "SUM %s(%s): %.2f GB | Tenants=%d | Objects=%d | Calls=%d | Cost=$%.6f",
            label,
            self.settings.statuses_filter,
            totals.gb_total,
            totals.tenants_processed,
            totals.objects_count,
            totals.api_calls,
            totals.cost_estimated_usd,
        )
        return totals

    def run_in_pass(self) -> PassTotals:
        """Scan tenants whose status is in the filter."""
        statuses = self.settings.statuses
        logging.info("Listing tenants with status IN (%s)...", ",".join(statuses))
        totals = self._scan_tenants("IN", self.repository.list_by_status_in(statuses))
        if self.settings.write_in_summary:
            self.sink.insert_usage_row(
                self._summary_row(totals, SummaryNote.IN, self.settings.base_prefix)
            )
        return totals

    def run_not_in_pass(self) -> PassTotals:
        """Scan tenants whose status is outside the filter and write its SUMMARY row."""
        statuses = self.settings.statuses
        logging.info("Listing tenants with status NOT IN (%s)...", ",".join(statuses))
        totals = self._scan_tenants("NOT IN", self.repository.list_by_status_not_in(statuses))
        self.sink.insert_usage_row(
            self._summary_row(totals, SummaryNote.NOT_IN, self.settings.base_prefix)
        )
        return totals

    def run_bucket_total(self) -> PassTotals:
        """Scan the whole bucket and write its SUMMARY row."""
        bucket = self.settings.bucket
        logging.warning("Starting whole-bucket scan of %s (this may be slow and costly)", bucket)
        scan = self.scanner.sum_prefix_size(bucket, None)
        totals = PassTotals(label="BUCKET").add(scan, tenants=0)
        logging.info(
            "Bucket total = %.2f GB | Objects=%d | Calls=%d | Cost=$%.6f",
            totals.gb_total,
            totals.objects_count,
            totals.api_calls,
            totals.cost_estimated_usd,
        )
        self.sink.insert_usage_row(self._summary_row(totals, SummaryNote.BUCKET_TOTAL, ""))
        return totals

    def run(self) -> RunReport:
        """Run every enabled pass in order and return the combined report."""
        in_totals = self.run_in_pass()
        not_in_totals = self.run_not_in_pass() if self.settings.include_not_in else None
        bucket_totals = self.run_bucket_total() if self.settings.compute_bucket_total else None

        report = RunReport(
            run_id=self.run_id,
            statuses_filter=self.settings.statuses_filter,
            in_pass=in_totals,
            not_in_pass=not_in_totals,
            bucket_total=bucket_totals,
        )
        logging.info(
            "==== Run finished | RunID: %s | Total estimated cost: $%.6f ====",
            self.run_id,
            report.total_cost_usd,
        )
        return report
