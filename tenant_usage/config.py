"""
Configuration for the tenant storage usage audit.

Pricing and paging constants, tenant table naming, and the per-run
settings assembled from the command line.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

# ListObjectsV2 costs ~US$0.005 per 1,000 requests; each request returns up to 1,000 keys
LIST_PRICE_PER_1000: str = "0.005"
PAGE_SIZE: int = 1000

# Tenant identifiers are six-digit access codes
TENANT_ID_MIN: int = 100000
TENANT_ID_MAX: int = 999999

DEFAULT_DB_PORT: int = 5432
DEFAULT_LOG_FILE: str = "s3_usage_audit.log"

# Source table for tenants (override via environment or .env)
DEFAULT_TENANT_TABLE: str = "medic_clinica"
DEFAULT_TENANT_ID_COLUMN: str = "codigo_acesso"
DEFAULT_TENANT_STATUS_COLUMN: str = "status"


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing."""


@dataclass(frozen=True)
class TenantTableConfig:
    """Where tenants live in the source database."""

    table: str = DEFAULT_TENANT_TABLE
    id_column: str = DEFAULT_TENANT_ID_COLUMN
    status_column: str = DEFAULT_TENANT_STATUS_COLUMN


def load_tenant_table_config() -> TenantTableConfig:
    """Read TENANT_TABLE / TENANT_ID_COLUMN / TENANT_STATUS_COLUMN overrides."""
    return TenantTableConfig(
        table=os.environ.get("TENANT_TABLE", DEFAULT_TENANT_TABLE),
        id_column=os.environ.get("TENANT_ID_COLUMN", DEFAULT_TENANT_ID_COLUMN),
        status_column=os.environ.get("TENANT_STATUS_COLUMN", DEFAULT_TENANT_STATUS_COLUMN),
    )


def resolve_log_file(cli_value: str | None = None) -> str:
    """Log file from --log-file, then TENANT_USAGE_LOG_FILE, then the default."""
    if cli_value:
        return cli_value
    return os.environ.get("TENANT_USAGE_LOG_FILE", DEFAULT_LOG_FILE)


def parse_statuses(raw: str) -> tuple[str, ...]:
    """Split a comma-separated status list, dropping blanks.

    Raises:
        ConfigurationError: If no status survives trimming
    """
    statuses = tuple(part.strip() for part in raw.split(",") if part.strip())
    if not statuses:
        raise ConfigurationError(f"--statuses must list at least one status (got {raw!r})")
    return statuses


@dataclass(frozen=True)
class AuditSettings:  # pylint: disable=too-many-instance-attributes
    """Parameters for one audit run."""

    bucket: str
    region: str
    base_prefix: str
    db_host: str
    db_name: str
    output_schema: str
    output_table: str
    statuses: tuple[str, ...]
    include_not_in: bool = False
    compute_bucket_total: bool = False
    write_in_summary: bool = False
    db_port: int = DEFAULT_DB_PORT

    @property
    def statuses_filter(self) -> str:
        """Status list as recorded in every output row."""
        return ",".join(self.statuses)
