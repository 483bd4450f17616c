"""Main entry point for the tenant usage audit CLI."""

from __future__ import annotations

import logging
import os
import sys
from contextlib import closing

from .args_parser import build_settings, parse_args
from .clients import (
    CredentialsProvider,
    connect_database,
    create_s3_client,
    load_env_file,
    prompt_db_credentials,
    resolve_aws_credentials,
    resolve_db_credentials,
)
from .config import AuditSettings, ConfigurationError, load_tenant_table_config, resolve_log_file
from .errors import DataAccessError, StorageProviderError
from .orchestrator import RunReport, UsageAggregator
from .reporting import print_run_summary
from .result_sink import ResultSink
from .storage_scanner import StorageScanner
from .tenant_repository import TenantRepository

EXIT_OK = 0
EXIT_CONFIGURATION_ERROR = 1
EXIT_RUN_FAILED = 2

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(message)s"
LOG_FILE_MODE = 0o640


def _create_log_file(log_file: str) -> None:
    """Create log_file readable by owner and group only; existing files are left alone."""
    if os.path.exists(log_file):
        return
    os.close(os.open(log_file, os.O_CREAT | os.O_WRONLY | os.O_APPEND, LOG_FILE_MODE))
    # umask may have cleared group bits
    os.chmod(log_file, LOG_FILE_MODE)


def configure_logging(log_file: str, verbose: bool = False) -> None:
    """Log to the terminal and append to log_file."""
    _create_log_file(log_file)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(), logging.FileHandler(log_file, encoding="utf-8")],
        force=True,
    )


def _log_run_parameters(settings: AuditSettings) -> None:
    logging.info("==== Run started ====")
    logging.info(
        "Bucket: %s | Region: %s | Base prefix: %s",
        settings.bucket,
        settings.region,
        settings.base_prefix,
    )
    logging.info(
        "DB host: %s | DB name: %s | Output: %s.%s",
        settings.db_host,
        settings.db_name,
        settings.output_schema,
        settings.output_table,
    )
    logging.info(
        "Statuses IN: %s | Include NOT IN: %s | Write IN summary: %s",
        settings.statuses_filter,
        settings.include_not_in,
        settings.write_in_summary,
    )
    logging.info("Compute whole bucket total: %s", settings.compute_bucket_total)


def run_audit(
    settings: AuditSettings, credentials: CredentialsProvider = prompt_db_credentials
) -> RunReport:
    """
    Connect to the database and S3, then run every enabled pass.

    Raises:
        DataAccessError: If the database cannot be reached or a query/insert fails
        StorageProviderError: If an S3 listing fails
    """
    db_user, db_password = resolve_db_credentials(credentials)
    conn = connect_database(
        settings.db_host, settings.db_port, settings.db_name, db_user, db_password
    )
    with closing(conn):
        table_config = load_tenant_table_config()
        s3_client = create_s3_client(settings.region, *resolve_aws_credentials())
        aggregator = UsageAggregator(
            repository=TenantRepository(
                conn, table_config.table, table_config.id_column, table_config.status_column
            ),
            scanner=StorageScanner(s3_client),
            sink=ResultSink(conn, settings.output_schema, settings.output_table),
            settings=settings,
        )
        return aggregator.run()


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the tenant usage CLI."""
    try:
        args = parse_args(sys.argv[1:] if argv is None else argv)
        settings = build_settings(args)
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_CONFIGURATION_ERROR

    load_env_file(args.env_file)
    configure_logging(resolve_log_file(args.log_file), args.verbose)
    _log_run_parameters(settings)

    try:
        report = run_audit(settings)
    except (DataAccessError, StorageProviderError) as exc:
        logging.error("Run aborted: %s", exc)
        return EXIT_RUN_FAILED

    print_run_summary(report)
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    raise SystemExit(main())
