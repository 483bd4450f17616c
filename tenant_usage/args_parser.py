"""
Argument parsing for the tenant usage CLI.

Required options are checked after parsing (not by argparse) so that a
missing or blank value exits with status 1 before any connection is made.
Malformed arguments raise ConfigurationError instead of exiting.
"""

from __future__ import annotations

import argparse

from .config import DEFAULT_DB_PORT, AuditSettings, ConfigurationError, parse_statuses

REQUIRED_OPTIONS = (
    "bucket",
    "region",
    "base_prefix",
    "db_host",
    "db_name",
    "output_schema",
    "output_table",
    "statuses",
)

_TRUE_VALUES = {"1", "true", "yes", "on", "y"}
_FALSE_VALUES = {"0", "false", "no", "off", "n", ""}


def parse_bool(value: str) -> bool:
    """Parse flag values such as --include-not-in-pass=false."""
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise argparse.ArgumentTypeError(f"Invalid boolean value: {value}")


class AuditArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors as ConfigurationError."""

    def error(self, message):
        raise ConfigurationError(message)


def _add_flag(parser: argparse.ArgumentParser, *names: str, help_text: str) -> None:
    parser.add_argument(
        *names,
        nargs="?",
        const=True,
        default=False,
        type=parse_bool,
        metavar="BOOL",
        help=help_text,
    )


def add_storage_arguments(parser: argparse.ArgumentParser) -> None:
    """Add S3 location arguments."""
    parser.add_argument("--bucket", help="S3 bucket holding tenant uploads.")
    parser.add_argument("--region", help="AWS region of the bucket.")
    parser.add_argument("--base-prefix", help='Prefix above tenant folders, typically "uploads/".')


def add_database_arguments(parser: argparse.ArgumentParser) -> None:
    """Add database connection and output table arguments."""
    parser.add_argument("--db-host", help="Database host.")
    parser.add_argument("--db-port", type=int, default=DEFAULT_DB_PORT, help="Database port.")
    parser.add_argument("--db-name", help="Database holding the tenant table.")
    parser.add_argument("--output-schema", "--db-schema-out", dest="output_schema", help="Schema of the results table.")
    parser.add_argument("--output-table", "--table-out", dest="output_table", help="Results table name.")


def add_pass_arguments(parser: argparse.ArgumentParser) -> None:
    """Add tenant filter and pass toggles."""
    parser.add_argument("--statuses", help='Comma-separated tenant statuses for the IN pass, e.g. "Y,B,S,G".')
    _add_flag(
        parser,
        "--include-not-in-pass",
        "--include-not-in",
        help_text="Also scan tenants whose status is NOT in --statuses (default: false).",
    )
    _add_flag(
        parser,
        "--compute-whole-bucket-total",
        "--compute-total-bucket",
        help_text="Also list the entire bucket; slow and billed per request (default: false).",
    )
    _add_flag(
        parser,
        "--write-in-summary",
        help_text="Persist a SUMMARY:IN row after the IN pass (default: false).",
    )


def add_output_arguments(parser: argparse.ArgumentParser) -> None:
    """Add logging and environment arguments."""
    parser.add_argument("--env-file", help="Path to .env file (default: $TENANT_USAGE_ENV_FILE or ~/.env).")
    parser.add_argument("--log-file", help="Log file path (default: $TENANT_USAGE_LOG_FILE or s3_usage_audit.log).")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")


def create_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = AuditArgumentParser(
        description="Sum S3 storage per tenant prefix and record usage and listing cost."
    )
    add_storage_arguments(parser)
    add_database_arguments(parser)
    add_pass_arguments(parser)
    add_output_arguments(parser)
    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Raises:
        ConfigurationError: If an option is unknown or its value is malformed
    """
    return create_parser().parse_args(argv)


def build_settings(args: argparse.Namespace) -> AuditSettings:
    """
    Validate parsed arguments and build the run settings.

    Raises:
        ConfigurationError: If a required option is missing or blank
    """
    for name in REQUIRED_OPTIONS:
        value = getattr(args, name, None)
        if value is None or not str(value).strip():
            option = "--" + name.replace("_", "-")
            raise ConfigurationError(f"missing required parameter {option}")

    return AuditSettings(
        bucket=args.bucket.strip(),
        region=args.region.strip(),
        base_prefix=args.base_prefix.strip(),
        db_host=args.db_host.strip(),
        db_name=args.db_name.strip(),
        output_schema=args.output_schema.strip(),
        output_table=args.output_table.strip(),
        statuses=parse_statuses(args.statuses),
        include_not_in=args.include_not_in_pass,
        compute_bucket_total=args.compute_whole_bucket_total,
        write_in_summary=args.write_in_summary,
        db_port=args.db_port,
    )
