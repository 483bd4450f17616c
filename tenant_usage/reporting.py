"""
Console output for a finished audit run.
"""

from decimal import Decimal

from .orchestrator import PassTotals, RunReport

_UNITS = ["B", "KB", "MB", "GB", "TB", "PB"]


def format_decimal_bytes(num_bytes: int, decimal_places: int = 2) -> str:
    """
    Format a byte count with decimal (1000-based) units.

    Examples:
        >>> format_decimal_bytes(1500)
        '1.50 KB'
        >>> format_decimal_bytes(2_000_000_000)
        '2.00 GB'
    """
    value = float(num_bytes)
    for unit in _UNITS[:-1]:
        if value < 1000:
            return f"{value:,.{decimal_places}f} {unit}"
        value /= 1000
    return f"{value:,.{decimal_places}f} {_UNITS[-1]}"


def _format_gb(value: Decimal) -> str:
    return f"{value:,.2f} GB"


def _print_pass_line(title: str, totals: PassTotals):
    print(
        f"{title}: {_format_gb(totals.gb_total)} "
        f"({totals.objects_count:,} objects, {format_decimal_bytes(totals.bytes_total)}, "
        f"{totals.api_calls:,} calls)"
    )


def print_run_summary(report: RunReport):
    """Print the end-of-run summary block"""
    statuses = report.statuses_filter
    print()
    print("=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print(f"Tenants processed: {report.tenants_processed:,}")
    _print_pass_line(f"Total (IN {statuses})", report.in_pass)
    if report.not_in_pass is not None:
        _print_pass_line(f"Total (NOT IN {statuses})", report.not_in_pass)
    if report.bucket_total is not None:
        _print_pass_line("Total (WHOLE BUCKET)", report.bucket_total)
    print(f"Grand total (tenants): {_format_gb(report.total_gb)}")
    print(f"Estimated cost of this run: US$ {report.total_cost_usd:.6f}")
    print(f"Run ID: {report.run_id}")
    print("=" * 70)
