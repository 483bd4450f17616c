"""Append-only persistence of usage rows to the reporting table"""

import logging
from dataclasses import dataclass, fields
from datetime import datetime
from decimal import Decimal
from enum import Enum

import psycopg2
from psycopg2 import sql

from .errors import DataAccessError


class Scope(Enum):
    """Row scope"""

    CLIENT = "CLIENT"
    SUMMARY = "SUMMARY"


class SummaryNote(Enum):
    """extra_note tags for SUMMARY rows"""

    IN = "SUMMARY:IN"
    NOT_IN = "SUMMARY:NOT_IN"
    BUCKET_TOTAL = "SUMMARY:BUCKET_TOTAL"


@dataclass(frozen=True)
class UsageRow:  # pylint: disable=too-many-instance-attributes
    """One row of the output table. Field order matches the INSERT column order."""

    run_id: str
    computed_at: datetime
    scope: Scope
    bucket: str
    base_prefix: str
    tenant_identifier: int | None
    status: str | None
    prefix_encoded: str | None
    objects_count: int
    bytes_total: int
    gb_total: Decimal
    api_calls: int
    cost_estimated_usd: Decimal
    statuses_filter: str
    extra_note: SummaryNote | None = None

    @property
    def target(self) -> str:
        """Tenant identifier, or the summary tag for SUMMARY rows."""
        if self.tenant_identifier is not None:
            return str(self.tenant_identifier)
        return self.extra_note.value if self.extra_note is not None else "-"

    def as_params(self) -> tuple:
        """Values ready for the INSERT statement."""
        values = {field.name: getattr(self, field.name) for field in fields(self)}
        values["scope"] = self.scope.value
        values["extra_note"] = self.extra_note.value if self.extra_note is not None else None
        # stored as a decimal string so very large totals survive any client type
        values["bytes_total"] = str(self.bytes_total)
        return tuple(values[name] for name in USAGE_COLUMNS)


USAGE_COLUMNS = tuple(field.name for field in fields(UsageRow))

_INSERT_SQL = "INSERT INTO {table} ({columns}) VALUES ({placeholders})"


class ResultSink:  # pylint: disable=too-few-public-methods
    """Writes UsageRows to schema.table, committing each row"""

    def __init__(self, conn, schema: str, table: str):
        self.conn = conn
        self.schema = schema
        self.table = table

    def _insert_statement(self):
        return sql.SQL(_INSERT_SQL).format(
            table=sql.Identifier(self.schema, self.table),
            columns=sql.SQL(", ").join(sql.Identifier(name) for name in USAGE_COLUMNS),
            placeholders=sql.SQL(", ").join([sql.Placeholder()] * len(USAGE_COLUMNS)),
        )

    def insert_usage_row(self, row: UsageRow) -> None:
        """
        Append one row to the output table.

        Raises:
            DataAccessError: On constraint violations or connection loss
        """
        try:
            with self.conn.cursor() as cursor:
                cursor.execute(self._insert_statement(), row.as_params())
            self.conn.commit()
        except psycopg2.Error as exc:
            logging.error(
                "Failed to insert %s row for %s into %s.%s: %s",
                row.scope.value,
                row.target,
                self.schema,
                self.table,
                exc,
            )
            raise DataAccessError(f"Insert into {self.schema}.{self.table} failed: {exc}") from exc
