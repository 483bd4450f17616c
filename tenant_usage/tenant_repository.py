"""
Tenant lookups against the tenant table.

Only six-digit access codes (100000..999999) are considered; anything else
has no storage prefix.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

import psycopg2
from psycopg2 import sql

from .config import (
    DEFAULT_TENANT_ID_COLUMN,
    DEFAULT_TENANT_STATUS_COLUMN,
    DEFAULT_TENANT_TABLE,
    TENANT_ID_MAX,
    TENANT_ID_MIN,
)
from .errors import DataAccessError

_TENANT_QUERY = """
    SELECT {id_col}, {status_col}
      FROM {table}
     WHERE {status_col} {operator} %s
       AND {id_col} BETWEEN %s AND %s
       AND {id_col} IS NOT NULL
       AND {id_col} <> 0
"""


@dataclass(frozen=True)
class TenantRecord:
    """A tenant as read from the tenant table."""

    identifier: int
    status: str


class TenantRepository:
    """Reads tenants filtered by status"""

    def __init__(
        self,
        conn,
        table: str = DEFAULT_TENANT_TABLE,
        id_column: str = DEFAULT_TENANT_ID_COLUMN,
        status_column: str = DEFAULT_TENANT_STATUS_COLUMN,
    ):
        self.conn = conn
        self.table = table
        self.id_column = id_column
        self.status_column = status_column

    def list_by_status_in(self, statuses: Iterable[str]) -> Iterator[TenantRecord]:
        """Yield tenants whose status is one of statuses."""
        return self._list_by_status(statuses, negate=False)

    def list_by_status_not_in(self, statuses: Iterable[str]) -> Iterator[TenantRecord]:
        """Yield tenants whose status is not one of statuses."""
        return self._list_by_status(statuses, negate=True)

    def _build_query(self, negate: bool):
        return sql.SQL(_TENANT_QUERY).format(
            id_col=sql.Identifier(self.id_column),
            status_col=sql.Identifier(self.status_column),
            table=sql.Identifier(self.table),
            operator=sql.SQL("NOT IN" if negate else "IN"),
        )

    def _list_by_status(self, statuses: Iterable[str], negate: bool) -> Iterator[TenantRecord]:
        status_values = tuple(statuses)
        if not status_values:
            raise ValueError("At least one status is required")
        return self._iter_tenants(status_values, negate)

    def _iter_tenants(self, status_values: tuple, negate: bool) -> Iterator[TenantRecord]:
        operator = "NOT IN" if negate else "IN"
        cursor = None
        try:
            cursor = self.conn.cursor()
            cursor.execute(self._build_query(negate), (status_values, TENANT_ID_MIN, TENANT_ID_MAX))
            for row in cursor:
                yield TenantRecord(identifier=int(row[0]), status=str(row[1]))
        except psycopg2.Error as exc:
            logging.error(
                "Tenant query failed (status %s %s): %s",
                operator,
                ",".join(status_values),
                exc,
            )
            raise DataAccessError(f"Tenant query failed: {exc}") from exc
        finally:
            if cursor is not None:
                cursor.close()
