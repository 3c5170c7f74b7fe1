"""Module to serve catalog records from memory."""

from __future__ import annotations

import logging

from collections.abc import Iterable, Mapping
from copy import deepcopy
from issuefinder.error import RetrievalError
from issuefinder.source import Source, parse_select
from typing import Any


_logger = logging.getLogger(__name__)


class MemorySource(Source):
    """
    Represents a collection of tables held in memory.

    • tables: mapping of table name to its rows
    • max_rows: maximum number of rows returned by any single query  [unlimited]

    Rows are sorted on every query. Rows whose sort value is None sort after all other rows,
    in either direction; ties keep their insertion order.
    """

    def __init__(
        self,
        tables: Mapping[str, Iterable[Mapping[str, Any]]] | None = None,
        max_rows: int | None = None,
    ):
        self.max_rows = max_rows
        self._storage: dict[str, list[dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }

    def insert(self, table: str, *rows: Mapping[str, Any]) -> None:
        """Append rows to a table, creating the table if it does not exist."""
        self._storage.setdefault(table, []).extend(dict(row) for row in rows)

    def clear(self) -> None:
        """Remove all tables."""
        self._storage.clear()

    async def query(
        self,
        table: str,
        select: str,
        order_by: str,
        ascending: bool,
        start: int,
        stop: int,
    ) -> list[dict[str, Any]]:
        rows = self._storage.get(table)
        if rows is None:
            raise RetrievalError(f"unknown table: {table}", table=table, offset=start)
        try:
            columns = parse_select(select)
        except ValueError as ve:
            raise RetrievalError(str(ve), table=table, offset=start) from ve
        present = [row for row in rows if row.get(order_by) is not None]
        absent = [row for row in rows if row.get(order_by) is None]
        try:
            present.sort(key=lambda row: row[order_by], reverse=not ascending)
        except TypeError as te:
            raise RetrievalError(f"cannot order by {order_by}", table=table, offset=start) from te
        stop = min(stop, len(rows) - 1)
        if self.max_rows is not None:
            stop = min(stop, start + self.max_rows - 1)
        result = (present + absent)[start : stop + 1]
        _logger.debug("query %s [%d, %d]: %d rows", table, start, stop, len(result))
        if columns is None:
            return deepcopy(result)
        return [{column: deepcopy(row.get(column)) for column in columns} for row in result]
