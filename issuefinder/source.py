"""
Module that defines the range query interface of a catalog backend.

A source answers range-bounded queries: given a table, a projection, a sort column and
direction, and an inclusive row range [start, stop], it returns the matching rows in sort
order. A source is free to return fewer rows than requested; hosted query backends commonly
cap every response at an undocumented maximum without reporting it.

A projection is either "*" (all columns) or a comma-separated list of column names.
"""

import re

from typing import Any


_identifier = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def parse_select(select: str) -> list[str] | None:
    """
    Parse a projection expression into a list of column names.

    Returns None if the projection selects all columns. Raises ValueError if the projection
    is malformed.
    """
    select = select.strip()
    if select == "*":
        return None
    columns = [column.strip() for column in select.split(",")]
    for column in columns:
        if not _identifier.match(column):
            raise ValueError(f"invalid column in projection: {column!r}")
    return columns


class Source:
    """Base class for a source of catalog records."""

    async def query(
        self,
        table: str,
        select: str,
        order_by: str,
        ascending: bool,
        start: int,
        stop: int,
    ) -> list[dict[str, Any]]:
        """
        Query a range of rows.

        Parameters:
        • table: name of the table to query
        • select: projection expression
        • order_by: name of column to sort rows by
        • ascending: sort in ascending order
        • start: offset of the first row to return
        • stop: offset of the last row to return (inclusive)

        Raises RetrievalError if the query fails.
        """
        raise NotImplementedError
