"""
Module to retrieve complete result sets from a row-capped backend.

Hosted query backends commonly cap the number of rows returned by a single query, and do so
silently: a request for rows [0, 4999] simply returns the first 1000. To reconstruct a
complete result set, the fetcher issues consecutive range queries, each requesting a block of
`step` rows starting at an advancing offset. The offset advances by the number of rows
actually returned, so that a cap below the requested block size neither skips nor repeats
rows.

The backend cap itself is unknown. A response shorter than `min_cap` rows, the smallest cap a
backend is presumed to apply, can only mean the data is exhausted; retrieval then stops
without issuing a final query that would return nothing. A caller holding an authoritative
total can disable this heuristic by passing a `min_cap` greater than `step`.
"""

import logging

from issuefinder.error import RetrievalError
from issuefinder.source import Source
from issuefinder.validation import MinLen, MinValue, validate_arguments
from typing import Annotated, Any


_logger = logging.getLogger(__name__)


STEP = 999  # rows requested per range query
MIN_CAP = 100  # smallest plausible backend row cap
MAX_ITEMS = 5000  # default upper bound on rows retrieved


@validate_arguments
async def fetch_all(
    source: Source,
    table: Annotated[str, MinLen(1)],
    select: Annotated[str, MinLen(1)],
    order_by: Annotated[str, MinLen(1)],
    ascending: bool = False,
    max_items: Annotated[int, MinValue(1)] = MAX_ITEMS,
    *,
    step: Annotated[int, MinValue(1)] = STEP,
    min_cap: Annotated[int, MinValue(1)] = MIN_CAP,
) -> list[dict[str, Any]]:
    """
    Fetch all rows of a table, paginating range queries to work around a backend row cap.

    Parameters:
    • source: backend to query
    • table: name of table to query
    • select: projection expression
    • order_by: name of column to order rows by
    • ascending: order rows in ascending order
    • max_items: maximum number of rows to return
    • step: number of rows to request in each range query
    • min_cap: smallest row cap the backend is presumed to apply

    Rows are returned in backend order, at most max_items of them. Range queries are issued
    one at a time, each after the previous one has been answered.

    If any query fails, a RetrievalError is raised and no rows are returned.
    """

    rows = []
    offset = 0

    try:
        while len(rows) < max_items:
            _logger.debug("query %s [%d, %d]", table, offset, offset + step)
            try:
                data = await source.query(table, select, order_by, ascending, offset, offset + step)
            except RetrievalError:
                raise
            except Exception as e:
                raise RetrievalError(f"query failed: {e}", table=table, offset=offset) from e
            if not data:
                break  # no more data
            rows.extend(data)
            offset += len(data)  # backend may cap below requested step
            if len(data) < min_cap and step >= min_cap:
                break  # short response: data exhausted
    except RetrievalError as re:
        _logger.error("retrieval from %s aborted at offset %d: %s", table, offset, re)
        raise

    _logger.info("fetched %d rows from %s", min(len(rows), max_items), table)
    return rows[:max_items]
