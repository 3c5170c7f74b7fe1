"""Module to serve catalog records from a SQLite database."""

import aiosqlite
import asyncio
import contextvars
import logging
import sqlite3
import typing
import uuid

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from issuefinder.error import RetrievalError
from issuefinder.source import Source, parse_select
from issuefinder.sql import Expression, Param, Table, is_optional, range_select
from types import NoneType
from typing import Any


_logger = logging.getLogger(__name__)


class CodecError(ValueError):
    """Error raised when a value cannot be encoded to or decoded from a column value."""


class SQLiteCodec:
    """
    Base class for codecs that convert between Python values and SQLite column values.

    Codecs are looked up by Python type with `SQLiteCodec.get`; subclasses register
    themselves by implementing `handles`.
    """

    _codecs: dict[Any, "SQLiteCodec"] = {}

    def __init__(self, python_type: Any):
        self.python_type = python_type

    @staticmethod
    def handles(python_type: Any) -> bool:
        raise NotImplementedError

    @classmethod
    def get(cls, python_type: Any) -> "SQLiteCodec":
        """Return the codec for a Python type. Raises TypeError if no codec handles it."""
        if codec := SQLiteCodec._codecs.get(python_type):
            return codec
        classes = (c for c in _codec_classes(SQLiteCodec) if c.handles(python_type))
        codec_class = next(classes, None)
        if codec_class is None:
            raise TypeError(f"no codec for {python_type}")
        codec = SQLiteCodec._codecs[python_type] = codec_class(python_type)
        return codec

    def encode(self, value: Any) -> Any:
        raise NotImplementedError

    def decode(self, value: Any) -> Any:
        raise NotImplementedError


def _codec_classes(cls):
    for subclass in cls.__subclasses__():
        yield subclass
        yield from _codec_classes(subclass)


class _ScalarCodec(SQLiteCodec):
    column_types: tuple[type, ...]  # column value types accepted on decode

    @staticmethod
    def handles(python_type: Any) -> bool:
        return False

    def _check(self, value: Any, types: tuple[type, ...]) -> None:
        if isinstance(value, bool) and self.python_type is not bool:
            raise CodecError(f"expecting {self.python_type.__name__}; received bool")
        if not isinstance(value, types):
            raise CodecError(f"expecting {self.python_type.__name__}; received {type(value)}")

    def encode(self, value: Any) -> Any:
        self._check(value, self.column_types)
        return self.python_type(value)

    def decode(self, value: Any) -> Any:
        self._check(value, self.column_types)
        return self.python_type(value)


class IntegerCodec(_ScalarCodec):
    """Codec for int and bool values, held in INTEGER columns."""

    column_types = (int,)

    @staticmethod
    def handles(python_type: Any) -> bool:
        return python_type in {int, bool}

    def _check(self, value: Any, types: tuple[type, ...]) -> None:
        if not isinstance(value, int):
            raise CodecError(f"expecting INTEGER; received {type(value)}")


class RealCodec(_ScalarCodec):
    """Codec for float values, held in REAL columns."""

    column_types = (int, float)

    @staticmethod
    def handles(python_type: Any) -> bool:
        return python_type is float


class TextCodec(_ScalarCodec):
    """Codec for str values, held in TEXT columns."""

    column_types = (str,)

    @staticmethod
    def handles(python_type: Any) -> bool:
        return python_type is str


class OptionalCodec(SQLiteCodec):
    """Codec for optional values; None is held as NULL."""

    @staticmethod
    def handles(python_type: Any) -> bool:
        args = typing.get_args(python_type)
        return is_optional(python_type) and len(args) == 2

    def __init__(self, python_type: Any):
        super().__init__(python_type)
        (arg,) = (a for a in typing.get_args(python_type) if a is not NoneType)
        self.codec = SQLiteCodec.get(arg)

    def encode(self, value: Any) -> Any:
        return None if value is None else self.codec.encode(value)

    def decode(self, value: Any) -> Any:
        return None if value is None else self.codec.decode(value)


class Database:
    """
    Manages access to a SQLite database.

    Parameter:
    • path: path to SQLite database file

    A connection is shared by all transactions of the current task. Transactions nest as
    savepoints; statements may only be executed within a transaction.
    """

    __slots__ = {"path", "_conn", "_txn", "_task"}

    def __init__(self, path: str):
        self.path = path
        self._conn = contextvars.ContextVar("issuefinder_sqlite_conn", default=None)
        self._txn = contextvars.ContextVar("issuefinder_sqlite_txn", default=None)
        self._task = contextvars.ContextVar("issuefinder_sqlite_task", default=None)

    def __repr__(self):
        return f"Database(path={self.path!r})"

    @asynccontextmanager
    async def connection(self):
        """Open a connection for the current task, unless one is already open."""
        task = asyncio.current_task()
        if self._conn.get() is not None and self._task.get() is task:
            yield
            return
        self._task.set(task)
        connection = await aiosqlite.connect(self.path)
        connection.row_factory = sqlite3.Row
        self._conn.set(connection)
        _logger.debug("connection opened to %s", self.path)
        try:
            yield
        finally:
            self._conn.set(None)
            try:
                await connection.close()
            except sqlite3.Error:
                _logger.exception("failed to close connection to %s", self.path)

    @asynccontextmanager
    async def transaction(self):
        """
        Scope a transaction. Changes are committed when the context exits normally, and
        rolled back if it exits with an exception.
        """
        savepoint = f"_{uuid.uuid4().hex}"
        async with self.connection():
            connection = self._conn.get()
            token = self._txn.set(savepoint)
            await connection.execute(f"SAVEPOINT {savepoint};")
            try:
                yield
            except Exception:
                _logger.debug("rollback %s", savepoint)
                await connection.execute(f"ROLLBACK TO SAVEPOINT {savepoint};")
                await connection.execute(f"RELEASE SAVEPOINT {savepoint};")
                raise
            else:
                await connection.execute(f"RELEASE SAVEPOINT {savepoint};")
            finally:
                self._txn.reset(token)

    async def execute(
        self,
        statement: Expression,
        columns: dict[str, Any] | None = None,
    ) -> AsyncIterator[dict[str, Any]] | None:
        """
        Execute a statement.

        Parameters:
        • statement: statement to execute
        • columns: mapping of result column names to Python types; None if no result

        Rows of a result are returned as dictionaries through an asynchronous iterator. Must
        be called within a transaction.
        """
        if self._txn.get() is None:
            raise RuntimeError("transaction context required to execute statement")
        text = []
        args = []
        for fragment in statement:
            if isinstance(fragment, Param):
                text.append("?")
                args.append(SQLiteCodec.get(fragment.type).encode(fragment.value))
            else:
                text.append(fragment)
        cursor = await self._conn.get().execute("".join(text), args)
        if columns is not None:
            return _rows(cursor, {name: SQLiteCodec.get(t) for name, t in columns.items()})


async def _rows(cursor, codecs: dict[str, SQLiteCodec]) -> AsyncIterator[dict[str, Any]]:
    async for row in cursor:
        yield {name: codec.decode(row[name]) for name, codec in codecs.items()}


class SQLiteSource(Source):
    """
    Source that answers range queries from tables in a SQLite database.

    Parameters:
    • database: database holding the tables
    • tables: tables that can be queried
    • max_rows: maximum number of rows returned by any single query

    Responses are silently capped at max_rows, regardless of the requested range.
    """

    def __init__(self, database: Database, tables: Iterable[Table], max_rows: int = 1000):
        self.database = database
        self.tables = {table.name: table for table in tables}
        self.max_rows = max_rows

    async def query(
        self,
        table: str,
        select: str,
        order_by: str,
        ascending: bool,
        start: int,
        stop: int,
    ) -> list[dict[str, Any]]:
        if not (tbl := self.tables.get(table)):
            raise RetrievalError(f"unknown table: {table}", table=table, offset=start)
        try:
            columns = parse_select(select) or list(tbl.columns)
        except ValueError as ve:
            raise RetrievalError(str(ve), table=table, offset=start) from ve
        for column in (*columns, order_by):
            if column not in tbl.columns:
                raise RetrievalError(f"unknown column: {column}", table=table, offset=start)
        limit = min(stop - start + 1, self.max_rows)
        if limit <= 0:
            return []
        statement = range_select(tbl, columns, order_by, ascending, start, limit)
        _logger.debug("query: %s", statement)
        try:
            async with self.database.transaction():
                rows = await self.database.execute(statement, {c: tbl.columns[c] for c in columns})
                return [row async for row in rows]
        except (sqlite3.Error, CodecError) as e:
            raise RetrievalError(f"query failed: {e}", table=table, offset=start) from e
