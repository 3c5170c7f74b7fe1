"""
Module to build parameterized SQL statements for range queries.

A statement is held as an `Expression`: an ordered sequence of text fragments and `Param`
values. Text is included in the statement verbatim; params are bound to placeholders by the
database when the statement is executed.
"""

from __future__ import annotations

import builtins
import typing

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, is_dataclass
from types import NoneType, UnionType
from typing import Any


@dataclass(frozen=True)
class Param:
    """
    A value bound to a statement placeholder.

    Attributes:
    • value: value to bind
    • type: Python type used to encode the value; inferred from the value if None
    """

    value: Any
    type: Any = None

    def __post_init__(self):
        if self.type is None:
            object.__setattr__(self, "type", builtins.type(self.value))

    def __str__(self):
        return f"«{self.value}»"


class Expression:
    """
    A SQL statement, or a part of one.

    Arguments may be strings, params, expressions, or iterables of any of these; nested
    arguments are flattened in order.
    """

    __slots__ = {"fragments"}

    def __init__(self, *args):
        self.fragments: list[str | Param] = []
        self += args

    def __iadd__(self, value) -> Expression:
        match value:
            case str() | Param():
                self.fragments.append(value)
            case Iterable():
                for element in value:
                    self += element
            case _:
                raise ValueError(f"unsupported fragment: {value!r}")
        return self

    def __iter__(self) -> Iterator[str | Param]:
        return iter(self.fragments)

    def __len__(self):
        return len(self.fragments)

    def __bool__(self):
        return bool(self.fragments)

    def __str__(self):
        return "".join(str(f) for f in self.fragments)

    def __repr__(self):
        return f"Expression({self.fragments!r})"

    @staticmethod
    def join(values: Iterable[Expression | str | Param], sep: str = "") -> Expression:
        """Concatenate expressions or fragments, separating each by a string."""
        result = Expression()
        for value in values:
            if result and sep:
                result += sep
            result += value
        return result


def is_optional(type_hint: Any) -> bool:
    """Return if a type hint admits None."""
    if typing.get_origin(type_hint) in {typing.Union, UnionType}:
        return NoneType in typing.get_args(type_hint)
    return type_hint is NoneType


@dataclass(frozen=True)
class Table:
    """
    A queryable table.

    Attributes:
    • name: name of the table in the database
    • schema: dataclass whose fields are the table columns
    • pk: column that uniquely identifies a row, used to order ties
    • columns: mapping of column names to their Python types
    """

    name: str
    schema: type
    pk: str
    columns: dict[str, Any] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not is_dataclass(self.schema):
            raise TypeError("table schema must be a dataclass")
        object.__setattr__(self, "columns", typing.get_type_hints(self.schema))
        if self.pk not in self.columns:
            raise ValueError(f"primary key not in schema: {self.pk}")


def range_select(
    table: Table,
    columns: Iterable[str],
    order_by: str,
    ascending: bool,
    offset: int,
    limit: int,
) -> Expression:
    """
    Return a statement that selects a range of rows in sort order.

    Parameters:
    • table: table to select rows from
    • columns: names of columns to select
    • order_by: name of column to sort rows by
    • ascending: sort in ascending order
    • offset: number of sorted rows to skip
    • limit: maximum number of rows to select

    Rows with equal sort values are ordered by primary key, so that consecutive ranges
    neither skip nor repeat rows.
    """
    direction = "ASC" if ascending else "DESC"
    return Expression(
        "SELECT ",
        ", ".join(columns),
        f" FROM {table.name} ORDER BY {order_by} {direction}, {table.pk} ASC",
        " LIMIT ",
        Param(limit),
        " OFFSET ",
        Param(offset),
        ";",
    )
