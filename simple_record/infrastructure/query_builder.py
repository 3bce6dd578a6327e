"""
Driver-agnostic SELECT builder and result rows.

`QueryBuilder` accumulates the parts of a single-table SELECT (projection,
AND-combined predicates, named parameters, ordering, limit/offset) and
renders them as SQL with psycopg's pyformat placeholders. Values are never
interpolated into the SQL text; identifiers are checked against a strict
pattern before they are.

Predicates are kept as structured `Comparison` objects so any executor can
interpret them, not only a SQL database.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
    Union,
)

from simple_record.errors import InvalidIdentifierError
from simple_record.infrastructure.protocols import QueryExecutor

T = TypeVar("T")

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")
_DIRECTIONS = ("ASC", "DESC")


def check_identifier(name: str) -> str:
    """Return `name` unchanged if it is a plain (optionally schema-qualified) identifier."""
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise InvalidIdentifierError(str(name))
    return name


def _expanded_name(name: str, index: int) -> str:
    return f"{name}__in_{index}"


def _bind_once(params: Dict[str, Any], name: str, value: Any) -> None:
    if name in params:
        raise ValueError(f"Parameter '{name}' is bound twice; rename one of the parameters")
    params[name] = value


class ParameterType(str, Enum):
    SCALAR = "scalar"
    ARRAY = "array"


@dataclass(frozen=True)
class Comparison:
    """
    A `column <operator> :parameter` predicate.

    Supported operators are ``=`` and ``IN``. For ``IN`` the parameter is
    expected to be bound with `ParameterType.ARRAY`.
    """

    column: str
    operator: str
    parameter: str

    def __post_init__(self) -> None:
        check_identifier(self.column)
        check_identifier(self.parameter)
        if self.operator not in ("=", "IN"):
            raise ValueError(f"Unsupported operator '{self.operator}'. Use '=' or 'IN'.")

    @classmethod
    def eq(cls, column: str, parameter: Optional[str] = None) -> "Comparison":
        return cls(column, "=", parameter or column)

    @classmethod
    def in_(cls, column: str, parameter: Optional[str] = None) -> "Comparison":
        return cls(column, "IN", parameter or column)


Predicate = Union[Comparison, str]


class RowSet:
    """Rows returned by an executed query, as column -> value mappings."""

    def __init__(self, rows: Sequence[Mapping[str, Any]]) -> None:
        self._rows = [dict(row) for row in rows]

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self._rows)

    def fetch_all(self) -> List[Dict[str, Any]]:
        return list(self._rows)

    def fetch_all_as(self, factory: Callable[[Dict[str, Any]], T]) -> List[T]:
        """Materialize every row through `factory` (e.g. a Record constructor)."""
        return [factory(row) for row in self._rows]

    def fetch_column(self, index: int = 0) -> Any:
        """Value of the `index`-th column of the first row, or None when empty."""
        if not self._rows:
            return None
        return list(self._rows[0].values())[index]


class QueryBuilder:
    """
    Fluent builder for single-table SELECT statements.

    Example
    -------
        qb = QueryBuilder(conn).select("*").from_("post")
        qb.and_where(Comparison.in_("id")).set_parameter("id", [1, 2], ParameterType.ARRAY)
        qb.add_order_by("id", "DESC").set_max_results(10)
        rows = qb.execute().fetch_all()
    """

    def __init__(self, executor: Optional[QueryExecutor] = None) -> None:
        self._executor = executor
        self._columns: List[str] = []
        self._table: Optional[str] = None
        self._wheres: List[Predicate] = []
        self._parameters: Dict[str, Tuple[Any, ParameterType]] = {}
        self._order_by: List[Tuple[str, str]] = []
        self._max_results: Optional[int] = None
        self._first_result: Optional[int] = None

    # -- accumulation ------------------------------------------------------

    def select(self, *columns: str) -> "QueryBuilder":
        self._columns = list(columns) or ["*"]
        return self

    def from_(self, table: str) -> "QueryBuilder":
        self._table = check_identifier(table)
        return self

    def and_where(self, predicate: Predicate) -> "QueryBuilder":
        self._wheres.append(predicate)
        return self

    def set_parameter(
        self, name: str, value: Any, type: Optional[ParameterType] = None
    ) -> "QueryBuilder":
        name = check_identifier(name.lstrip(":"))
        self._parameters[name] = (value, type or ParameterType.SCALAR)
        return self

    def add_order_by(self, column: str, direction: str = "ASC") -> "QueryBuilder":
        normalized = str(direction).upper()
        if normalized not in _DIRECTIONS:
            raise ValueError(f"Invalid sort direction '{direction}'. Use ASC or DESC.")
        self._order_by.append((check_identifier(column), normalized))
        return self

    def reset_order_by(self) -> "QueryBuilder":
        self._order_by = []
        return self

    def set_max_results(self, max_results: Optional[int]) -> "QueryBuilder":
        self._max_results = max_results
        return self

    def set_first_result(self, first_result: Optional[int]) -> "QueryBuilder":
        self._first_result = first_result
        return self

    # -- inspection --------------------------------------------------------

    @property
    def columns(self) -> List[str]:
        return list(self._columns)

    @property
    def table(self) -> Optional[str]:
        return self._table

    @property
    def wheres(self) -> List[Predicate]:
        return list(self._wheres)

    @property
    def order_by(self) -> List[Tuple[str, str]]:
        return list(self._order_by)

    @property
    def max_results(self) -> Optional[int]:
        return self._max_results

    @property
    def first_result(self) -> Optional[int]:
        return self._first_result

    def get_parameter(self, name: str) -> Any:
        return self._parameters[name.lstrip(":")][0]

    def get_parameter_type(self, name: str) -> ParameterType:
        return self._parameters[name.lstrip(":")][1]

    # -- rendering ---------------------------------------------------------

    def _render_predicate(self, predicate: Predicate) -> str:
        if isinstance(predicate, str):
            return predicate

        if predicate.parameter not in self._parameters:
            raise KeyError(f"Parameter '{predicate.parameter}' is not bound")
        value, kind = self._parameters[predicate.parameter]

        if predicate.operator == "=":
            return f"{predicate.column} = %({predicate.parameter})s"

        if kind is ParameterType.ARRAY:
            if not value:
                return f"{predicate.column} IN (NULL)"
            placeholders = ", ".join(
                f"%({_expanded_name(predicate.parameter, i)})s" for i in range(len(value))
            )
            return f"{predicate.column} IN ({placeholders})"
        return f"{predicate.column} IN (%({predicate.parameter})s)"

    def get_sql(self) -> str:
        if self._table is None:
            raise ValueError("No table given; call from_() first")

        sql = f"SELECT {', '.join(self._columns or ['*'])} FROM {self._table}"
        if self._wheres:
            sql += " WHERE " + " AND ".join(
                self._render_predicate(predicate) for predicate in self._wheres
            )
        if self._order_by:
            sql += " ORDER BY " + ", ".join(
                f"{column} {direction}" for column, direction in self._order_by
            )
        if self._max_results is not None:
            sql += f" LIMIT {int(self._max_results)}"
        if self._first_result is not None:
            sql += f" OFFSET {int(self._first_result)}"
        return sql

    def get_parameters(self) -> Dict[str, Any]:
        """Parameters as passed to the driver, with ARRAY values expanded per element."""
        params: Dict[str, Any] = {}
        for name, (value, kind) in self._parameters.items():
            if kind is ParameterType.ARRAY:
                for i, item in enumerate(value):
                    _bind_once(params, _expanded_name(name, i), item)
            else:
                _bind_once(params, name, value)
        return params

    def execute(self) -> RowSet:
        if self._executor is None:
            raise RuntimeError("QueryBuilder is not bound to a connection")
        return self._executor.fetch(self)

    def __repr__(self) -> str:
        return f"QueryBuilder({self.get_sql()!r})" if self._table else "QueryBuilder()"


__all__ = [
    "Comparison",
    "ParameterType",
    "Predicate",
    "QueryBuilder",
    "RowSet",
    "check_identifier",
]
