"""
Active Record base entity.

A `Record` subclass is a pydantic model whose declared fields are the
columns of one table. Instances know how to insert, update and delete
themselves; the class knows how to find rows and materialize them back into
instances:

    class BlogPost(Record):
        id: Optional[int] = None
        slug: Optional[str] = None
        title: Optional[str] = None

    Record.connection(conn)            # once, at startup
    post = BlogPost({"slug": "hello"})
    post.save()                        # INSERT INTO blog_post ..., sets post.id
    BlogPost.find(post.id)
    BlogPost.find_by({"id": [1, 2, 3]}, {"id": "DESC"}, limit=2)

The database is reached only through the `Connection` protocol; see
`simple_record.infrastructure`.
"""

from __future__ import annotations

import numbers
from typing import (
    Any,
    ClassVar,
    Dict,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from pydantic import BaseModel, ConfigDict

from simple_record.errors import (
    AmbiguousResultError,
    ConnectionNotConfiguredError,
    ErrorKind,
    IllegalDeleteError,
)
from simple_record.hooks import LifecycleHooks
from simple_record.infrastructure.protocols import Connection
from simple_record.infrastructure.query_builder import Comparison, ParameterType, QueryBuilder
from simple_record.results import Outcome
from simple_record.utils.inflector import short_name, tableize
from simple_record.utils.logging import get_logger

log = get_logger(__name__)

R = TypeVar("R", bound="Record")

_LIST_TYPES = (list, tuple, set, frozenset)


def has_value(value: Any) -> bool:
    """
    Whether a column value is worth persisting.

    Numbers always count, zero included. Strings count unless empty
    (so ``"0"`` is kept). Everything else counts when truthy, which drops
    None, False and empty containers.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, numbers.Number):
        return True
    if isinstance(value, str):
        return value != ""
    return bool(value)


class Record(LifecycleHooks, BaseModel):
    """
    Base class for one row of a table.

    Class variables
    ---------------
    TABLE_NAME : str | None
        Explicit table name. Defaults to the snake_cased class name.
    COLUMNS : tuple[str, ...] | None
        Whitelist of persisted columns. Defaults to the declared fields.
    """

    TABLE_NAME: ClassVar[Optional[str]] = None
    COLUMNS: ClassVar[Optional[Tuple[str, ...]]] = None

    __connection__: ClassVar[Optional[Connection]] = None
    __columns__: ClassVar[Tuple[str, ...]] = ()

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def __init__(self, data: Optional[Mapping[str, Any]] = None, /, **values: Any) -> None:
        super().__init__(**{**dict(data or {}), **values})

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        if cls.COLUMNS is not None:
            cls.__columns__ = tuple(cls.COLUMNS)
        else:
            cls.__columns__ = tuple(cls.model_fields)

    # -- connection --------------------------------------------------------

    @classmethod
    def connection(cls, connection: Optional[Connection]) -> None:
        """Bind `connection` to this class and every subclass without its own binding."""
        cls.__connection__ = connection

    @classmethod
    def get_connection(cls) -> Connection:
        if cls.__connection__ is None:
            raise ConnectionNotConfiguredError(cls.__name__)
        return cls.__connection__

    # -- mapping -----------------------------------------------------------

    @classmethod
    def table_name(cls, record_type: Union[type, str, None] = None) -> str:
        """
        Resolve the table name for this class, or for `record_type` when given.

        A class argument honours its ``TABLE_NAME`` override; a string
        argument is treated as a (possibly dotted) class name and tableized.
        """
        target = cls if record_type is None else record_type
        if isinstance(target, str):
            return tableize(short_name(target))

        override = getattr(target, "TABLE_NAME", None)
        if override:
            return override
        return tableize(target.__name__)

    @classmethod
    def get_columns(cls) -> Tuple[str, ...]:
        """Columns written on insert/update. Override to whitelist."""
        return cls.__columns__

    def set_from_data(self, data: Mapping[str, Any]) -> None:
        for key, value in data.items():
            setattr(self, key, value)

    def values_for_persistence(self) -> Dict[str, Any]:
        """Column -> value mapping for insert/update; never contains ``id``."""
        values: Dict[str, Any] = {}
        for column in self.get_columns():
            if column == "id":
                continue
            value = getattr(self, column, None)
            if has_value(value):
                values[column] = value
        return values

    def is_new(self) -> bool:
        return not getattr(self, "id", None)

    # -- mutations ---------------------------------------------------------

    def _abort(self, hook: str) -> Outcome[bool]:
        log.debug(
            f"[HOOK ABORT] {type(self).__name__}.{hook}",
            extra={"table": self.table_name(), "hook": hook},
        )
        return Outcome.failure(ErrorKind.HOOK_ABORT, hook)

    def save(self) -> Outcome[bool]:
        """
        Insert the row when it has no id yet, update it otherwise.

        Returns a falsy outcome tagged HOOK_ABORT when a hook refuses. Hooks
        running after the write cannot undo it.
        """
        if not self.before_save():
            return self._abort("before_save")

        conn = self.get_connection()
        table = self.table_name()

        if self.is_new():
            if not self.before_insert():
                return self._abort("before_insert")

            values = self.values_for_persistence()
            written = bool(conn.insert(table, values))
            if "id" in self.get_columns():
                self.id = conn.last_insert_id()
            log.debug(
                f"[INSERT] {table}",
                extra={"table": table, "operation": "insert", "id": getattr(self, "id", None)},
            )

            if not self.after_insert():
                return self._abort("after_insert")
        else:
            if not self.before_update():
                return self._abort("before_update")

            values = self.values_for_persistence()
            written = bool(conn.update(table, values, {"id": self.id}))
            log.debug(
                f"[UPDATE] {table}",
                extra={"table": table, "operation": "update", "id": self.id},
            )

            if not self.after_update():
                return self._abort("after_update")

        if not self.after_save():
            return self._abort("after_save")

        return Outcome.success(written)

    def delete(self) -> Outcome[bool]:
        """
        Delete the row identified by ``id``.

        If `after_delete` refuses, the record is saved again and the outcome
        is a HOOK_ABORT failure.

        Raises
        ------
        IllegalDeleteError
            When the record has never been given an id.
        """
        if not self.before_delete():
            return self._abort("before_delete")

        table = self.table_name()
        if getattr(self, "id", None) is None:
            raise IllegalDeleteError(table)

        deleted = bool(self.get_connection().delete(table, {"id": self.id}))
        log.debug(
            f"[DELETE] {table}",
            extra={"table": table, "operation": "delete", "id": self.id},
        )

        if not self.after_delete():
            log.warning(
                f"[DELETE] after_delete refused on {table}; saving record again",
                extra={"table": table, "operation": "delete", "id": self.id},
            )
            self.save()
            return self._abort("after_delete")

        return Outcome.success(deleted)

    # -- queries -----------------------------------------------------------

    @classmethod
    def get_query_builder(cls) -> QueryBuilder:
        """A ``SELECT * FROM <table>`` builder callers may refine further."""
        return cls.get_connection().create_query_builder().select("*").from_(cls.table_name())

    @staticmethod
    def _apply_criteria(qb: QueryBuilder, criteria: Mapping[str, Any]) -> QueryBuilder:
        for column, value in criteria.items():
            if isinstance(value, _LIST_TYPES):
                qb.and_where(Comparison.in_(column))
                qb.set_parameter(column, list(value), ParameterType.ARRAY)
            else:
                qb.and_where(Comparison.eq(column))
                qb.set_parameter(column, value)
        return qb

    @classmethod
    def from_row(cls: Type[R], row: Mapping[str, Any]) -> R:
        """Materialize a fetched row and run `after_fetch` on it."""
        record = cls(row)
        record.after_fetch()
        return record

    @classmethod
    def find_by_query_builder(cls: Type[R], qb: QueryBuilder) -> List[R]:
        return qb.execute().fetch_all_as(cls.from_row)

    @classmethod
    def find_by(
        cls: Type[R],
        criteria: Mapping[str, Any],
        order_by: Optional[Mapping[str, str]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[R]:
        """
        Rows matching every criterion, as instances of this class.

        A list (or tuple/set) value matches any of its members; any other
        value matches by equality. `order_by` is applied in insertion order.
        A falsy `limit` or `offset` is ignored, so ``limit=0`` means no limit.
        """
        qb = cls._apply_criteria(cls.get_query_builder(), criteria)
        for column, direction in (order_by or {}).items():
            qb.add_order_by(column, direction)
        if limit:
            qb.set_max_results(limit)
        if offset:
            qb.set_first_result(offset)
        return cls.find_by_query_builder(qb)

    @classmethod
    def find_one_by(cls: Type[R], criteria: Mapping[str, Any]) -> Optional[R]:
        """
        The single row matching `criteria`, or None when nothing matches.

        Raises
        ------
        AmbiguousResultError
            When more than one row matches.
        """
        items = cls.find_by(criteria, limit=2)
        if not items:
            return None
        if len(items) > 1:
            log.error(
                f"[FIND ONE] more than one row in {cls.table_name()}",
                extra={"table": cls.table_name(), "criteria": dict(criteria)},
            )
            raise AmbiguousResultError(cls.table_name(), dict(criteria))
        return items[0]

    @classmethod
    def find(cls: Type[R], id: Any) -> Optional[R]:
        return cls.find_one_by({"id": id})

    @classmethod
    def find_all(cls: Type[R]) -> List[R]:
        return cls.find_by({})

    @classmethod
    def count_by(cls, criteria: Mapping[str, Any]) -> int:
        """Number of rows matching `criteria` (same rules as `find_by`)."""
        qb = cls.get_connection().create_query_builder().select("COUNT(*)").from_(cls.table_name())
        cls._apply_criteria(qb, criteria)
        return int(qb.execute().fetch_column(0) or 0)


__all__ = ["Record", "has_value"]
