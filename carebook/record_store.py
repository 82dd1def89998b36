"""Record store gateway: row-level CRUD over the relational store.

Services never touch ORM sessions directly; they read and write plain
row dictionaries through :class:`RecordStoreGateway`, which is built per
request from the injected database session.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from sqlalchemy import Table, delete as sql_delete, insert as sql_insert, select as sql_select, update as sql_update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from carebook.database import Base
from carebook.exceptions import UpstreamStoreError
import carebook.models  # noqa: F401  (registers tables on Base.metadata)

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


@dataclass(frozen=True)
class Filter:
    """A single predicate on a named column. Filters are ANDed together."""

    column: str
    op: str
    value: Any = None

    def to_clause(self, table: Table):
        if self.column not in table.c:
            raise ValueError(f"Unknown column '{self.column}' on table '{table.name}'")
        column = table.c[self.column]

        if self.op == "eq":
            return column == self.value
        if self.op == "neq":
            return column != self.value
        if self.op == "gte":
            return column >= self.value
        if self.op == "lte":
            return column <= self.value
        if self.op == "in":
            return column.in_(list(self.value))
        if self.op == "is_null":
            return column.is_(None) if self.value else column.is_not(None)
        raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass(frozen=True)
class Ordering:
    """Sort key for select results."""

    column: str
    descending: bool = False


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def neq(column: str, value: Any) -> Filter:
    return Filter(column, "neq", value)


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


def lte(column: str, value: Any) -> Filter:
    return Filter(column, "lte", value)


def in_(column: str, values: Iterable[Any]) -> Filter:
    return Filter(column, "in", tuple(values))


def is_null(column: str, null: bool = True) -> Filter:
    return Filter(column, "is_null", null)


def asc(column: str) -> Ordering:
    return Ordering(column)


def desc(column: str) -> Ordering:
    return Ordering(column, descending=True)


class RecordStoreGateway:
    """Typed CRUD interface over the tables registered on ``Base.metadata``.

    Each write commits on its own; a failed call is rolled back and
    reported once as :class:`UpstreamStoreError`. Nothing is retried.
    """

    def __init__(self, db: Session):
        """
        Initialize the gateway.

        Args:
            db: Database session owned by the current request
        """
        self.db = db

    def _table(self, name: str) -> Table:
        table = Base.metadata.tables.get(name)
        if table is None:
            raise ValueError(f"Unknown table: {name}")
        return table

    @staticmethod
    def _primary_key(table: Table):
        return list(table.primary_key.columns)[0]

    @contextmanager
    def _store_call(self, operation: str, table: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError as e:
            self.db.rollback()
            message = str(e.orig) if e.orig is not None else str(e)
            logger.error(f"Store rejected {operation} on {table}: {message}")
            raise UpstreamStoreError(operation, table, message, constraint_violation=True) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Store {operation} on {table} failed: {type(e).__name__}: {e}")
            raise UpstreamStoreError(operation, table, str(e)) from e

    def _build_select(
        self,
        table: Table,
        filters: Sequence[Filter] = (),
        order_by: Sequence[Ordering] = (),
        limit: Optional[int] = None
    ):
        stmt = sql_select(table)
        for f in filters:
            stmt = stmt.where(f.to_clause(table))
        for ordering in order_by:
            column = table.c[ordering.column]
            stmt = stmt.order_by(column.desc() if ordering.descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return stmt

    def select(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        order_by: Sequence[Ordering] = (),
        limit: Optional[int] = None
    ) -> List[Row]:
        """
        Select rows matching all filters.

        Args:
            table: Table name
            filters: Predicates combined with AND
            order_by: Sort keys, applied in order
            limit: Maximum number of rows to return

        Returns:
            List of rows as dictionaries
        """
        t = self._table(table)
        stmt = self._build_select(t, filters, order_by, limit)
        with self._store_call("select", table):
            result = self.db.execute(stmt).mappings().all()
        return [dict(row) for row in result]

    def select_one(self, table: str, filters: Sequence[Filter] = ()) -> Optional[Row]:
        """Select the first matching row, or None."""
        rows = self.select(table, filters, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, row: Row) -> Row:
        """
        Insert a single row.

        Returns:
            The stored row, including defaults and generated keys
        """
        t = self._table(table)
        pk = self._primary_key(t)
        with self._store_call("insert", table):
            result = self.db.execute(sql_insert(t).values(**row))
            key = result.inserted_primary_key[0]
            self.db.commit()
            stored = self.db.execute(sql_select(t).where(pk == key)).mappings().first()
        return dict(stored) if stored is not None else dict(row)

    def update(self, table: str, filters: Sequence[Filter], patch: Row) -> List[Row]:
        """
        Apply a patch to every row matching the filters.

        Returns:
            The updated rows (empty if nothing matched)
        """
        t = self._table(table)
        pk = self._primary_key(t)
        stmt = sql_select(pk)
        for f in filters:
            stmt = stmt.where(f.to_clause(t))

        with self._store_call("update", table):
            keys = list(self.db.execute(stmt).scalars().all())
            if not keys:
                return []
            self.db.execute(sql_update(t).where(pk.in_(keys)).values(**patch))
            self.db.commit()
            result = self.db.execute(sql_select(t).where(pk.in_(keys)).order_by(pk.asc())).mappings().all()
        return [dict(row) for row in result]

    def delete(self, table: str, filters: Sequence[Filter]) -> List[Row]:
        """
        Delete every row matching the filters.

        Returns:
            The deleted rows (empty if nothing matched)
        """
        t = self._table(table)
        pk = self._primary_key(t)
        stmt = self._build_select(t, filters)

        with self._store_call("delete", table):
            rows = [dict(row) for row in self.db.execute(stmt).mappings().all()]
            if not rows:
                return []
            self.db.execute(sql_delete(t).where(pk.in_([row[pk.name] for row in rows])))
            self.db.commit()
        return rows
