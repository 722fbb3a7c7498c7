"""Table-oriented client for the relational store.

Every service talks to the database through :class:`QueryClient` using the
same verbs (``select``, ``insert``, ``update``, ``upsert``, ``delete``)
against table names, with rows passed around as plain dictionaries. Each call
commits on its own; there is no transaction spanning two calls. ``update_each``
and ``replace`` cover the writes that must land together or not at all.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, Optional

from fastapi import Depends
from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from . import models  # noqa: F401  # registers every table on Base.metadata
from .db import Base, get_session

logger = logging.getLogger(__name__)

Row = dict[str, Any]
Filters = Mapping[str, Any]

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class StoreError(Exception):
    """Raised when a store call fails; ``original`` keeps the driver error."""

    def __init__(
        self,
        table: str,
        operation: str,
        detail: str,
        *,
        original: SQLAlchemyError | None = None,
    ) -> None:
        super().__init__(f"{operation} on {table} failed: {detail}")
        self.table = table
        self.operation = operation
        self.detail = detail
        self.original = original


class StaleRowsError(StoreError):
    """A guarded write matched no row; ``misses`` are the indexes of those writes."""

    def __init__(self, table: str, misses: list[int]) -> None:
        super().__init__(table, "update", f"{len(misses)} guarded updates matched no row")
        self.misses = misses


class QueryClient:
    """Generic select/insert/update/upsert/delete access to store tables.

    Statements issued through one client are serialized on its session, so
    callers are free to fan out with ``asyncio.gather``. Rows passed to one
    ``insert`` or ``upsert`` call must all carry the same keys.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # statement helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _table(name: str, operation: str) -> Table:
        table = Base.metadata.tables.get(name)
        if table is None:
            raise StoreError(name, operation, "unknown table")
        return table

    @staticmethod
    def _column(table: Table, name: str, operation: str):
        column = table.c.get(name)
        if column is None:
            raise StoreError(table.name, operation, f"unknown column {name!r}")
        return column

    def _conditions(self, table: Table, filters: Filters | None, operation: str) -> list:
        conditions = []
        for key, value in (filters or {}).items():
            column = self._column(table, key, operation)
            if isinstance(value, (list, tuple, set, frozenset)):
                conditions.append(column.in_(list(value)))
            elif value is None:
                conditions.append(column.is_(None))
            else:
                conditions.append(column == value)
        return conditions

    def _ordering(self, table: Table, order: Sequence[str] | None, operation: str) -> list:
        clauses = []
        for name in order or ():
            descending = name.startswith("-")
            column = self._column(table, name.lstrip("-"), operation)
            clauses.append(column.desc() if descending else column.asc())
        return clauses

    def _prepare_rows(
        self, table: Table, rows: Sequence[Mapping[str, Any]], operation: str
    ) -> list[Row]:
        prepared: list[Row] = []
        for row in rows:
            values = dict(row)
            for key in values:
                self._column(table, key, operation)
            if "id" in table.c and not values.get("id"):
                values["id"] = uuid.uuid4().hex
            prepared.append(values)
        return prepared

    async def _execute(
        self,
        table: str,
        operation: str,
        work: Callable[[AsyncSession], Awaitable[Any]],
    ) -> Any:
        async with self._lock:
            try:
                result = await work(self._session)
                await self._session.commit()
            except StoreError:
                await self._session.rollback()
                raise
            except SQLAlchemyError as exc:
                await self._session.rollback()
                logger.warning("%s on %s failed: %s", operation, table, exc)
                raise StoreError(table, operation, str(exc), original=exc) from exc
            return result

    @staticmethod
    async def _fetch(session: AsyncSession, table: Table, column, keys: Sequence[Any]) -> list[Row]:
        """Re-read rows by ``column``, in the order of ``keys``."""
        if not keys:
            return []
        result = await session.execute(select(table).where(column.in_(list(keys))))
        found = {row[column.name]: dict(row) for row in result.mappings().all()}
        return [found[key] for key in dict.fromkeys(keys) if key in found]

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    async def select(
        self,
        table: str,
        filters: Filters | None = None,
        *,
        order: Sequence[str] | None = None,
        columns: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> list[Row]:
        target = self._table(table, "select")
        conditions = self._conditions(target, filters, "select")
        ordering = self._ordering(target, order, "select")
        if columns:
            stmt = select(*[self._column(target, name, "select") for name in columns])
        else:
            stmt = select(target)
        if conditions:
            stmt = stmt.where(*conditions)
        if ordering:
            stmt = stmt.order_by(*ordering)
        if limit is not None:
            stmt = stmt.limit(limit)

        async def work(session: AsyncSession) -> list[Row]:
            result = await session.execute(stmt)
            return [dict(row) for row in result.mappings().all()]

        return await self._execute(table, "select", work)

    async def first(
        self,
        table: str,
        filters: Filters | None = None,
        *,
        order: Sequence[str] | None = None,
        columns: Sequence[str] | None = None,
    ) -> Optional[Row]:
        rows = await self.select(table, filters, order=order, columns=columns, limit=1)
        return rows[0] if rows else None

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        target = self._table(table, "insert")
        prepared = self._prepare_rows(target, rows, "insert")
        if not prepared:
            return []

        async def work(session: AsyncSession) -> list[Row]:
            await session.execute(insert(target), prepared)
            return await self._fetch(session, target, target.c.id, [r["id"] for r in prepared])

        return await self._execute(table, "insert", work)

    async def update(
        self, table: str, patch: Mapping[str, Any], filters: Filters
    ) -> list[Row]:
        target = self._table(table, "update")
        if not filters:
            raise StoreError(table, "update", "refusing to update without filters")
        values = {self._column(target, key, "update").name: value for key, value in patch.items()}
        conditions = self._conditions(target, filters, "update")

        async def work(session: AsyncSession) -> list[Row]:
            ids = (
                await session.execute(select(target.c.id).where(*conditions))
            ).scalars().all()
            if not ids or not values:
                return await self._fetch(session, target, target.c.id, ids)
            await session.execute(
                update(target).where(target.c.id.in_(ids)).values(**values)
            )
            return await self._fetch(session, target, target.c.id, ids)

        return await self._execute(table, "update", work)

    async def update_each(
        self,
        table: str,
        changes: Sequence[tuple[Mapping[str, Any], Filters]],
    ) -> list[Row]:
        """Apply several ``(patch, filters)`` updates in one transaction.

        The filters are part of each UPDATE statement, so they can act as a
        guard (e.g. ``{"id": ..., "version": 3}``). If any change matches no
        row, nothing is written and :class:`StaleRowsError` is raised.
        """

        target = self._table(table, "update")
        statements = []
        for patch, filters in changes:
            if not filters or not patch:
                raise StoreError(table, "update", "each change needs a patch and filters")
            values = {
                self._column(target, key, "update").name: value for key, value in patch.items()
            }
            conditions = self._conditions(target, filters, "update")
            statements.append(
                update(target).where(*conditions).values(**values).returning(target.c.id)
            )
        if not statements:
            return []

        async def work(session: AsyncSession) -> list[Row]:
            ids: list[Any] = []
            misses: list[int] = []
            for index, stmt in enumerate(statements):
                matched = (await session.execute(stmt)).scalars().all()
                if not matched:
                    misses.append(index)
                ids.extend(matched)
            if misses:
                raise StaleRowsError(table, misses)
            return await self._fetch(session, target, target.c.id, ids)

        return await self._execute(table, "update", work)

    async def replace(
        self,
        table: str,
        filters: Filters,
        rows: Sequence[Mapping[str, Any]],
    ) -> list[Row]:
        """Delete the rows matching ``filters`` and insert ``rows``, atomically."""

        target = self._table(table, "replace")
        if not filters:
            raise StoreError(table, "replace", "refusing to replace without filters")
        conditions = self._conditions(target, filters, "replace")
        prepared = self._prepare_rows(target, rows, "replace")

        async def work(session: AsyncSession) -> list[Row]:
            await session.execute(delete(target).where(*conditions))
            if not prepared:
                return []
            await session.execute(insert(target), prepared)
            return await self._fetch(session, target, target.c.id, [r["id"] for r in prepared])

        return await self._execute(table, "replace", work)

    async def upsert(
        self,
        table: str,
        rows: Sequence[Mapping[str, Any]],
        conflict_key: str = "id",
    ) -> list[Row]:
        target = self._table(table, "upsert")
        conflict_column = self._column(target, conflict_key, "upsert")
        prepared = self._prepare_rows(target, rows, "upsert")
        if not prepared:
            return []

        async def work(session: AsyncSession) -> list[Row]:
            dialect = session.get_bind().dialect.name
            dialect_insert = _DIALECT_INSERTS.get(dialect)
            if dialect_insert is None:
                raise StoreError(table, "upsert", f"unsupported dialect {dialect!r}")
            stmt = dialect_insert(target).values(prepared)
            replace = {
                name: stmt.excluded[name]
                for name in prepared[0]
                if name not in {conflict_key, "id"}
            }
            if replace:
                stmt = stmt.on_conflict_do_update(
                    index_elements=[conflict_column.name], set_=replace
                )
            else:
                stmt = stmt.on_conflict_do_nothing(index_elements=[conflict_column.name])
            await session.execute(stmt)
            return await self._fetch(
                session, target, conflict_column, [r[conflict_key] for r in prepared]
            )

        return await self._execute(table, "upsert", work)

    async def delete(self, table: str, filters: Filters) -> None:
        target = self._table(table, "delete")
        if not filters:
            raise StoreError(table, "delete", "refusing to delete without filters")
        conditions = self._conditions(target, filters, "delete")

        async def work(session: AsyncSession) -> None:
            await session.execute(delete(target).where(*conditions))

        await self._execute(table, "delete", work)


async def select_or_empty(
    client: QueryClient,
    table: str,
    filters: Filters | None = None,
    *,
    order: Sequence[str] | None = None,
    columns: Sequence[str] | None = None,
) -> list[Row]:
    """``client.select`` that logs a failed read and returns no rows."""

    try:
        return await client.select(table, filters, order=order, columns=columns)
    except StoreError as exc:
        logger.warning("Falling back to no %s rows: %s", table, exc)
        return []


async def get_store(session: AsyncSession = Depends(get_session)) -> QueryClient:
    """FastAPI dependency returning a client bound to the request session."""

    return QueryClient(session)
