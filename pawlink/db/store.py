"""Record store gateway — generic insert/select/update/delete over named tables.

Services address records by table name and plain dict filters so that they
never depend on the ORM session or query language. Every failure is
translated into a ``StoreError`` carrying a ``StoreErrorKind``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Mapping

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pawlink.errors import StoreError, StoreErrorKind
from pawlink.models import Base

logger = logging.getLogger(__name__)

Record = dict[str, Any]
Filters = Mapping[str, Any]


class RecordStore:
    """Async gateway over the rescue DB, one short-lived session per call."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: float | None = None,
    ):
        self._session_factory = session_factory
        self._timeout = timeout

    # ── helpers ───────────────────────────────────────────

    def _table(self, entity: str) -> Table:
        table = Base.metadata.tables.get(entity)
        if table is None:
            raise StoreError(f"Unknown entity '{entity}'", kind=StoreErrorKind.NOT_FOUND)
        return table

    def _where(self, table: Table, filters: Filters | None) -> list:
        clauses = []
        for column_name, value in (filters or {}).items():
            if column_name not in table.c:
                raise StoreError(
                    f"Unknown column '{column_name}' on '{table.name}'",
                    kind=StoreErrorKind.CONSTRAINT_VIOLATION,
                )
            column = table.c[column_name]
            if value is None:
                clauses.append(column.is_(None))
            elif isinstance(value, (list, tuple, set, frozenset)):
                clauses.append(column.in_(list(value)))
            else:
                clauses.append(column == value)
        return clauses

    def _check_fields(self, table: Table, fields: Mapping[str, Any]) -> None:
        unknown = [k for k in fields if k not in table.c]
        if unknown:
            raise StoreError(
                f"Unknown column(s) {', '.join(sorted(unknown))} on '{table.name}'",
                kind=StoreErrorKind.CONSTRAINT_VIOLATION,
            )

    async def _run(self, op: str, entity: str, work: Callable[[AsyncSession], Awaitable[list[Record]]]) -> list[Record]:
        async def _in_session() -> list[Record]:
            async with self._session_factory() as session:
                return await work(session)

        try:
            if self._timeout:
                return await asyncio.wait_for(_in_session(), timeout=self._timeout)
            return await _in_session()
        except StoreError:
            raise
        except asyncio.TimeoutError as exc:
            logger.warning("Store %s on %s timed out after %ss", op, entity, self._timeout)
            raise StoreError(f"{op} on {entity} timed out", kind=StoreErrorKind.TIMEOUT) from exc
        except IntegrityError as exc:
            logger.warning("Store %s on %s violated a constraint: %s", op, entity, exc.orig)
            raise StoreError(
                f"{op} on {entity} violated a constraint", kind=StoreErrorKind.CONSTRAINT_VIOLATION
            ) from exc
        except SQLAlchemyError as exc:
            logger.exception("Store %s on %s failed", op, entity)
            raise StoreError(
                f"{op} on {entity} failed", kind=StoreErrorKind.CONNECTION_FAILURE
            ) from exc

    # ── operations ────────────────────────────────────────

    async def insert(self, entity: str, records: list[Mapping[str, Any]]) -> list[Record]:
        """Insert records and return them with generated columns filled in."""
        table = self._table(entity)
        for rec in records:
            self._check_fields(table, rec)
        if not records:
            return []

        async def work(session: AsyncSession) -> list[Record]:
            created = []
            for rec in records:
                result = await session.execute(insert(table).values(**rec).returning(*table.c))
                created.append(dict(result.mappings().one()))
            await session.commit()
            return created

        return await self._run("insert", entity, work)

    async def select(
        self,
        entity: str,
        filters: Filters | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Record]:
        table = self._table(entity)
        stmt = select(table).where(*self._where(table, filters))
        if order_by:
            if order_by not in table.c:
                raise StoreError(
                    f"Unknown column '{order_by}' on '{entity}'",
                    kind=StoreErrorKind.CONSTRAINT_VIOLATION,
                )
            col = table.c[order_by]
            stmt = stmt.order_by(col.desc() if descending else col.asc())
        if limit is not None:
            stmt = stmt.limit(limit)

        async def work(session: AsyncSession) -> list[Record]:
            result = await session.execute(stmt)
            return [dict(row) for row in result.mappings().all()]

        return await self._run("select", entity, work)

    async def update(self, entity: str, id_filter: Filters, fields: Mapping[str, Any]) -> list[Record]:
        """Partial update. Returns the updated records (empty if nothing matched)."""
        table = self._table(entity)
        self._check_fields(table, fields)
        clauses = self._where(table, id_filter)
        if not clauses:
            raise StoreError("update requires a filter", kind=StoreErrorKind.CONSTRAINT_VIOLATION)

        async def work(session: AsyncSession) -> list[Record]:
            result = await session.execute(
                update(table).where(*clauses).values(**fields).returning(*table.c)
            )
            rows = [dict(row) for row in result.mappings().all()]
            await session.commit()
            return rows

        return await self._run("update", entity, work)

    async def delete(self, entity: str, id_filter: Filters) -> list[Record]:
        """Delete matching records and return them."""
        table = self._table(entity)
        clauses = self._where(table, id_filter)
        if not clauses:
            raise StoreError("delete requires a filter", kind=StoreErrorKind.CONSTRAINT_VIOLATION)

        async def work(session: AsyncSession) -> list[Record]:
            result = await session.execute(delete(table).where(*clauses).returning(*table.c))
            rows = [dict(row) for row in result.mappings().all()]
            await session.commit()
            return rows

        return await self._run("delete", entity, work)
