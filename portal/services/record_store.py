"""
Record Store - thin statement-per-call wrapper over an async session.

Every method issues a single statement and commits it, so the database's
statement-level atomicity is the only consistency guarantee callers rely
on. Store errors are rolled back and surfaced as OperationFailed with the
driver's message.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import OperationFailed, RecordNotFound
from portal.models.base import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


@dataclass
class Page(Generic[ModelT]):
    """One page of rows plus the total number of matching rows."""

    rows: list[ModelT] = field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 20

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return (self.total_count + self.page_size - 1) // self.page_size


def text_match(term: str, *columns) -> Any:
    """
    Case-insensitive substring match of `term` against any of `columns`.

    `%` and `_` in `term` match themselves, not any run or character.
    """
    return or_(*(column.icontains(term, autoescape=True) for column in columns))


class RecordStore:
    """Record persistence used by the workflow services."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _run(self, statement):
        try:
            result = await self.db.execute(statement)
            await self.db.commit()
            return result
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Store statement failed: {e}")
            raise OperationFailed(str(getattr(e, "orig", None) or e)) from e

    async def _read(self, statement):
        try:
            return await self.db.execute(statement)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Store query failed: {e}")
            raise OperationFailed(str(getattr(e, "orig", None) or e)) from e

    # ==================== Reads ====================

    async def find(self, model: type[ModelT], *criteria) -> ModelT | None:
        """Return the first row matching `criteria`, or None."""
        result = await self._read(
            select(model)
            .where(*criteria)
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def get(self, model: type[ModelT], record_id: str) -> ModelT:
        """Point lookup by id; raises RecordNotFound."""
        row = await self.find(model, model.id == record_id)
        if row is None:
            raise RecordNotFound(model.__name__, record_id)
        return row

    async def list(
        self,
        model: type[ModelT],
        *criteria,
        order_by: Sequence = (),
        page: int = 1,
        page_size: int | None = None,
    ) -> Page[ModelT]:
        """Filtered, sorted and optionally paginated scan."""
        query = (
            select(model)
            .where(*criteria)
            .order_by(*order_by)
            .execution_options(populate_existing=True)
        )
        if page_size:
            query = query.offset((max(page, 1) - 1) * page_size).limit(page_size)

        result = await self._read(query)
        rows = list(result.scalars().all())

        if page_size:
            total = await self.count(model, *criteria)
        else:
            total = len(rows)

        return Page(rows=rows, total_count=total, page=page, page_size=page_size or total)

    async def count(self, model: type[ModelT], *criteria) -> int:
        result = await self._read(
            select(func.count()).select_from(model).where(*criteria)
        )
        return result.scalar_one()

    async def count_by(self, model: type[ModelT], column) -> dict[Any, int]:
        """Row counts grouped by `column` over the whole table."""
        result = await self._read(
            select(column, func.count()).select_from(model).group_by(column)
        )
        return {value: n for value, n in result.all()}

    # ==================== Writes ====================

    async def insert(self, model: type[ModelT], values: dict) -> ModelT:
        row = model(**values)
        self.db.add(row)
        try:
            await self.db.commit()
            await self.db.refresh(row)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Insert into {model.__tablename__} failed: {e}")
            raise OperationFailed(str(getattr(e, "orig", None) or e)) from e
        return row

    async def update(self, model: type[ModelT], record_id: str, values: dict) -> None:
        """Partial update by id; raises RecordNotFound if nothing matched."""
        affected = await self.update_where(model, values, model.id == record_id)
        if affected == 0:
            raise RecordNotFound(model.__name__, record_id)

    async def update_where(self, model: type[ModelT], values: dict, *criteria) -> int:
        statement = (
            update(model)
            .where(*criteria)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._run(statement)
        return result.rowcount

    async def upsert(self, model: type[ModelT], values: dict, conflict_key: str) -> None:
        """Insert, or overwrite the row sharing `conflict_key`'s value."""
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            insert = postgresql.insert
        elif dialect == "sqlite":
            insert = sqlite.insert
        else:
            raise OperationFailed(f"Upsert is not supported on {dialect}")

        statement = insert(model).values(**values)
        overwrite = {
            name: statement.excluded[name]
            for name in values
            if name not in ("id", conflict_key, "created_at")
        }
        statement = statement.on_conflict_do_update(
            index_elements=[conflict_key],
            set_=overwrite,
        )
        await self._run(statement)

    async def delete(self, model: type[ModelT], record_id: str) -> None:
        """Delete by id; raises RecordNotFound if nothing matched."""
        affected = await self.delete_where(model, model.id == record_id)
        if affected == 0:
            raise RecordNotFound(model.__name__, record_id)

    async def delete_where(self, model: type[ModelT], *criteria) -> int:
        statement = delete(model).where(*criteria).execution_options(
            synchronize_session=False
        )
        result = await self._run(statement)
        return result.rowcount
