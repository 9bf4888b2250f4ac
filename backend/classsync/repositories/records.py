from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, desc, inspect, select, update
from sqlalchemy.ext.asyncio import AsyncSession


def row_to_dict(record: Any) -> dict[str, Any]:
    mapper = inspect(type(record))
    return {attr.key: getattr(record, attr.key) for attr in mapper.column_attrs}


class RecordRepository:
    """Select/insert/update/delete on one table, filtered by column equality."""

    def __init__(self, db: AsyncSession, orm: type):
        self.db = db
        self.orm = orm

    def _column(self, name: str):
        column = getattr(self.orm, name, None)
        if column is None:
            raise ValueError(f"{self.orm.__tablename__} has no column {name!r}")
        return column

    def _conditions(self, where: dict[str, Any]) -> list:
        conditions = []
        for name, value in where.items():
            column = self._column(name)
            conditions.append(column.is_(None) if value is None else column == value)
        return conditions

    async def list_all(
        self,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> Sequence[Any]:
        stmt = select(self.orm)
        if order_by:
            column = self._column(order_by)
            stmt = stmt.order_by(desc(column) if descending else column)
        if limit is not None:
            stmt = stmt.limit(max(1, int(limit)))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create(self, payload: dict[str, Any]) -> Any:
        record = self.orm(**payload)
        self.db.add(record)
        return record

    async def update_where(self, values: dict[str, Any], where: dict[str, Any]) -> int:
        if not values:
            return 0
        for name in values:
            self._column(name)
        stmt = update(self.orm).where(*self._conditions(where)).values(**values)
        result = await self.db.execute(stmt)
        return int(result.rowcount or 0)

    async def delete_where(self, where: dict[str, Any]) -> int:
        if not where:
            raise ValueError("refusing to delete without a filter")
        stmt = delete(self.orm).where(*self._conditions(where))
        result = await self.db.execute(stmt)
        return int(result.rowcount or 0)
