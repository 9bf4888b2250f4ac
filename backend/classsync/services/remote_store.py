from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db.models import (
    ActivityLogORM,
    AnnouncementORM,
    DocumentMaterialORM,
    ScheduleItemORM,
    SubjectORM,
    TaskORM,
    TutorEventORM,
    UserORM,
    VideoMaterialORM,
)
from ..repositories import RecordRepository, UserRepository, row_to_dict

logger = logging.getLogger(__name__)

TABLES: dict[str, type] = {
    "users": UserORM,
    "subjects": SubjectORM,
    "announcements": AnnouncementORM,
    "tasks": TaskORM,
    "schedule": ScheduleItemORM,
    "videos": VideoMaterialORM,
    "materials": DocumentMaterialORM,
    "tutor_events": TutorEventORM,
    "activity_logs": ActivityLogORM,
}


class RemoteStoreError(RuntimeError):
    """A remote read or write did not go through."""


class RemoteUnavailableError(RemoteStoreError):
    """No engine: the remote store is unconfigured or was unreachable at startup."""


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def _plain_dict(payload: dict[str, Any] | None) -> dict[str, Any]:
    return {key: _plain(value) for key, value in (payload or {}).items()}


class RemoteStore:
    """Generic table access over the async SQLAlchemy session factory.

    Each call runs in its own session and commits on success; there is no
    transaction spanning calls.
    """

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]]):
        self._session_maker = session_maker

    @property
    def available(self) -> bool:
        return self._session_maker is not None

    def _open(self) -> AsyncSession:
        if self._session_maker is None:
            raise RemoteUnavailableError("remote store is not connected")
        return self._session_maker()

    @staticmethod
    def _orm(table: str) -> type:
        orm = TABLES.get(table)
        if orm is None:
            raise RemoteStoreError(f"unknown table {table!r}")
        return orm

    async def select(
        self,
        table: str,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        orm = self._orm(table)
        async with self._open() as db:
            rows = await RecordRepository(db, orm).list_all(order_by=order_by, descending=descending, limit=limit)
            return [row_to_dict(row) for row in rows]

    async def insert(self, table: str, rows: dict[str, Any] | list[dict[str, Any]]) -> int:
        orm = self._orm(table)
        payloads = rows if isinstance(rows, list) else [rows]
        async with self._open() as db:
            repo = RecordRepository(db, orm)
            for payload in payloads:
                await repo.create(_plain_dict(payload))
            await db.commit()
        return len(payloads)

    async def update(self, table: str, values: dict[str, Any], *, where: dict[str, Any]) -> int:
        orm = self._orm(table)
        async with self._open() as db:
            count = await RecordRepository(db, orm).update_where(_plain_dict(values), _plain_dict(where))
            await db.commit()
        return count

    async def delete(self, table: str, *, where: dict[str, Any]) -> int:
        orm = self._orm(table)
        async with self._open() as db:
            count = await RecordRepository(db, orm).delete_where(_plain_dict(where))
            await db.commit()
        return count

    async def verify_password(self, username: str, password: str) -> dict[str, Any] | None:
        async with self._open() as db:
            record = await UserRepository(db).verify_password(username, password)
            return row_to_dict(record) if record is not None else None


Operation = Literal["insert", "update", "delete"]


@dataclass(frozen=True)
class ReplicationStep:
    table: str
    op: Operation
    values: Any = None
    where: dict[str, Any] = field(default_factory=dict)


@dataclass
class ReplicationResult:
    applied: list[ReplicationStep] = field(default_factory=list)
    failed: Optional[ReplicationStep] = None
    skipped: list[ReplicationStep] = field(default_factory=list)
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.failed is None


def insert_step(table: str, row: dict[str, Any] | list[dict[str, Any]]) -> ReplicationStep:
    return ReplicationStep(table=table, op="insert", values=row)


def update_step(table: str, values: dict[str, Any], **where: Any) -> ReplicationStep:
    return ReplicationStep(table=table, op="update", values=values, where=where)


def delete_step(table: str, **where: Any) -> ReplicationStep:
    return ReplicationStep(table=table, op="delete", where=where)


async def _run_step(remote: RemoteStore, step: ReplicationStep) -> None:
    if step.op == "insert":
        await remote.insert(step.table, step.values)
    elif step.op == "update":
        await remote.update(step.table, step.values, where=step.where)
    elif step.op == "delete":
        await remote.delete(step.table, where=step.where)
    else:
        raise RemoteStoreError(f"unknown operation {step.op!r}")


async def replicate(remote: RemoteStore, steps: list[ReplicationStep]) -> ReplicationResult:
    """Run steps in order, stopping at the first failure.

    Failures are logged, never raised: the caller's local state already
    reflects the change and is not rolled back.
    """
    result = ReplicationResult()
    for position, step in enumerate(steps):
        try:
            await _run_step(remote, step)
        except Exception as exc:
            logger.warning("Remote %s on %s failed: %s", step.op, step.table, exc)
            result.failed = step
            result.error = str(exc)
            result.skipped = list(steps[position + 1 :])
            return result
        result.applied.append(step)
    return result
