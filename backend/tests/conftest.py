"""Shared fixtures: a throwaway local storage file, a small roster and an
in-memory stand-in for the remote store.
"""
import random
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

import pytest

from classsync.local_storage import LocalStorage
from classsync.schemas import Role, User
from classsync.services.remote_store import TABLES, RemoteStoreError
from classsync.store import ClassStore

ADMIN_PASSWORD = "admin-pass"
STAFF_PASSWORD = "staff-pass"
STUDENT_PASSWORD = "student-pass"


def make_roster() -> list[User]:
    """Plaintext passwords keep the store tests fast; bcrypt has its own tests."""
    users = [
        User(id="admin", username="admin", full_name="Super Administrator", role=Role.ADMIN, password=ADMIN_PASSWORD),
        User(id="kuri", username="kurikulum", full_name="Staff Kurikulum", role=Role.KURIKULUM, password=STAFF_PASSWORD),
        User(id="komti", username="komti", full_name="Ketua Tingkat", role=Role.KOMTI, password=STAFF_PASSWORD),
        User(id="bibilung1", username="bibilung", full_name="Master Bibilung", role=Role.MURID_BIBILUNG, password=STAFF_PASSWORD),
    ]
    for i in range(1, 5):
        users.append(
            User(
                id=f"s{i}",
                username=f"student{i}",
                full_name=f"Student Name {i}",
                role=Role.STUDENT,
                password=STUDENT_PASSWORD,
                seat_index=i - 1 if i <= 2 else None,
            )
        )
    users.append(
        User(id="s9", username="student9", full_name="Dropped Student", role=Role.STUDENT, is_active=False, password=STUDENT_PASSWORD)
    )
    return users


def _plain(value):
    if isinstance(value, Enum):
        return value.value
    return value


class FakeRemote:
    """In-memory tables with the ``RemoteStore`` call surface.

    ``fail_when(op, table, where)`` returning True makes that call raise,
    which is how tests knock out individual replication steps.
    """

    def __init__(self, tables: Optional[dict[str, list[dict]]] = None):
        self.tables: dict[str, list[dict]] = {name: [] for name in TABLES}
        for name, rows in (tables or {}).items():
            self.tables[name] = [dict(row) for row in rows]
        self.calls: list[tuple[str, str, dict]] = []
        self.fail_when: Optional[Callable[[str, str, dict], bool]] = None
        self.credentials: dict[tuple[str, str], dict] = {}

    available = True

    def _enter(self, op: str, table: str, where: Optional[dict] = None) -> None:
        where = {key: _plain(value) for key, value in (where or {}).items()}
        self.calls.append((op, table, where))
        if self.fail_when is not None and self.fail_when(op, table, where):
            raise RemoteStoreError(f"{op} on {table} rejected")

    @staticmethod
    def _matches(row: dict, where: dict) -> bool:
        return all(row.get(key) == _plain(value) for key, value in where.items())

    async def select(self, table, *, order_by=None, descending=False, limit=None):
        self._enter("select", table)
        rows = [dict(row) for row in self.tables[table]]
        if order_by:
            rows.sort(key=lambda row: row[order_by], reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    async def insert(self, table, rows):
        self._enter("insert", table)
        payloads = rows if isinstance(rows, list) else [rows]
        for payload in payloads:
            self.tables[table].append({key: _plain(value) for key, value in payload.items()})
        return len(payloads)

    async def update(self, table, values, *, where):
        self._enter("update", table, where)
        count = 0
        for row in self.tables[table]:
            if self._matches(row, where):
                row.update({key: _plain(value) for key, value in values.items()})
                count += 1
        return count

    async def delete(self, table, *, where):
        self._enter("delete", table, where)
        before = len(self.tables[table])
        self.tables[table] = [row for row in self.tables[table] if not self._matches(row, where)]
        return before - len(self.tables[table])

    async def verify_password(self, username, password):
        self._enter("verify_password", "users", {"username": username})
        return self.credentials.get((username, password))

    def ops(self, op: str) -> list[tuple[str, str, dict]]:
        return [call for call in self.calls if call[0] == op]


@pytest.fixture
def storage_path(tmp_path: Path) -> Path:
    return tmp_path / "local_storage.json"


@pytest.fixture
def storage(storage_path: Path) -> LocalStorage:
    return LocalStorage(str(storage_path))


@pytest.fixture
def local_store(storage: LocalStorage) -> ClassStore:
    return ClassStore(storage, remote_enabled=False, rng=random.Random(7), seed_users=make_roster)


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def remote_store(storage: LocalStorage, remote: FakeRemote) -> ClassStore:
    return ClassStore(storage, remote, remote_enabled=True, rng=random.Random(7), seed_users=make_roster)
