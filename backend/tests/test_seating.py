"""Tests for seat assignment, the 5x7 grid and randomisation."""
import random
from collections import Counter

import pytest

from classsync.config import SEAT_COUNT
from classsync.schemas import Role, User
from classsync.services import seating_service
from classsync.services.seating_service import SeatingError
from classsync.store import ClassStore

from conftest import STAFF_PASSWORD, FakeRemote


def _occupied(users: list[User]) -> Counter:
    return Counter(u.seat_index for u in users if u.seat_index is not None)


def test_assign_displaces_previous_occupant() -> None:
    users = [
        User(id="s1", username="a", seat_index=0),
        User(id="s2", username="b", seat_index=1),
    ]
    updated, displaced = seating_service.assign_seat(users, "s2", 0)
    by_id = {u.id: u for u in updated}
    assert displaced.id == "s1"
    assert by_id["s1"].seat_index is None
    assert by_id["s2"].seat_index == 0
    assert seating_service.find_occupant(updated, 1) is None
    assert max(_occupied(updated).values()) == 1


def test_reassigning_same_seat_has_no_displacement() -> None:
    users = [User(id="s1", username="a", seat_index=4)]
    updated, displaced = seating_service.assign_seat(users, "s1", 4)
    assert displaced is None
    assert updated[0].seat_index == 4


@pytest.mark.parametrize("seat", [-1, SEAT_COUNT, 99])
def test_out_of_range_seat_rejected(seat: int) -> None:
    users = [User(id="s1", username="a")]
    with pytest.raises(SeatingError):
        seating_service.assign_seat(users, "s1", seat)


def test_non_student_cannot_be_seated() -> None:
    users = [User(id="kuri", username="k", role=Role.KURIKULUM)]
    with pytest.raises(SeatingError, match="only students"):
        seating_service.assign_seat(users, "kuri", 3)


def test_unknown_user_rejected() -> None:
    with pytest.raises(SeatingError, match="unknown user"):
        seating_service.assign_seat([], "ghost", 3)


def test_shuffle_seats_first_35_and_leaves_rest_unseated() -> None:
    users = [User(id=f"s{i}", username=f"u{i}") for i in range(40)]
    users.append(User(id="admin", username="admin", role=Role.ADMIN, seat_index=None))
    seating = seating_service.shuffle_seating(users, random.Random(3))
    assert "admin" not in seating
    seats = [seat for seat in seating.values() if seat is not None]
    assert sorted(seats) == list(range(SEAT_COUNT))
    assert sum(1 for seat in seating.values() if seat is None) == 5


def test_seat_grid_lists_unseated_students_only() -> None:
    users = [
        User(id="s1", username="a", seat_index=2),
        User(id="s2", username="b"),
        User(id="kuri", username="k", role=Role.KURIKULUM),
    ]
    grid = seating_service.seat_grid(users)
    assert len(grid["seats"]) == SEAT_COUNT
    assert grid["seats"][2].id == "s1"
    assert [u.id for u in grid["unseated"]] == ["s2"]


@pytest.mark.parametrize("seed", range(25))
def test_random_assign_sequences_never_double_book(seed: int) -> None:
    rng = random.Random(seed)
    users = [User(id=f"s{i}", username=f"u{i}") for i in range(45)]
    users.append(User(id="kuri", username="k", role=Role.KURIKULUM))
    student_ids = [u.id for u in users if u.role == Role.STUDENT]

    for _ in range(200):
        user_id = rng.choice(student_ids)
        if rng.random() < 0.15:
            users = seating_service.vacate_seat(users, user_id)
        else:
            users, displaced = seating_service.assign_seat(users, user_id, rng.randrange(SEAT_COUNT))
            assert displaced is None or displaced.id != user_id
        assert all(count == 1 for count in _occupied(users).values())
        assert all(0 <= u.seat_index < SEAT_COUNT for u in users if u.seat_index is not None)
        assert next(u for u in users if u.id == "kuri").seat_index is None


@pytest.mark.parametrize("size", [0, 1, SEAT_COUNT, SEAT_COUNT + 1, 60])
@pytest.mark.parametrize("seed", range(10))
def test_shuffle_assigns_unique_in_range_seats(size: int, seed: int) -> None:
    users = [User(id=f"s{i}", username=f"u{i}", seat_index=i % SEAT_COUNT) for i in range(size)]
    seating = seating_service.shuffle_seating(users, random.Random(seed))
    assert set(seating) == {u.id for u in users}

    seats = [seat for seat in seating.values() if seat is not None]
    assert len(seats) == len(set(seats)) == min(size, SEAT_COUNT)
    assert all(0 <= seat < SEAT_COUNT for seat in seats)
    assert sum(1 for seat in seating.values() if seat is None) == max(0, size - SEAT_COUNT)

    applied = seating_service.apply_seating(users, seating)
    assert all(count == 1 for count in _occupied(applied).values())


async def test_store_seat_swap_scenario(local_store: ClassStore) -> None:
    await local_store.initialize()
    await local_store.update_seat("s2", 0)
    assert local_store.find_user("s1").seat_index is None
    assert local_store.find_user("s2").seat_index == 0
    assert seating_service.find_occupant(local_store.users, 1) is None


async def test_store_rejects_bad_seat_before_any_change(remote_store: ClassStore, remote: FakeRemote) -> None:
    await remote_store.initialize()
    before = remote_store.users
    with pytest.raises(SeatingError):
        await remote_store.update_seat("kuri", 0)
    assert remote_store.users is before
    assert not remote.ops("update")


async def test_remote_seat_writes_run_vacate_then_assign(remote_store: ClassStore, remote: FakeRemote) -> None:
    await remote_store.initialize()
    result = await remote_store.update_seat("s3", 0)
    assert result.ok
    updates = remote.ops("update")
    assert updates == [
        ("update", "users", {"seat_index": 0}),
        ("update", "users", {"id": "s3"}),
    ]
    rows = {row["id"]: row for row in remote.tables["users"]}
    assert rows["s1"]["seat_index"] is None
    assert rows["s3"]["seat_index"] == 0


async def test_failed_assign_leaves_remote_seat_empty(remote_store: ClassStore, remote: FakeRemote) -> None:
    await remote_store.initialize()
    remote.fail_when = lambda op, table, where: op == "update" and "id" in where
    result = await remote_store.update_seat("s3", 0)

    assert not result.ok
    assert len(result.applied) == 1
    assert result.failed.where == {"id": "s3"}
    rows = {row["id"]: row for row in remote.tables["users"]}
    assert rows["s1"]["seat_index"] is None
    assert rows["s3"]["seat_index"] is None
    # local state still shows the requested assignment
    assert remote_store.find_user("s3").seat_index == 0


async def test_vacate_seat(local_store: ClassStore) -> None:
    await local_store.initialize()
    await local_store.update_seat("s1", None)
    assert local_store.find_user("s1").seat_index is None


async def test_reset_clears_every_seat(remote_store: ClassStore, remote: FakeRemote) -> None:
    await remote_store.initialize()
    await remote_store.login("kurikulum", STAFF_PASSWORD)
    await remote_store.reset_seats()
    assert all(u.seat_index is None for u in remote_store.users)
    assert all(row["seat_index"] is None for row in remote.tables["users"])
    assert remote_store.activity_log[0].action == "kurikulum (KURIKULUM): Reset all seats"


async def test_randomize_seats_students_only(local_store: ClassStore) -> None:
    await local_store.initialize()
    staff_before = {u.id: u.seat_index for u in local_store.users if u.role != Role.STUDENT}
    await local_store.randomize_seats()

    students = [u for u in local_store.users if u.role == Role.STUDENT]
    assert all(u.seat_index is not None for u in students)
    assert len({u.seat_index for u in students}) == len(students)
    assert {u.id: u.seat_index for u in local_store.users if u.role != Role.STUDENT} == staff_before
