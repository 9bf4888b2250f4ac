from __future__ import annotations

import random
from typing import Optional

from ..config import SEAT_COUNT
from ..schemas import Role, User


class SeatingError(ValueError):
    """Raised for a seat request that cannot be honoured."""


def validate_seat_index(seat_index: int) -> int:
    if isinstance(seat_index, bool) or not isinstance(seat_index, int):
        raise SeatingError(f"seat index must be an integer, got {seat_index!r}")
    if not 0 <= seat_index < SEAT_COUNT:
        raise SeatingError(f"seat index {seat_index} is outside 0..{SEAT_COUNT - 1}")
    return seat_index


def find_occupant(users: list[User], seat_index: int) -> Optional[User]:
    return next((u for u in users if u.seat_index == seat_index), None)


def assign_seat(users: list[User], user_id: str, seat_index: int) -> tuple[list[User], Optional[User]]:
    """Seat a student, displacing whoever held the seat.

    Returns the new roster and the displaced occupant (``None`` when the seat
    was free or already held by the same student).
    """
    validate_seat_index(seat_index)
    target = next((u for u in users if u.id == user_id), None)
    if target is None:
        raise SeatingError(f"unknown user {user_id!r}")
    if target.role != Role.STUDENT:
        raise SeatingError(f"only students can be seated, {target.username!r} is {target.role.value}")

    displaced = None
    updated: list[User] = []
    for user in users:
        if user.id == user_id:
            updated.append(user.model_copy(update={"seat_index": seat_index}))
        elif user.seat_index == seat_index:
            displaced = user
            updated.append(user.model_copy(update={"seat_index": None}))
        else:
            updated.append(user)
    return updated, displaced


def vacate_seat(users: list[User], user_id: str) -> list[User]:
    return [u.model_copy(update={"seat_index": None}) if u.id == user_id else u for u in users]


def reset_seats(users: list[User]) -> list[User]:
    return [u.model_copy(update={"seat_index": None}) if u.seat_index is not None else u for u in users]


def shuffle_seating(users: list[User], rng: random.Random | None = None) -> dict[str, Optional[int]]:
    """Map every student id to a seat; students past the grid get ``None``."""
    rng = rng or random.Random()
    student_ids = [u.id for u in users if u.role == Role.STUDENT]
    shuffled = rng.sample(student_ids, len(student_ids))
    return {
        student_id: (position if position < SEAT_COUNT else None)
        for position, student_id in enumerate(shuffled)
    }


def apply_seating(users: list[User], seating: dict[str, Optional[int]]) -> list[User]:
    return [
        u.model_copy(update={"seat_index": seating[u.id]}) if u.id in seating else u
        for u in users
    ]


def seat_grid(users: list[User]) -> dict:
    grid: list[Optional[User]] = [None] * SEAT_COUNT
    for user in users:
        if user.role == Role.STUDENT and user.seat_index is not None and 0 <= user.seat_index < SEAT_COUNT:
            grid[user.seat_index] = user
    unseated = [u for u in users if u.role == Role.STUDENT and u.seat_index is None]
    return {"seats": grid, "unseated": unseated}
