from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ...config import SEAT_COLUMNS, SEAT_ROWS
from ...schemas import User
from ...services.policy import Action
from ...services.seating_service import SeatingError, seat_grid
from ...store import ClassStore
from ..deps import not_found, require, require_loaded, require_session

router = APIRouter(prefix="/seating")


class SeatAssignRequest(BaseModel):
    user_id: str


def _grid_payload(store: ClassStore) -> dict:
    grid = seat_grid(store.users)
    return {
        "rows": SEAT_ROWS,
        "columns": SEAT_COLUMNS,
        "seats": [
            {"index": index, "user": occupant.public() if occupant else None}
            for index, occupant in enumerate(grid["seats"])
        ],
        "unseated": [u.public() for u in grid["unseated"]],
    }


@router.get("")
async def get_seating(
    _: User = Depends(require_session),
    store: ClassStore = Depends(require_loaded),
):
    return _grid_payload(store)


@router.put("/{seat_index}")
async def assign_seat(
    seat_index: int,
    payload: SeatAssignRequest,
    _: User = Depends(require(Action.MANAGE_SEATS)),
    store: ClassStore = Depends(require_loaded),
):
    if store.find_user(payload.user_id) is None:
        raise not_found("User", payload.user_id)
    try:
        await store.update_seat(payload.user_id, seat_index)
    except SeatingError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _grid_payload(store)


@router.delete("/users/{user_id}")
async def vacate_seat(
    user_id: str,
    _: User = Depends(require(Action.MANAGE_SEATS)),
    store: ClassStore = Depends(require_loaded),
):
    if store.find_user(user_id) is None:
        raise not_found("User", user_id)
    await store.update_seat(user_id, None)
    return _grid_payload(store)


@router.post("/reset")
async def reset_seats(
    _: User = Depends(require(Action.MANAGE_SEATS)),
    store: ClassStore = Depends(require_loaded),
):
    await store.reset_seats()
    return _grid_payload(store)


@router.post("/randomize")
async def randomize_seats(
    _: User = Depends(require(Action.MANAGE_SEATS)),
    store: ClassStore = Depends(require_loaded),
):
    await store.randomize_seats()
    return _grid_payload(store)
