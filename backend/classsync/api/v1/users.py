from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ...schemas import Role, User
from ...services.policy import Action, can_modify_account
from ...store import ClassStore
from ..deps import not_found, require, require_loaded

router = APIRouter(prefix="/users")


class RoleUpdateRequest(BaseModel):
    role: Role


class StatusUpdateRequest(BaseModel):
    is_active: bool


def _modifiable_user(store: ClassStore, user_id: str) -> User:
    target = store.find_user(user_id)
    if target is None:
        raise not_found("User", user_id)
    if not can_modify_account(target.role):
        raise HTTPException(status_code=403, detail="Administrator accounts cannot be modified")
    return target


@router.get("")
async def list_users(
    _: User = Depends(require(Action.MANAGE_USERS)),
    store: ClassStore = Depends(require_loaded),
):
    return [u.public() for u in store.users]


@router.patch("/{user_id}/role")
async def update_role(
    user_id: str,
    payload: RoleUpdateRequest,
    _: User = Depends(require(Action.MANAGE_USERS)),
    store: ClassStore = Depends(require_loaded),
):
    _modifiable_user(store, user_id)
    await store.update_user_role(user_id, payload.role)
    return store.find_user(user_id).public()


@router.patch("/{user_id}/status")
async def update_status(
    user_id: str,
    payload: StatusUpdateRequest,
    _: User = Depends(require(Action.MANAGE_USERS)),
    store: ClassStore = Depends(require_loaded),
):
    _modifiable_user(store, user_id)
    await store.update_user_status(user_id, payload.is_active)
    return store.find_user(user_id).public()
