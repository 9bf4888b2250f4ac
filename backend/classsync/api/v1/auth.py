from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel

from ...config import SESSION_COOKIE_NAME
from ...schemas import User
from ...services.session_service import SessionTokens
from ...store import ClassStore
from ..deps import get_sessions, require_loaded, require_session, session_token

router = APIRouter()

LOGIN_FAILED_DETAIL = "Invalid username or password"


class LoginRequest(BaseModel):
    username: str
    password: str


class IdentityLoginRequest(BaseModel):
    email: str
    name: str
    external_id: str


class ProfileUpdateRequest(BaseModel):
    full_name: Optional[str] = None
    password: Optional[str] = None


def _start_session(response: Response, sessions: SessionTokens, user: User) -> dict:
    token = sessions.issue(user.id)
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=int(sessions.ttl_seconds),
        httponly=True,
        samesite="lax",
    )
    return {**user.public(), "token": token}


@router.post("/login")
async def login(
    payload: LoginRequest,
    response: Response,
    store: ClassStore = Depends(require_loaded),
    sessions: SessionTokens = Depends(get_sessions),
):
    ok = await store.login(payload.username.strip(), payload.password)
    user = store.acting_user
    if not ok or user is None:
        raise HTTPException(status_code=401, detail=LOGIN_FAILED_DETAIL)
    return _start_session(response, sessions, user)


@router.post("/login/identity")
async def login_with_identity(
    payload: IdentityLoginRequest,
    response: Response,
    store: ClassStore = Depends(require_loaded),
    sessions: SessionTokens = Depends(get_sessions),
):
    if not payload.email.strip() or not payload.external_id.strip():
        raise HTTPException(status_code=400, detail="email and external_id are required")
    user = await store.login_with_identity(payload.email, payload.name, payload.external_id)
    if user is None:
        raise HTTPException(status_code=401, detail=LOGIN_FAILED_DETAIL)
    return _start_session(response, sessions, user)


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    _: User = Depends(require_session),
    store: ClassStore = Depends(require_loaded),
    sessions: SessionTokens = Depends(get_sessions),
):
    await store.logout()
    sessions.revoke(session_token(request))
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"ok": True}


@router.get("/session")
async def session(user: User = Depends(require_session)):
    return user.public()


@router.patch("/profile")
async def update_profile(
    payload: ProfileUpdateRequest,
    user: User = Depends(require_session),
    store: ClassStore = Depends(require_loaded),
):
    await store.update_user_profile(user.id, full_name=payload.full_name, password=payload.password)
    return (store.find_user(user.id) or user).public()
