from __future__ import annotations

from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request

from ..config import SESSION_COOKIE_NAME
from ..schemas import User
from ..services.identity_service import normalize_text
from ..services.policy import Action, can
from ..services.session_service import SessionTokens
from ..store import ClassStore


def get_store(request: Request) -> ClassStore:
    return request.app.state.store


def get_sessions(request: Request) -> SessionTokens:
    return request.app.state.sessions


def session_token(request: Request) -> Optional[str]:
    """Bearer token from the Authorization header, else the session cookie."""
    scheme, _, credentials = normalize_text(request.headers.get("Authorization")).partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(SESSION_COOKIE_NAME) or None


def require_loaded(store: ClassStore = Depends(get_store)) -> ClassStore:
    if store.is_loading:
        raise HTTPException(status_code=503, detail="Loading, try again shortly")
    return store


async def require_session(
    request: Request,
    store: ClassStore = Depends(require_loaded),
    sessions: SessionTokens = Depends(get_sessions),
) -> User:
    token = session_token(request)
    user_id = sessions.resolve(token)
    user = store.find_user(user_id) if user_id else None
    if user is None or not user.is_active:
        if token:
            sessions.revoke(token)
        raise HTTPException(status_code=401, detail="Login required")
    # mutations made while handling this request are attributed to the caller
    store.act_as(user)
    return user


def require(action: Action) -> Callable[..., User]:
    def dependency(user: User = Depends(require_session)) -> User:
        if not can(action, user.role):
            raise HTTPException(status_code=403, detail="Access denied for your role")
        return user

    return dependency


def not_found(kind: str, item_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{kind} {item_id} not found")
