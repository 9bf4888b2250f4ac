from datetime import datetime

from fastapi import APIRouter, Depends, Request

from ...db import is_postgres_ready
from ...schemas import User
from ...services.policy import Action
from ...store import ClassStore
from ..deps import get_store, require, require_loaded, require_session

router = APIRouter()


@router.get("/health")
def api_health(request: Request):
    store: ClassStore = get_store(request)
    return {
        "status": "ok",
        "service": "classsync",
        "loading": store.is_loading,
        "remote_enabled": store.remote_enabled,
        "postgres_ready": is_postgres_ready(),
        "timestamp": datetime.now().isoformat(),
    }


@router.get("/dashboard")
async def dashboard(
    _: User = Depends(require_session),
    store: ClassStore = Depends(require_loaded),
):
    today = datetime.now().strftime("%A")
    return {
        "today": today,
        "active_tasks": sum(1 for t in store.tasks if not t.is_completed),
        "todays_classes": [item.model_dump(mode="json") for item in store.schedule if item.day == today],
        "announcements": len(store.announcements),
    }


@router.get("/activity-log")
async def activity_log(
    _: User = Depends(require(Action.VIEW_ACTIVITY_LOG)),
    store: ClassStore = Depends(require_loaded),
):
    return [entry.model_dump(mode="json") for entry in store.activity_log]
