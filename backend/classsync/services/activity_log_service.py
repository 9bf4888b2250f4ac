from __future__ import annotations

from datetime import datetime, timezone

from ..schemas import ActivityLog, User
from .identity_service import mint_id, normalize_text, role_value


def format_action(user: User, description: str) -> str:
    return f"{normalize_text(user.username)} ({role_value(user.role)}): {normalize_text(description)}"


def build_entry(user: User, description: str, *, now: datetime | None = None) -> ActivityLog:
    return ActivityLog(
        id=mint_id(),
        user_id=user.id,
        action=format_action(user, description),
        timestamp=now or datetime.now(timezone.utc),
    )
