from __future__ import annotations

import time
from typing import Any

_last_minted = 0


def normalize_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def role_value(value: Any) -> str:
    if hasattr(value, "value"):
        return normalize_text(getattr(value, "value")).upper()
    return normalize_text(value).upper()


def mint_id() -> str:
    """Millisecond timestamp id, strictly increasing within this process."""
    global _last_minted
    candidate = int(time.time() * 1000)
    if candidate <= _last_minted:
        candidate = _last_minted + 1
    _last_minted = candidate
    return str(candidate)
