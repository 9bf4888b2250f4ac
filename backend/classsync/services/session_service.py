"""Per-login session tokens for the HTTP surface.

Tokens map to a user id and expire after ``SESSION_TTL_SECONDS`` of
inactivity; resolving a token slides its expiry forward.
"""

from __future__ import annotations

import secrets
import time
from typing import Callable, Optional

from ..config import SESSION_MAX_TOKENS, SESSION_TTL_SECONDS
from .identity_service import normalize_text


class SessionTokens:
    def __init__(
        self,
        ttl_seconds: float = SESSION_TTL_SECONDS,
        max_tokens: int = SESSION_MAX_TOKENS,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = float(ttl_seconds)
        self.max_tokens = int(max_tokens)
        self._clock = clock
        self._tokens: dict[str, dict] = {}

    def __len__(self) -> int:
        return len(self._tokens)

    def _cleanup(self, now_ts: float) -> None:
        expired = [token for token, item in self._tokens.items() if item["expires_at"] <= now_ts]
        for token in expired:
            self._tokens.pop(token, None)

        if len(self._tokens) <= self.max_tokens:
            return
        oldest_first = sorted(self._tokens.items(), key=lambda pair: pair[1]["expires_at"])
        for token, _ in oldest_first[: len(oldest_first) - self.max_tokens]:
            self._tokens.pop(token, None)

    def issue(self, user_id: str) -> str:
        user_id = normalize_text(user_id)
        if not user_id:
            return ""
        now_ts = self._clock()
        self._cleanup(now_ts)
        token = secrets.token_urlsafe(36)
        self._tokens[token] = {"user_id": user_id, "expires_at": now_ts + self.ttl_seconds}
        return token

    def resolve(self, token: Optional[str]) -> str:
        token = normalize_text(token)
        if not token:
            return ""
        now_ts = self._clock()
        self._cleanup(now_ts)
        item = self._tokens.get(token)
        if item is None:
            return ""
        item["expires_at"] = now_ts + self.ttl_seconds
        return item["user_id"]

    def revoke(self, token: Optional[str]) -> bool:
        return self._tokens.pop(normalize_text(token), None) is not None
