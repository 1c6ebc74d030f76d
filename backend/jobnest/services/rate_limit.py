from __future__ import annotations

import threading
from collections import deque
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, status

from jobnest.auth import get_current_user
from jobnest.config import settings
from jobnest.models.user import User


class SlidingWindowLimiter:
    def __init__(self, limit: int, window: timedelta) -> None:
        self.limit = limit
        self.window = window
        self._hits: dict[str, deque[datetime]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._hits)

    def _forget_idle(self, cutoff: datetime) -> None:
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in idle:
            del self._hits[key]

    def hit(self, key: str, now: datetime | None = None) -> bool:
        """Record an attempt; False when the key is over its limit."""
        current = now or datetime.now(timezone.utc)
        cutoff = current - self.window
        with self._lock:
            self._forget_idle(cutoff)
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= self.limit:
                return False
            hits.append(current)
            return True

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


upload_limiter = SlidingWindowLimiter(
    limit=settings.upload_rate_limit,
    window=timedelta(minutes=settings.upload_rate_window_minutes),
)


def enforce_upload_limit(current_user: User = Depends(get_current_user)) -> User:
    if not upload_limiter.hit(f"user:{current_user.id}"):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many uploads. Please try again later.",
        )
    return current_user
