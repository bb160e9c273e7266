from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Callable
from threading import Lock
import time
from typing import Deque

from fastapi import HTTPException, Request, status


class SlidingWindowLimiter:
    """Per-key request log; a key is allowed `limit` hits in any `window_seconds` span."""

    def __init__(self) -> None:
        self._hits: dict[str, Deque[float]] = defaultdict(deque)
        self._lock = Lock()

    def hit(self, key: str, *, limit: int, window_seconds: int) -> int | None:
        """Record a hit. Returns None when allowed, else seconds until a slot frees up."""
        now = time.monotonic()
        cutoff = now - window_seconds
        with self._lock:
            log = self._hits[key]
            while log and log[0] <= cutoff:
                log.popleft()
            if len(log) >= limit:
                return max(1, int(log[0] + window_seconds - now) + 1)
            log.append(now)
        return None

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


_limiter = SlidingWindowLimiter()


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def enforce_rate_limit(
    *,
    request: Request,
    scope: str,
    limit: int,
    window_seconds: int,
    identity: str | None = None,
) -> None:
    key = "|".join((scope, client_ip(request), (identity or "").strip().lower()))
    retry_after = _limiter.hit(key, limit=limit, window_seconds=window_seconds)
    if retry_after is None:
        return
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=f"Too many requests for {scope}. Try again in {retry_after} second(s).",
        headers={"Retry-After": str(retry_after)},
    )


def rate_limited(scope: str, *, limit: int, window_seconds: int) -> Callable[[Request], None]:
    """FastAPI dependency limiting a route per client IP."""

    def dependency(request: Request) -> None:
        enforce_rate_limit(request=request, scope=scope, limit=limit, window_seconds=window_seconds)

    return dependency


def clear_rate_limiter() -> None:
    _limiter.reset()
