"""
Per-client request throttling.

One ``RequestRateLimiter`` is created per application instance and stored on
``app.state.rate_limiter``; routes opt in through the ``rate_limited``
dependency. Counters live in process memory and are lost on restart.
"""

import logging

from fastapi import Request
from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter
from slowapi.util import get_remote_address

from app.core.exceptions import RateLimited


logger = logging.getLogger(__name__)


class RequestRateLimiter:
    """Fixed-window limiter keyed by client address and scope."""

    def __init__(self, limit: str):
        self.limit = parse(limit)
        self.storage = MemoryStorage()
        self.strategy = FixedWindowRateLimiter(self.storage)

    def hit(self, scope: str, key: str) -> bool:
        """Count one request; return False once the window is exhausted."""
        return self.strategy.hit(self.limit, scope, key)

    def reset(self) -> None:
        self.storage.reset()


def rate_limited(scope: str):
    """
    Build a dependency that throttles requests for ``scope`` using the
    limiter attached to the running application.
    """
    async def dependency(request: Request) -> None:
        limiter: RequestRateLimiter | None = getattr(request.app.state, "rate_limiter", None)
        if limiter is None:
            return
        client = get_remote_address(request)
        if not limiter.hit(scope, client):
            logger.warning(f"Rate limit exceeded for {client} on {scope}")
            raise RateLimited("Too many requests, please try again later")

    return dependency
