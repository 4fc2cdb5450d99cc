from typing import Protocol


class RateLimiter(Protocol):
    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        """Record one hit for ``key``; False once the window's budget is spent."""
        ...
