from ...config import settings
from .memory_rate_limiter import InMemoryRateLimiter


def build_rate_limiter():
    if settings.REDIS_URL:
        from .redis_rate_limiter import RedisRateLimiter
        return RedisRateLimiter(settings.REDIS_URL)
    return InMemoryRateLimiter()
