import redis

from ...application.ports.rate_limiter import RateLimiter


class RedisRateLimiter(RateLimiter):
    """Fixed window counter shared by every worker pointing at the same Redis."""

    def __init__(self, url: str, prefix: str = "appointments:rl:") -> None:
        self.client = redis.Redis.from_url(url)
        self.prefix = prefix

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        redis_key = f"{self.prefix}{key}:{window_seconds}"
        pipe = self.client.pipeline()
        pipe.incr(redis_key, 1)
        pipe.expire(redis_key, window_seconds, nx=True)
        count, _ = pipe.execute()
        return int(count) <= int(max_requests)
