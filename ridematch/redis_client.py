import redis.asyncio as aioredis
from ridematch.config import get_settings

settings = get_settings()

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=100,
        )
    return _redis_pool


async def close_redis() -> None:
    global _redis_pool
    if _redis_pool:
        await _redis_pool.aclose()
        _redis_pool = None


# ---------------------------------------------------------------------------
# Cache keys
# ---------------------------------------------------------------------------

def booking_key(booking_id: int) -> str:
    return f"booking:{booking_id}"


def driver_status_key(driver_id: str) -> str:
    return f"driver:{driver_id}:status"


def verification_key(email: str) -> str:
    return f"verify:{email.strip().lower()}"


def verification_attempts_key(email: str) -> str:
    return f"verify_attempts:{email.strip().lower()}"


# ---------------------------------------------------------------------------
# Cache helpers
# ---------------------------------------------------------------------------

async def cache_set(redis: aioredis.Redis, key: str, value: str, ttl: int) -> None:
    await redis.setex(key, ttl, value)


async def cache_get(redis: aioredis.Redis, key: str) -> str | None:
    return await redis.get(key)


async def cache_delete(redis: aioredis.Redis, key: str) -> None:
    await redis.delete(key)
