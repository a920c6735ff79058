import json
from typing import Optional

import redis.asyncio as aioredis
from fastapi import Request, Response
from fastapi.responses import JSONResponse

from ridematch.config import get_settings

settings = get_settings()


def _cache_key(scope: str, key: str) -> str:
    return f"idempotency:{scope}:{key}"


async def check_idempotency(
    request: Request,
    redis: aioredis.Redis,
    scope: str,
) -> Optional[Response]:
    """
    Returns the stored Response if this Idempotency-Key was already used by
    the same caller (``scope``), otherwise None (proceed normally).
    """
    key = request.headers.get("Idempotency-Key")
    if not key:
        return None

    cached = await redis.get(_cache_key(scope, key))
    if cached:
        data = json.loads(cached)
        return JSONResponse(
            content=data["body"],
            status_code=data["status_code"],
            headers={"X-Idempotency-Replay": "true"},
        )
    return None


async def store_idempotency_result(
    redis: aioredis.Redis,
    scope: str,
    key: str,
    status_code: int,
    body: dict,
) -> None:
    """Persist the response for the given idempotency key."""
    await redis.setex(
        _cache_key(scope, key),
        settings.idempotency_ttl_seconds,
        json.dumps({"status_code": status_code, "body": body}),
    )
