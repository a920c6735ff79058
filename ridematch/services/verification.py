"""
Login verification codes.

After the identity layer has checked a password it asks for a 6-digit code
to be mailed to the user. Codes live in Redis under ``verify:{email}`` with
a TTL, so expiry is enforced by the store and every API replica sees the
same state. Wrong guesses are counted under ``verify_attempts:{email}``;
reaching ``verification_max_attempts`` kills the session.
"""
import json
import logging
import secrets

import redis.asyncio as aioredis

from ridematch.config import get_settings
from ridematch.middleware.auth import create_access_token
from ridematch.redis_client import (
    cache_delete,
    cache_get,
    cache_set,
    verification_attempts_key,
    verification_key,
)
from ridematch.schemas.schemas import LoginRoleEnum
from ridematch.services.exceptions import PolicyViolation, VerificationFailed

logger = logging.getLogger(__name__)
settings = get_settings()

LOGIN_ROLES = frozenset(r.value for r in LoginRoleEnum)


def generate_code() -> str:
    return f"{secrets.randbelow(1_000_000):06d}"


async def issue_code(redis: aioredis.Redis, email: str, user_id: str, role: str) -> str:
    """Start (or restart) a verification session and send the code."""
    if role not in LOGIN_ROLES:
        raise PolicyViolation(f"Cannot issue a login code for role {role!r}")
    await cache_delete(redis, verification_attempts_key(email))
    return await _start_session(redis, email, user_id, role)


async def resend_code(redis: aioredis.Redis, email: str) -> str:
    """New code for a live session; the TTL starts over, the attempt count does not."""
    raw = await cache_get(redis, verification_key(email))
    if raw is None:
        raise VerificationFailed("No verification session found. Please login again.")
    session = json.loads(raw)
    return await _start_session(redis, email, session["user_id"], session["role"])


async def verify_code(redis: aioredis.Redis, email: str, code: str) -> tuple[str, str]:
    """
    Check ``code`` and exchange it for a bearer token.

    Returns (token, role). The session is consumed on success. A wrong code
    leaves it in place until the attempt limit is hit.
    """
    key = verification_key(email)
    raw = await cache_get(redis, key)
    if raw is None:
        raise VerificationFailed("Verification code expired or not found. Please login again.")

    session = json.loads(raw)
    if not secrets.compare_digest(session["code"], code):
        await _record_failure(redis, email)

    await redis.delete(key, verification_attempts_key(email))
    token = create_access_token({"sub": session["user_id"], "role": session["role"]})
    logger.info("Verified %s login for user=%s", session["role"], session["user_id"])
    return token, session["role"]


async def _start_session(redis: aioredis.Redis, email: str, user_id: str, role: str) -> str:
    code = generate_code()
    session = {"code": code, "user_id": user_id, "role": role}
    await cache_set(redis, verification_key(email), json.dumps(session), settings.verification_code_ttl_seconds)
    await _send_code_email(email, code)
    return code


async def _record_failure(redis: aioredis.Redis, email: str) -> None:
    """Count a wrong guess and always raise VerificationFailed."""
    attempts_key = verification_attempts_key(email)
    attempts = await redis.incr(attempts_key)
    await redis.expire(attempts_key, settings.verification_code_ttl_seconds)
    if attempts >= settings.verification_max_attempts:
        await redis.delete(verification_key(email), attempts_key)
        logger.warning("Verification session for %s dropped after %d wrong codes", email, attempts)
        raise VerificationFailed("Too many wrong codes. Please login again.")
    raise VerificationFailed("Invalid verification code")


async def _send_code_email(email: str, code: str) -> None:
    """
    Stub mail delivery. Replace with the real mail provider call in production.
    """
    logger.info("Verification code sent to %s", email)
    if settings.env == "development":
        logger.debug("Verification code for %s: %s", email, code)
