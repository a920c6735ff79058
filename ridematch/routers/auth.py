"""
Auth router — verification-code step of the login flow.

Password checks happen in the identity layer, which then calls /codes with
its X-Service-Key. Only passenger and driver sessions can be opened here.
"""
import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, status

from ridematch.middleware.auth import require_identity_service
from ridematch.redis_client import get_redis
from ridematch.schemas.schemas import (
    CodeIssueRequest, CodeResendRequest, CodeVerifyRequest, TokenResponse,
)
from ridematch.services import verification

router = APIRouter(prefix="/v1/auth", tags=["Auth"])


@router.post(
    "/codes",
    status_code=status.HTTP_202_ACCEPTED,
    dependencies=[Depends(require_identity_service)],
)
async def issue_code(payload: CodeIssueRequest, redis: aioredis.Redis = Depends(get_redis)):
    await verification.issue_code(redis, payload.email, payload.user_id, payload.role.value)
    return {"message": "Verification code sent to your email", "requires_verification": True}


@router.post("/codes/resend", status_code=status.HTTP_202_ACCEPTED)
async def resend_code(payload: CodeResendRequest, redis: aioredis.Redis = Depends(get_redis)):
    await verification.resend_code(redis, payload.email)
    return {"message": "Verification code resent successfully"}


@router.post("/verify", response_model=TokenResponse)
async def verify_code(payload: CodeVerifyRequest, redis: aioredis.Redis = Depends(get_redis)):
    token, role = await verification.verify_code(redis, payload.email, payload.code)
    return TokenResponse(access_token=token, role=role)
