"""
Caller-visible failures and the checks that raise them.

Every business endpoint runs these in the same order: identity (via the
get_current_user dependency), rate limit, existence and ownership, field
rules. Nothing is written before all of them pass.
"""
import math
from typing import List, Optional, TypeVar

from fastapi import HTTPException, status

from focuslist.models.user import User
from focuslist.services.rate_limiter import RateLimiter
from focuslist.utils.logger import get_logger

logger = get_logger(__name__)

Record = TypeVar("Record")


class UnauthenticatedError(HTTPException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class RateLimitedError(HTTPException):
    def __init__(self, retry_after: float):
        self.retry_after = retry_after
        retry_after_ms = math.ceil(retry_after * 1000)
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Rate limit exceeded. Retry after {retry_after_ms}ms",
            headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
        )


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "Not authorized"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class ValidationFailedError(HTTPException):
    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=", ".join(errors))


async def enforce_rate_limit(limiter: RateLimiter, bucket: str, user: User) -> None:
    result = await limiter.limit(bucket, key=str(user.id))
    if not result.ok:
        raise RateLimitedError(result.retry_after)


def require_owned(
    record: Optional[Record],
    user: User,
    entity: str,
    action: str,
    label: Optional[str] = None,
) -> Record:
    """
    Return the record if the caller owns it.

    Raises NotFoundError when it is missing and UnauthorizedError when it
    belongs to someone else. `label` replaces "this <entity>" in messages,
    e.g. "task 12" for batch operations.
    """
    subject = label or f"this {entity.lower()}"
    if record is None:
        raise NotFoundError(f"{label.capitalize() if label else entity.capitalize()} not found")
    if record.user_id != user.id:
        logger.warning(f"User {user.id} denied: {action} {subject}")
        raise UnauthorizedError(f"Not authorized to {action} {subject}")
    return record


def require_valid(errors: List[str]) -> None:
    if errors:
        raise ValidationFailedError(errors)
