from fastapi import Depends, Header, Request
from sqlalchemy import select

from app.constants.error_codes import ErrorCode
from app.core.db import DatabaseManager, get_db
from app.core.exceptions import UnauthorizedError
from app.core.security import decode_access_token
from app.models.users.user_models import User
from app.utils.logger import get_logger

logger = get_logger("auth.guard")


async def get_current_user(
    request: Request,
    authorization: str = Header(...),
    db: DatabaseManager = Depends(get_db),
) -> dict:
    if not authorization.startswith("Bearer "):
        logger.warning("Missing bearer token")
        raise UnauthorizedError("Invalid authorization header")

    token = authorization.split("Bearer ")[1].strip()
    payload = decode_access_token(token)

    user = await db.query_one(
        select(User.id, User.username, User.role, User.is_active)
        .where(User.id == payload["userId"])
    )

    if not user:
        logger.warning("Token user not found", extra={"user_id": payload["userId"]})
        raise UnauthorizedError("User not found", ErrorCode.USER_NOT_FOUND)

    if not user["is_active"]:
        logger.warning("Inactive user access blocked", extra={"user_id": user["id"]})
        raise UnauthorizedError("Account is deactivated", ErrorCode.USER_INACTIVE)

    request.state.user = user
    return user
