from fastapi import Depends, HTTPException, status
from app.utils.get_user import get_current_user


def require_role(roles: list[str] | None = None):
    """Any authenticated user when ``roles`` is None."""
    allowed = {str(getattr(r, "value", r)).lower() for r in roles} if roles else None

    async def role_checker(user: dict = Depends(get_current_user)):
        if allowed is not None and user["role"].lower() not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Permission denied"
            )
        return user
    return role_checker
