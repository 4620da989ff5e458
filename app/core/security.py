# app/core/security.py

from jose import jwt, JWTError

from app.core.config import JWT_SECRET, JWT_ALGORITHM
from app.core.exceptions import UnauthorizedError

# Token issuance lives in the auth service; this side only verifies.


# =====================================================
# DECODE + VALIDATE TOKEN
# =====================================================
def decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
        )
    except JWTError as exc:
        raise UnauthorizedError("Invalid or expired token") from exc

    if payload.get("userId") is None:
        raise UnauthorizedError("Invalid token payload")

    return payload
