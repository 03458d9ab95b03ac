# Bearer-token guard shared by the protected routers
from typing import Optional

from fastapi import Depends, Header, HTTPException
from jose import ExpiredSignatureError, JWTError, jwt

from studysphere.config import Settings, get_settings

ALGORITHM = "HS256"


def _decode_jwt_token(token: str, secret_key: Optional[str]) -> dict:
    if not secret_key:
        raise HTTPException(status_code=500, detail="Authentication is not configured")
    try:
        return jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired. Please login again.")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token. Please login again.")


def get_current_user(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> dict:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Not authorized to access this route. Please login.")

    payload = _decode_jwt_token(authorization.split(" ", 1)[1], settings.jwt_secret_key)
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token. Please login again.")

    return {
        "id": user_id,
        "role": payload.get("role", "student"),
        "name": payload.get("name"),
    }


def require_roles(*roles: str):
    """Dependency factory: only the given roles get through"""

    def _guard(user: dict = Depends(get_current_user)) -> dict:
        if user["role"] not in roles:
            raise HTTPException(
                status_code=403,
                detail=f"User role {user['role']} is not authorized to access this route",
            )
        return user

    return _guard
