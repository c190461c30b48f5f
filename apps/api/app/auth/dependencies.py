from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status

from app.auth.jwt import JwtError, decode_jwt, jwt_http_exception
from app.config import admin_roles_list, settings


@dataclass
class AuthContext:
    user_id: str
    role: str


def authenticate_token(token: str) -> AuthContext:
    """Resolve a bearer token into an admin session, raising JwtError when invalid."""
    payload = decode_jwt(token, settings.jwt_secret)

    role = payload.get("role")
    user_id = payload.get("sub")
    if not isinstance(role, str) or not isinstance(user_id, str):
        raise JwtError("Invalid JWT claims")
    return AuthContext(user_id=user_id, role=role)


def get_auth_context(authorization: str | None = Header(default=None)) -> AuthContext:
    if not authorization or not authorization.startswith("Bearer "):
        raise jwt_http_exception("Missing bearer token")

    token = authorization.removeprefix("Bearer ").strip()
    try:
        return authenticate_token(token)
    except JwtError as err:
        raise jwt_http_exception("Invalid or expired token") from err


def require_admin(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if auth.role not in admin_roles_list():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
    return auth
