# nextplay/auth.py
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import secrets
import uuid
from typing import Optional

from fastapi import Request
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from nextplay import settings
from nextplay.errors import InvalidCredential

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# --- password utils ----------------------------------------------------------
def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def new_one_time_token() -> str:
    """Random token for email verification and password reset links."""
    return secrets.token_hex(32)


# --- session credential ------------------------------------------------------
@dataclass(frozen=True)
class Claims:
    identity_id: str
    email: str
    role_at_issuance: str


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(user: dict, expires_delta: Optional[timedelta] = None) -> str:
    iat = _now_utc()
    exp = iat + (expires_delta if expires_delta is not None else timedelta(days=settings.TOKEN_EXPIRE_DAYS))
    payload = {
        "sub": str(user["_id"]),
        "email": user.get("email"),
        "role": user.get("role", "parent"),
        "type": "access",
        "jti": str(uuid.uuid4()),
        "iat": int(iat.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALG)


def verify_credential(raw: Optional[str]) -> Claims:
    """
    Check signature and expiry of a session credential and return its claims.
    Authentication only: the embedded role is informational.
    """
    if not raw:
        raise InvalidCredential("Missing authentication token")
    try:
        payload = jwt.decode(raw, settings.SECRET_KEY, algorithms=[settings.JWT_ALG])
    except ExpiredSignatureError:
        raise InvalidCredential("Token has expired")
    except JWTError:
        raise InvalidCredential("Invalid token")

    if payload.get("type") != "access":
        raise InvalidCredential("Wrong token type")
    sub = payload.get("sub")
    if not sub or "exp" not in payload:
        raise InvalidCredential("Invalid token")

    return Claims(
        identity_id=str(sub),
        email=payload.get("email") or "",
        role_at_issuance=payload.get("role") or "",
    )


def token_from_request(request: Request) -> Optional[str]:
    """
    Pull token from Authorization header (Bearer) OR from the 'token' cookie.
    """
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        token = auth_header.split(" ", 1)[1].strip()
        if token:
            return token
    return request.cookies.get(settings.TOKEN_COOKIE)
