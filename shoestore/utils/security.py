from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import uuid

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from shoestore.config import get_settings
from shoestore.models.database import SessionLocal
from shoestore.models.user import RevokedToken

logger = logging.getLogger(__name__)

settings = get_settings()
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

http_bearer = HTTPBearer(auto_error=False)


# ===== JWT =====
def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": subject,
        "jti": uuid.uuid4().hex,
        "iat": issued_at,
        "nbf": issued_at,
        "exp": issued_at + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)),
    }
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])


# ===== Revocation (logout) =====
def is_token_revoked(jti: str) -> bool:
    with SessionLocal() as db:
        return db.get(RevokedToken, jti) is not None


def revoke_token(jti: str) -> None:
    with SessionLocal() as db:
        if db.get(RevokedToken, jti) is None:
            db.add(RevokedToken(jti=jti))
            db.commit()


def _subject(credentials: str) -> str:
    try:
        claims = decode_access_token(credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    jti = claims.get("jti")
    if not jti or is_token_revoked(jti):
        raise HTTPException(status_code=401, detail="Token revoked")
    subject = claims.get("sub")
    if not subject:
        raise HTTPException(status_code=401, detail="Invalid token payload")
    return subject


# ===== Dependencies =====
def get_optional_user(token: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer)) -> Optional[str]:
    """Email of the signed-in customer, or None for guests. A bad token is still rejected."""
    if token is None or not token.credentials:
        return None
    return _subject(token.credentials)


def get_current_user(email: Optional[str] = Depends(get_optional_user)) -> str:
    if email is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return email


def is_admin_email(email: Optional[str]) -> bool:
    return bool(email) and email.strip().lower() in get_settings().admin_emails


def require_admin(current_user_email: str = Depends(get_current_user)) -> str:
    if not is_admin_email(current_user_email):
        logger.info(f"Admin route refused for {current_user_email}")
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user_email
