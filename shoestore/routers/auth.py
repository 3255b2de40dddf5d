from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import JWTError
from passlib.context import CryptContext
from sqlalchemy.orm import Session
from typing import Optional
import logging

from shoestore.models.database import get_db
from shoestore.models.user import User
from shoestore.schemas.user import LoginSchema, RegisterSchema, TokenOut
from shoestore.utils.security import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    create_access_token,
    decode_access_token,
    http_bearer,
    is_admin_email,
    revoke_token,
)

logger = logging.getLogger(__name__)

router = APIRouter()
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def _find_user(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.strip().lower()).first()


# Register Customer
@router.post("/register", status_code=201)
def register(payload: RegisterSchema, db: Session = Depends(get_db)):
    if _find_user(db, payload.email):
        raise HTTPException(status_code=400, detail="Email already registered")
    user = User(
        email=payload.email.strip().lower(),
        password_hash=pwd_context.hash(payload.password),
        first_name=payload.firstName.strip(),
        last_name=payload.lastName.strip(),
        phone=payload.phone,
    )
    db.add(user)
    db.commit()
    logger.info(f"Registered customer {user.email}")
    return {"message": "User registered successfully"}


# Login (bearer token)
@router.post("/login", response_model=TokenOut)
def login(credentials: LoginSchema, db: Session = Depends(get_db)):
    user = _find_user(db, credentials.email)
    if user is None or not pwd_context.verify(credentials.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return TokenOut(
        access_token=create_access_token(subject=user.email),
        expires_in_minutes=ACCESS_TOKEN_EXPIRE_MINUTES,
        isAdmin=is_admin_email(user.email),
    )


# Logout (revokes the presented token)
@router.post("/logout")
def logout(creds: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer)):
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        claims = decode_access_token(creds.credentials)
    except JWTError:
        # Unusable tokens get the same answer as valid ones
        return {"message": "Logged out"}
    if claims.get("jti"):
        revoke_token(claims["jti"])
    return {"message": "Logged out"}
