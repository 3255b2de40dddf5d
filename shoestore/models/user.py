from sqlalchemy import Column, DateTime, Integer, String
from datetime import datetime, timezone

from shoestore.models.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Storefront customer account. Admin rights come from ADMIN_EMAIL(S), not from this table."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100))
    last_name = Column(String(100))
    phone = Column(String(32))
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class RevokedToken(Base):
    """Logged-out JWTs, keyed by their ``jti`` claim."""

    __tablename__ = "revoked_tokens"

    jti = Column(String(64), primary_key=True)
    revoked_at = Column(DateTime(timezone=True), default=_utcnow)
