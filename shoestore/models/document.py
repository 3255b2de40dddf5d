from sqlalchemy import Column, DateTime, String, Text
from datetime import datetime, timezone

from shoestore.models.database import Base


class Document(Base):
    """One JSON document of the storefront key/value store (cart, inventory, sales, settings)."""

    __tablename__ = "documents"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False, default="")
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
