import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from shoestore.models.database import get_db
from shoestore.services.store import DocumentStore

logger = logging.getLogger(__name__)


def log_document_change(key: str) -> None:
    logger.debug(f"Document {key!r} changed")


def get_store(db: Session = Depends(get_db)) -> DocumentStore:
    return DocumentStore(db, listeners=[log_document_change])
