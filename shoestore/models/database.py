from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from shoestore.config import get_settings


def normalize_database_url(url: str) -> str:
    """Point postgres URLs at the psycopg 3 driver; anything else passes through."""
    if not url:
        raise RuntimeError("DATABASE_URL is not set. Use a postgres:// URL or a sqlite:/// path.")
    scheme, sep, rest = url.partition("://")
    if scheme in ("postgres", "postgresql"):
        return f"postgresql+psycopg{sep}{rest}"
    return url


DATABASE_URL = normalize_database_url(get_settings().DATABASE_URL)

# SQLite connections are shared across the request threadpool
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False)
Base = declarative_base()


def get_db() -> Iterator[Session]:
    with SessionLocal() as db:
        yield db
