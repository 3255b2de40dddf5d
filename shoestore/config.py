import os
from functools import lru_cache

from dotenv import load_dotenv, find_dotenv

# Values already in the environment win over the .env file
_env_path = find_dotenv(usecwd=True)
if _env_path:
    load_dotenv(_env_path, override=False)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change_me_secret")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    # Default to 7 days so users stay logged in for a week
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./shoestore.db")
    # Primary admin email
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@example.com")
    # Optional comma separated list of additional admin emails
    ADMIN_EMAILS: str = os.getenv("ADMIN_EMAILS", "")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    # Uploaded product images, served under /media
    MEDIA_ROOT: str = os.getenv("MEDIA_ROOT", "media")

    # Storefront rules
    REQUIRE_LOGIN_FOR_CART: bool = _flag("REQUIRE_LOGIN_FOR_CART", "0")
    PACKAGING_FEE_PER_PAIR: int = int(os.getenv("PACKAGING_FEE_PER_PAIR", "50"))

    # POS -> hosted database sync job
    LOYVERSE_BASE: str = os.getenv("LOYVERSE_BASE", "https://api.loyverse.com/v1")
    LOYVERSE_API_KEY: str | None = os.getenv("LOYVERSE_API_KEY")
    SUPABASE_URL: str | None = os.getenv("SUPABASE_URL")
    SUPABASE_SERVICE_ROLE_KEY: str | None = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    SYNC_PAGE_SIZE: int = int(os.getenv("SYNC_PAGE_SIZE", "100"))
    SYNC_MAX_PAGES: int = int(os.getenv("SYNC_MAX_PAGES", "50"))

    @property
    def admin_emails(self) -> set[str]:
        emails = {e.strip().lower() for e in (self.ADMIN_EMAILS or "").split(",") if e.strip()}
        if self.ADMIN_EMAIL:
            emails.add(self.ADMIN_EMAIL.strip().lower())
        return emails


@lru_cache
def get_settings():
    return Settings()
