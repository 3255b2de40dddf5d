"""Product image files under MEDIA_ROOT, served by the /media static mount."""

from pathlib import Path
from typing import Iterable, Optional
import logging
import shutil
import uuid

from fastapi import UploadFile

from shoestore.config import get_settings

logger = logging.getLogger(__name__)

MEDIA_ROOT = Path(get_settings().MEDIA_ROOT).resolve()
MEDIA_URL_PREFIX = "/media/"

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".avif", ".bmp"}


def media_path(url: Optional[str]) -> Optional[Path]:
    """Map a stored ``/media/<subdir>/<file>`` URL to its file, or None for external URLs."""
    if not isinstance(url, str) or not url.startswith(MEDIA_URL_PREFIX):
        return None
    parts = Path(url[len(MEDIA_URL_PREFIX):]).parts
    if len(parts) < 2 or ".." in parts:
        return None
    return MEDIA_ROOT.joinpath(*parts)


def save_image(upload: UploadFile, subdir: str = "products") -> str:
    """Store an uploaded image under a random name and return its /media URL."""
    if upload is None or not upload.filename:
        raise ValueError("No file provided")
    suffix = Path(upload.filename).suffix.lower()
    if suffix not in IMAGE_EXTENSIONS:
        raise ValueError(f"Unsupported image type: {suffix or 'none'}")
    target_dir = MEDIA_ROOT / subdir
    target_dir.mkdir(parents=True, exist_ok=True)
    name = f"{uuid.uuid4().hex}{suffix}"
    with (target_dir / name).open("wb") as out:
        shutil.copyfileobj(upload.file, out)
    return f"{MEDIA_URL_PREFIX}{subdir}/{name}"


def delete_images(urls: Optional[Iterable[str]]) -> int:
    """Remove uploaded images; external URLs and missing files are skipped. Returns how many went."""
    removed = 0
    for url in urls or ():
        path = media_path(url)
        if path is None or not path.is_file():
            continue
        try:
            path.unlink()
            removed += 1
        except OSError as e:
            logger.warning(f"Could not delete {url}: {e}")
    return removed
