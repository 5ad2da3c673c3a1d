"""Meal photo storage and nutrition estimate.

Photos are written under ``UPLOADS_DIR/meals/<user_id>/`` and served from
``/api/images/meals/<user_id>/<file>``.  The analyzer returns a fixed
estimate until an image model is wired in.
"""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path

from fastapi import UploadFile

from app.errors import ValidationFailed

logger = logging.getLogger("gymportal.meal_photos")

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "image/heic": ".heic",
}
MAX_PHOTO_BYTES = 10 * 1024 * 1024

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_name(filename: str | None, content_type: str) -> str:
    stem = Path(filename or "photo").stem
    stem = _UNSAFE_CHARS.sub("_", stem).strip("._") or "photo"
    return f"{int(time.time() * 1000)}-{stem[:64]}{ALLOWED_CONTENT_TYPES[content_type]}"


async def store_meal_photo(upload: UploadFile, user_id: int, uploads_dir: str) -> str:
    """Persist *upload* and return its public URL."""
    content_type = (upload.content_type or "").lower()
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationFailed("Unsupported image type")

    data = await upload.read(MAX_PHOTO_BYTES + 1)
    if not data:
        raise ValidationFailed("Empty photo")
    if len(data) > MAX_PHOTO_BYTES:
        raise ValidationFailed("Photo too large")

    target_dir = Path(uploads_dir) / "meals" / str(user_id)
    target_dir.mkdir(parents=True, exist_ok=True)
    filename = _safe_name(upload.filename, content_type)
    with open(target_dir / filename, "wb") as f:
        f.write(data)

    logger.info("Stored meal photo for user %s (%d bytes)", user_id, len(data))
    return f"/api/images/meals/{user_id}/{filename}"


def analyze_meal_photo(photo_url: str) -> dict:
    """Nutrition estimate for a meal photo (grams, kcal)."""
    return {
        "foods": ["rice", "chicken breast", "broccoli", "tomato"],
        "calories": 450,
        "protein": 35,
        "carbs": 52,
        "fat": 8,
        "comment": "High protein, low fat: a well balanced meal.",
        "photo_url": photo_url,
    }
