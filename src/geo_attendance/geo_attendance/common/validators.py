from __future__ import annotations

import math
import re
from typing import Any, Optional

from ..core.constants import MAX_NOTES_LENGTH
from ..core.exceptions import ValidationError

_PHOTO_DATA_URI = re.compile(r"^data:image/(jpeg|jpg|png|gif);base64,")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_max_length(value: Optional[str], field_name: str, max_len: int = MAX_NOTES_LENGTH) -> Optional[str]:
    """Trim ``value``; empty becomes None, longer than ``max_len`` is rejected."""
    if value is None:
        return None
    value = value.strip()
    if len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value or None


def coerce_float(value: Any, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field_name}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name}") from None
    if not math.isfinite(number):
        raise ValidationError(f"Invalid {field_name}")
    return number


def validate_coordinates(latitude: Optional[float], longitude: Optional[float]) -> None:
    if latitude is None or longitude is None:
        return
    if not (-90 <= latitude <= 90):
        raise ValidationError("Latitude must be between -90 and 90")
    if not (-180 <= longitude <= 180):
        raise ValidationError("Longitude must be between -180 and 180")


def validate_photo_reference(photo: Optional[str]) -> str:
    """Accept an opaque stored-photo reference or an inline base64 image URI."""
    photo = require_non_empty(photo, "Photo")
    if photo.startswith("data:") and not _PHOTO_DATA_URI.match(photo):
        raise ValidationError("Invalid photo format. Must be a valid base64 image.")
    return photo
