"""Defines the fixed tables used by upload validation."""

import re

# Known upload categories; an empty ``allowed_file_types`` means the union of all of them
FILE_TYPE_CATEGORIES: dict[str, tuple[str, ...]] = {
    "images": ("gif", "png", "jpg", "jpeg"),
    "documents": ("doc", "docx", "txt", "xls", "ppt", "pdf"),
    "videos": ("avi", "mov", "wmv", "flv", "mp4", "ogg", "webm"),
    "music": ("mp3", "wmv"),
}

# Extensions for which unreadable dimensions are an error
IMAGE_EXTENSIONS: frozenset[str] = frozenset(FILE_TYPE_CATEGORIES["images"])

BASE_LOCALE: str = "en"
SUPPORTED_LOCALES: tuple[str, ...] = ("en", "fr")

MIN_FILENAME_MAX_LENGTH: int = 20

# Letter or digit first, then letters, digits, underscores, parentheses, hyphens or periods
VALID_FILENAME_PATTERN = re.compile(r"[a-z0-9][a-z0-9_()\-.]*", re.IGNORECASE | re.ASCII)


def all_known_extensions() -> list[str]:
    """Returns the union of every category, in declaration order, without duplicates."""
    seen: dict[str, None] = {}
    for extensions in FILE_TYPE_CATEGORIES.values():
        for ext in extensions:
            seen.setdefault(ext, None)
    return list(seen)
