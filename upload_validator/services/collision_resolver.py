"""Finds a destination filename that does not clash with an existing file."""

import logging
import os
from collections.abc import Callable

logger = logging.getLogger(__name__)

ExistsFn = Callable[[str], bool]


def ci_file_exists(path: str) -> bool:
    """Case-insensitive existence check.

    ``Photo.JPG`` counts as present when ``photo.jpg`` is in the directory, so
    names stay unique on case-insensitive filesystems and after moving files
    between platforms.
    """
    if os.path.exists(path):
        return True

    directory, name = os.path.split(path)
    try:
        entries = os.listdir(directory or ".")
    except (FileNotFoundError, NotADirectoryError):
        return False

    lowered = name.lower()
    return any(entry.lower() == lowered for entry in entries)


def resolve_collision(
    directory: str,
    base_name: str,
    suffix: str,
    extension: str,
    max_total_length: int,
    overwrite: bool = False,
    exists: ExistsFn = ci_file_exists,
) -> tuple[str, str]:
    """Picks a base name and counter so ``base + counter + suffix + "." + extension`` is free.

    The base name is first truncated (by code point) so the assembled name fits
    ``max_total_length``. If that name is taken, counters ``(1)``, ``(2)``, ...
    are tried in turn, truncating the base name further whenever the counter
    grows. The returned name is free at the time of the check only; a concurrent
    writer can still take it before the file is moved.

    Args:
        directory: Destination directory, trailing separator included.
        base_name: Candidate base name without counter, suffix or extension.
        suffix: Dimension suffix (``"-400x300"``) or empty.
        extension: Extension without the leading period.
        max_total_length: Upper bound on the assembled name's length.
        overwrite: When true, existing files may be replaced and nothing is probed.
        exists: Existence predicate for a full path.

    Returns:
        ``(base_name, counter)``; the counter is empty when no clash was found.
    """
    if overwrite:
        return base_name, ""

    budget = max_total_length - len(suffix) - 1 - len(extension)
    candidate = base_name[: max(budget, 0)]

    if not exists(f"{directory}{candidate}{suffix}.{extension}"):
        return candidate, ""

    counter_value = 0
    while True:
        counter_value += 1
        counter = f"({counter_value})"
        room = max(budget - len(counter), 0)
        if len(candidate) > room:
            candidate = base_name[:room]
        if not exists(f"{directory}{candidate}{counter}{suffix}.{extension}"):
            logger.debug("Resolved name clash for '%s' with counter %s", base_name, counter)
            return candidate, counter
