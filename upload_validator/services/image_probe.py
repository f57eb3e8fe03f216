"""Reads image dimensions from an uploaded file."""

import logging

from PIL import Image
from PIL import UnidentifiedImageError

logger = logging.getLogger(__name__)


def read_image_dimensions(path: str) -> tuple[int, int] | None:
    """Returns ``(width, height)`` if ``path`` is an image Pillow can identify, else ``None``.

    Only the header is parsed; pixel data is not decoded.
    """
    try:
        with Image.open(path) as image:
            width, height = image.size
    except (UnidentifiedImageError, Image.DecompressionBombError) as e:
        logger.debug("Not a readable image: %s (%s)", path, e)
        return None
    except OSError as e:
        logger.warning("Could not open %s for dimension probing: %s", path, e)
        return None

    if not isinstance(width, int) or not isinstance(height, int) or width < 0 or height < 0:
        return None
    return width, height
