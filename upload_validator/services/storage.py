import logging
import os
import shutil

logger = logging.getLogger(__name__)


def move_upload(tmp_path: str, destination: str, permissions: int) -> bool:
    """Moves a spooled upload to its destination and applies ``permissions``.

    Returns False if the move fails. A failure to change permissions is only
    logged: the file is already in place.
    """
    try:
        shutil.move(tmp_path, destination)
    except OSError as e:
        logger.error(f"Could not move {tmp_path} to {destination}: {e}")
        return False

    try:
        os.chmod(destination, permissions)
    except OSError as e:
        logger.warning(f"Could not change file permissions of {destination} to {oct(permissions)}: {e}")
    return True
