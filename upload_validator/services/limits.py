"""Combines the runtime, policy and client size ceilings into one effective maximum."""

import logging

from upload_validator.models.upload_models import UploadEnvironment

logger = logging.getLogger(__name__)


def effective_max_file_size(
    environment: UploadEnvironment,
    policy_max_file_size: int,
    client_max_file_size: str | int | None = None,
) -> int:
    """Returns the smallest of the applicable size ceilings, in bytes.

    The runtime's single-upload and request-size limits always apply. The
    policy ceiling applies only when positive. The client's declared
    ``MAX_FILE_SIZE`` applies only when it is a non-negative integer literal;
    since it enters a minimum it can only lower the limit, never raise it.

    Args:
        environment: Runtime ceilings.
        policy_max_file_size: ``ValidationConfig.max_file_size``.
        client_max_file_size: Raw ``MAX_FILE_SIZE`` value from the request data, if any.
    """
    ceilings = [environment.upload_max_filesize, environment.post_max_size]
    if policy_max_file_size > 0:
        ceilings.append(policy_max_file_size)

    hint = str(client_max_file_size) if client_max_file_size is not None else ""
    if hint.isascii() and hint.isdigit():
        ceilings.append(int(hint))
    elif hint:
        logger.debug("Ignoring client size hint %r: not an integer literal", hint)

    return min(ceilings)
