"""Serialises a result's error messages for the caller's presentation layer."""

import html
import json
from collections.abc import Mapping
from enum import Enum
from typing import Any

from upload_validator.models.upload_models import ErrorKind


class ErrorFormat(str, Enum):
    HTML = "html"
    ESCAPED_TEXT = "escaped_text"
    JSON = "json"
    RAW = "raw"
    JS_ARRAY = "js_array"
    TEXT = "text"


_SLASHED = {"\\": "\\\\", "'": "\\'", '"': '\\"', "\0": "\\0"}


def add_slashes(text: str) -> str:
    """Backslash-escapes quotes, backslashes and NUL characters."""
    return "".join(_SLASHED.get(char, char) for char in text)


def render_errors(errors: Mapping[ErrorKind, str], fmt: ErrorFormat | str = ErrorFormat.ESCAPED_TEXT) -> Any:
    """Renders ``errors`` (as returned by ``ValidationResult.errors``) in the requested format.

    - ``html``: each message HTML-escaped and followed by ``<br />`` and a newline.
    - ``escaped_text``: slash-escaped messages joined by newlines.
    - ``json``: a JSON array of the messages.
    - ``raw``: an ordered dict keyed by the error kind values.
    - ``js_array``: a script array literal of single-quoted, slash-escaped messages.
    - ``text``: messages joined by newlines.
    """
    fmt = ErrorFormat(fmt)
    messages = list(errors.values())

    if fmt is ErrorFormat.HTML:
        return "".join(f"{html.escape(message)}<br />\n" for message in messages)
    if fmt is ErrorFormat.ESCAPED_TEXT:
        return "\n".join(add_slashes(message) for message in messages)
    if fmt is ErrorFormat.JSON:
        return json.dumps(messages, ensure_ascii=False)
    if fmt is ErrorFormat.RAW:
        return {ErrorKind(kind).value: message for kind, message in errors.items()}
    if fmt is ErrorFormat.JS_ARRAY:
        return "[" + ",".join(f"'{add_slashes(message)}'" for message in messages) + "]"
    return "\n".join(messages)
