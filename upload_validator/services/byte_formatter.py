"""Conversion between byte counts and their human-readable shorthand."""

_UNITS: tuple[str, ...] = ("K", "M", "G")

# Byte-unit letter and thousands separator per locale
_BYTE_LETTER: dict[str, str] = {"en": "B", "fr": "o"}
_THOUSANDS_SEPARATOR: dict[str, str] = {"en": ",", "fr": " "}

_MULTIPLIERS: dict[str, int] = {"k": 1024, "m": 1024**2, "g": 1024**3}


def _is_power_of_two(value: int) -> bool:
    return value > 0 and value & (value - 1) == 0


def format_bytes(nbr_of_bytes: int, locale: str = "en") -> str:
    """Renders a byte count for display in an error message.

    Exact powers of two are scaled by 1024 up to the largest applicable unit
    (K, M or G), so 131072 becomes ``"128 KB"``. Any other count is rendered
    unscaled with the locale's thousands grouping (``"128,000 B"``). French
    uses ``o`` (octet) as the byte letter.

    Args:
        nbr_of_bytes: The count to render.
        locale: ``"en"`` or ``"fr"``. Anything else renders as ``"en"``.

    Returns:
        The rendered string.
    """
    letter = _BYTE_LETTER.get(locale, _BYTE_LETTER["en"])
    count = int(nbr_of_bytes)

    if _is_power_of_two(count):
        unit = ""
        for candidate in _UNITS:
            if count < 1024:
                break
            count //= 1024
            unit = candidate
        return f"{count} {unit}{letter}"

    separator = _THOUSANDS_SEPARATOR.get(locale, _THOUSANDS_SEPARATOR["en"])
    grouped = f"{count:,}".replace(",", separator)
    return f"{grouped} {letter}"


def shorthand_to_bytes(value: str | int) -> int:
    """Converts a shorthand size such as ``"2M"`` or ``"512k"`` into bytes.

    Bare integers (or digit strings) are returned unchanged.

    Raises:
        ValueError: If the value is empty or not a number with an optional K/M/G suffix.
    """
    if isinstance(value, int):
        return value
    text = value.strip()
    if not text:
        raise ValueError("Empty size shorthand")
    multiplier = _MULTIPLIERS.get(text[-1].lower())
    if multiplier is None:
        return int(text)
    return int(text[:-1].strip()) * multiplier
