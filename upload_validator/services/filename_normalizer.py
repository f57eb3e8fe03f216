"""Turns human-entered filenames into restricted, machine-safe slugs."""

import re

# Control characters other than tab, newline and carriage return, plain and URL-encoded
_INVISIBLE_PATTERN = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]+")
_URL_ENCODED_INVISIBLE_PATTERNS = (
    re.compile(r"%0[0-8bcef]", re.IGNORECASE),
    re.compile(r"%1[0-9a-f]", re.IGNORECASE),
)

_REMOVED_CHARACTERS = str.maketrans("", "", "\t\n\r\0\x0b")
_WHITESPACE_RUN = re.compile(r"\s+")
_SLASH_ESCAPE = re.compile(r"\\(.?)", re.DOTALL)

TRANSLITERATIONS: dict[str, str] = {
    "À": "A", "È": "E", "Ì": "I", "Ò": "O", "Ù": "U",
    "à": "a", "è": "e", "ì": "i", "ò": "o", "ù": "u",
    "Á": "A", "É": "E", "Í": "I", "Ó": "O", "Ú": "U", "Ý": "Y",
    "á": "a", "é": "e", "í": "i", "ó": "o", "ú": "u", "ý": "y",
    "Â": "A", "Ê": "E", "Î": "I", "Ô": "O", "Û": "U",
    "â": "a", "ê": "e", "î": "i", "ô": "o", "û": "u",
    "Ã": "A", "Ñ": "N", "Õ": "O", "ã": "a", "ñ": "n", "õ": "o",
    "Ä": "A", "Ë": "E", "Ï": "I", "Ö": "O", "Ü": "U", "Ÿ": "Y",
    "ä": "a", "ë": "e", "ï": "i", "ö": "o", "ü": "u", "ÿ": "y",
    "Ç": "C", "ç": "c", "Æ": "AE", "æ": "ae", "Œ": "OE", "œ": "oe",
    "β": "b", "&": "and", "@": "at", ".": "_",
}


def remove_invisible_characters(text: str, url_encoded: bool = True) -> str:
    """Strips control characters so they cannot be sandwiched between visible ones (``java\\0script``).

    Tab, newline and carriage return are kept. With ``url_encoded`` the
    ``%00``-``%1f`` escapes of the removed characters are stripped too. Removal
    repeats until nothing changes, since stripping one sequence can form another.
    """
    patterns = [_INVISIBLE_PATTERN]
    if url_encoded:
        patterns = [*_URL_ENCODED_INVISIBLE_PATTERNS, _INVISIBLE_PATTERN]

    while True:
        count = 0
        for pattern in patterns:
            text, n = pattern.subn("", text)
            count += n
        if not count:
            return text


# Removed in order, so "../" goes before "./" and "/"
_UNSAFE_FILENAME_SEQUENCES: tuple[str, ...] = (
    "../", "<!--", "-->", "<", ">", "'", '"', "&", "$", "#", "{", "}", "[", "]", "=", ";", "?",
    "%20", "%22", "%3c", "%253c", "%3e", "%0e", "%28", "%29", "%2528", "%26", "%24", "%3f", "%3b", "%3d",
)
_PATH_SEQUENCES: tuple[str, ...] = ("./", "/")


def _strip_slashes(text: str) -> str:
    # "\x" -> "x", "\\" -> "\"
    return _SLASH_ESCAPE.sub(r"\1", text)


def slugify(text: str, whitespace_replacement: str = "-") -> str:
    """Converts a human-readable string into a slug.

    Steps, in order: trim and drop slash escapes, lowercase, delete tabs,
    newlines, carriage returns, nulls and vertical tabs, collapse whitespace
    runs into ``whitespace_replacement``, transliterate accented letters and a
    few symbols (``&`` -> ``and``, ``@`` -> ``at``, ``.`` -> ``_``), then drop
    every code point outside ``[a-z0-9_()-]`` and the separator.

    >>> slugify("Café — Déjà Vu.JPG")
    'cafe--deja-vu_jpg'
    """
    text = _strip_slashes(remove_invisible_characters(text.strip(), url_encoded=False))
    text = text.lower().translate(_REMOVED_CHARACTERS)
    text = _WHITESPACE_RUN.sub(whitespace_replacement, text)

    transliterated = "".join(TRANSLITERATIONS.get(char, char) for char in text)

    return "".join(char for char in transliterated if _is_slug_character(char, whitespace_replacement))


def _is_slug_character(char: str, separator: str) -> bool:
    return ("a" <= char <= "z") or ("0" <= char <= "9") or char in "_()-" or char in separator


def sanitize_filename(text: str, relative_path: bool = False) -> str:
    """Removes traversal sequences, markup, quotes, shell metacharacters and their URL-encoded forms.

    Unless ``relative_path`` is set, ``./`` and ``/`` are removed too, so the
    result cannot name a subdirectory. Matching is case-sensitive.

    >>> sanitize_filename("../../etc/passwd")
    'etcpasswd'
    >>> sanitize_filename("img/../<b>cat</b>.png", relative_path=True)
    'img/bcat/b.png'
    """
    sequences = _UNSAFE_FILENAME_SEQUENCES if relative_path else _UNSAFE_FILENAME_SEQUENCES + _PATH_SEQUENCES
    text = remove_invisible_characters(text, url_encoded=False)
    for sequence in sequences:
        text = text.replace(sequence, "")
    return _strip_slashes(text)
