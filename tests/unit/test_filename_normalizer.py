import re

import pytest

from upload_validator.services.filename_normalizer import remove_invisible_characters
from upload_validator.services.filename_normalizer import sanitize_filename
from upload_validator.services.filename_normalizer import slugify

SLUG = re.compile(r"[a-z0-9_()\-]*")


def test_accented_name_becomes_ascii_slug():
    slug = slugify("Café — Déjà Vu.JPG")
    assert SLUG.fullmatch(slug)
    assert slug == "cafe--deja-vu_jpg"
    assert all(ord(char) < 128 for char in slug)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("  My Holiday   Photo ", "my-holiday-photo"),
        ("Tom & Jerry", "tom-and-jerry"),
        ("me@home", "meathome"),
        ("archive.tar", "archive_tar"),
        ("Œuvre Æther", "oeuvre-aether"),
        ("Ça va? Über!", "ca-va-uber"),
        ("report(2)", "report(2)"),
        ("tab\there", "tabhere"),
        ("null\x00byte", "nullbyte"),
        ("O\\'Brien", "obrien"),
    ],
)
def test_slugify(text, expected):
    assert slugify(text) == expected


def test_custom_separator():
    assert slugify("a b  c", whitespace_replacement="_") == "a_b_c"


def test_output_never_contains_disallowed_characters():
    slug = slugify("../../etc/passwd <script>ÿ€漢字")
    assert SLUG.fullmatch(slug)
    assert "/" not in slug and "." not in slug


def test_remove_invisible_characters():
    assert remove_invisible_characters("java\x00script") == "javascript"
    assert remove_invisible_characters("keep\ttab\nand\rcr") == "keep\ttab\nand\rcr"
    assert remove_invisible_characters("a%0bb%1Fc") == "abc"
    assert remove_invisible_characters("a%0bb", url_encoded=False) == "a%0bb"


def test_remove_invisible_characters_repeats_until_stable():
    # Removing the inner escape exposes a new one
    assert remove_invisible_characters("%%0b0b") == ""


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("../../etc/passwd", "etcpasswd"),
        ("./report.pdf", "report.pdf"),
        ("a<!--b-->c.txt", "abc.txt"),
        ("it's \"quoted\".txt", "its quoted.txt"),
        ("$(rm -rf);#{x}[0]=?&.sh", "(rm -rf)x0.sh"),
        ("my%20file%3c%253c%2528.txt", "myfile.txt"),
        ("a\x00b\x1f.txt", "ab.txt"),
        ("back\\slash.txt", "backslash.txt"),
    ],
)
def test_sanitize_filename(raw, expected):
    assert sanitize_filename(raw) == expected


def test_sanitize_filename_keeps_relative_directories():
    assert sanitize_filename("img/../../cat<script>.png", relative_path=True) == "img/catscript.png"
    assert sanitize_filename("./img/cat.png", relative_path=True) == "./img/cat.png"


def test_sanitize_filename_is_case_sensitive_for_escapes():
    assert sanitize_filename("x%3Cy.txt") == "x%3Cy.txt"


def test_sanitize_filename_keeps_url_encoded_controls():
    # only raw control characters are removed here
    assert sanitize_filename("a%00b.txt") == "a%00b.txt"
