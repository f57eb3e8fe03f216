"""Locale message templates for validation errors.

A catalog is built once per validation run from the resolved locale and the
field label. Construction fails unless every ``ErrorKind`` has a template, so a
missing message surfaces when the catalog is built rather than when an error is
first rendered.
"""

import logging
from typing import Any

from upload_validator.core.exceptions import ConfigurationError
from upload_validator.core.validation import BASE_LOCALE
from upload_validator.core.validation import SUPPORTED_LOCALES
from upload_validator.models.upload_models import ErrorKind
from upload_validator.services.byte_formatter import format_bytes

logger = logging.getLogger(__name__)

MESSAGE_TEMPLATES: dict[str, dict[ErrorKind, str]] = {
    "en": {
        ErrorKind.INVALID_FILE_EXTENSION: "{label}File uploads are restricted to only the following types: ({allowed_types})",
        ErrorKind.FILE_UPLOAD_SIZE_TOO_LARGE: "{label}The file upload cannot exceed {max_size} in size. (Your file: {file_size})",
        ErrorKind.FILE_SIZE_TOO_LARGE: "{label}The file upload cannot exceed {max_size} in size.",
        ErrorKind.FILE_SIZE_ZERO: "{label}The file was not uploaded because it contains zero bytes.",
        ErrorKind.INVALID_IMAGE_DIMENSIONS: "{label}The server was unable to determine the image's dimensions.",
        ErrorKind.IMAGE_DIMENSIONS_OUT_OF_BOUNDS: "{label}The image must be {width_rule} and {height_rule}. (Your image: {img_width}px wide by {img_height}px high)",
        ErrorKind.INVALID_FILENAME: (
            "{label}The name of the file you are trying to upload is invalid. "
            "File names can only contain letters, digits, underscores, hyphens, parentheses, and/or periods."
        ),
        ErrorKind.FILENAME_TOO_LONG: "{label}The file name cannot exceed {max_length} characters. (Your file: {filename_length} characters)",
        ErrorKind.MOVE_UPLOADED_FILE_FAILED: "{label}The server could not move the uploaded file from the temporary directory.",
        ErrorKind.FILE_UPLOAD_PARTIAL: "{label}The file was only partially uploaded.",
        ErrorKind.NO_FILE_UPLOADED: "{label}No file was uploaded.",
        ErrorKind.MISSING_TEMPORARY_FOLDER: "{label}A temporary folder for the uploaded file is missing.",
        ErrorKind.FAILED_WRITE_TO_DISK: "{label}The file could not be written to disk.",
        ErrorKind.UNKNOWN_ERROR: "{label}An unhandled error occurred. (Code: {code})",
    },
    "fr": {
        ErrorKind.INVALID_FILE_EXTENSION: "{label}Le téléchargement de ce type de fichier n'est pas permis. (Types permis: {allowed_types})",
        ErrorKind.FILE_UPLOAD_SIZE_TOO_LARGE: "{label}Le poids du téléchargement dépasse la limite permise de {max_size}. (Votre fichier: {file_size})",
        ErrorKind.FILE_SIZE_TOO_LARGE: "{label}Le poids du téléchargement dépasse la limite permise de {max_size}.",
        ErrorKind.FILE_SIZE_ZERO: "{label}Le fichier n'a pas été téléchargé parce qu'il contient zéro octet.",
        ErrorKind.INVALID_IMAGE_DIMENSIONS: "{label}Le serveur ne peut déterminer les dimensions de l'image.",
        ErrorKind.IMAGE_DIMENSIONS_OUT_OF_BOUNDS: "{label}L'image doit avoir {width_rule} et {height_rule}. (Votre image: {img_width}px en largeur et {img_height}px en hauteur)",
        ErrorKind.INVALID_FILENAME: "{label}Le nom du fichier doit contenir seulement des caractères alphanumériques ou les caractères suivants: ()._-",
        ErrorKind.FILENAME_TOO_LONG: "{label}Le nom du fichier ne doit pas contenir plus de {max_length} caractères. (Votre fichier: {filename_length} caractères)",
        ErrorKind.MOVE_UPLOADED_FILE_FAILED: "{label}Le serveur n'a pu copier le fichier du dossier temporaire.",
        ErrorKind.FILE_UPLOAD_PARTIAL: "{label}Le fichier n'a été que partiellement téléchargé.",
        ErrorKind.NO_FILE_UPLOADED: "{label}Aucun fichier n'a été envoyé.",
        ErrorKind.MISSING_TEMPORARY_FOLDER: "{label}Il manque un dossier temporaire pour stocker le fichier.",
        ErrorKind.FAILED_WRITE_TO_DISK: "{label}Le fichier n'a pu être copié.",
        ErrorKind.UNKNOWN_ERROR: "{label}Une erreur inconnue est survenue lors du téléchargement. (Code: {code})",
    },
}

# Dimension phrasing: (range, single value) per axis
_DIMENSION_RULES: dict[str, dict[str, tuple[str, str]]] = {
    "en": {
        "width": ("between {low}px and {high}px wide", "{high}px wide"),
        "height": ("between {low}px and {high}px high", "{high}px high"),
    },
    "fr": {
        "width": ("entre {low}px et {high}px en largeur", "{high}px en largeur"),
        "height": ("entre {low}px et {high}px en hauteur", "{high}px en hauteur"),
    },
}


def resolve_locale(locale: str) -> str:
    """Returns ``locale`` if supported, otherwise the base locale with a warning."""
    if locale in SUPPORTED_LOCALES:
        return locale
    logger.warning("Locale '%s' not supported - reverting to '%s'.", locale, BASE_LOCALE)
    return BASE_LOCALE


class ErrorCatalog:
    """Renders validation errors in one locale, prefixed by the field label."""

    def __init__(
        self,
        locale: str = BASE_LOCALE,
        label: str = "",
        templates: dict[str, dict[ErrorKind, str]] | None = None,
    ) -> None:
        all_templates = MESSAGE_TEMPLATES if templates is None else templates
        self.locale = resolve_locale(locale)
        self.label = label
        self._templates = all_templates.get(self.locale, {})

        missing = [kind.value for kind in ErrorKind if kind not in self._templates]
        if missing:
            raise ConfigurationError(f"No error message defined for {', '.join(missing)} in locale '{self.locale}'")

    def render(self, kind: ErrorKind, label: str | None = None, **params: Any) -> str:
        """Renders the message for ``kind``.

        Args:
            kind: The error to describe.
            label: Overrides the catalog's field label for this message.
            **params: Kind-specific values. Sizes are raw byte counts
                (``max_size``, ``file_size``), image bounds are ints
                (``min_width``, ``max_width``, ``min_height``, ``max_height``,
                ``img_width``, ``img_height``), ``allowed_types`` is a list.
        """
        field_label = self.label if label is None else label
        values: dict[str, Any] = dict(params)
        values["label"] = f"{field_label}: " if field_label else ""

        if "allowed_types" in values and not isinstance(values["allowed_types"], str):
            values["allowed_types"] = ", ".join(values["allowed_types"])
        for key in ("max_size", "file_size"):
            if key in values:
                values[key] = format_bytes(values[key], self.locale)
        if kind is ErrorKind.IMAGE_DIMENSIONS_OUT_OF_BOUNDS:
            values["width_rule"] = self._dimension_rule("width", values["min_width"], values["max_width"])
            values["height_rule"] = self._dimension_rule("height", values["min_height"], values["max_height"])

        return self._templates[kind].format(**values)

    def _dimension_rule(self, axis: str, low: int, high: int) -> str:
        ranged, single = _DIMENSION_RULES[self.locale][axis]
        template = single if low == high else ranged
        return template.format(low=low, high=high)
