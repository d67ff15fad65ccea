"""Human-readable language labels and translated file naming."""

import re

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "zh": "Chinese",
    "ja": "Japanese",
    "ko": "Korean",
}

_EXTENSION_PATTERN = re.compile(r"\.[^/.]+$")


def language_display_name(code: str) -> str:
    """Returns the English display name for a language tag, or the tag upper-cased."""
    return LANGUAGE_NAMES.get(code, code.upper())


def strip_extension(title: str) -> str:
    return _EXTENSION_PATTERN.sub("", title)


def translated_file_name(title: str, target_language: str, extension: str) -> str:
    """
    Builds `{originalNameWithoutExtension}_{TargetLanguageDisplayName}.{ext}`.

    Example:
        translated_file_name("notes.txt", "es", "pdf") -> "notes_Spanish.pdf"
    """
    return f"{strip_extension(title)}_{language_display_name(target_language)}.{extension}"
