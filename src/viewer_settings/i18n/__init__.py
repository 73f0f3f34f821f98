"""Internationalization (i18n) module for Viewer Settings Sync."""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

FALLBACK_LANGUAGE = "en"
LANGUAGE_NAMES = {
    "en": "English",
    "sv": "Svenska",
}


class Translator:
    """JSON-based translation system.

    Strings missing from the selected language fall back to English, and
    keys missing from both are returned unchanged.
    """

    _translations: dict = {}
    _language: str = ""

    @classmethod
    def initialize(cls, language: str) -> None:
        """Load the translations of a language.

        Args:
            language: Language code ("en" or "sv")
        """
        if cls._language == language and cls._translations:
            return

        translations = cls._read(FALLBACK_LANGUAGE)
        if language != FALLBACK_LANGUAGE:
            overlay = cls._read(language)
            if not overlay:
                logger.warning(f"No translations for '{language}', using English")
                language = FALLBACK_LANGUAGE
            translations.update(overlay)

        cls._translations = translations
        cls._language = language
        logger.info(f"Loaded translations for '{language}'")

    @staticmethod
    def _read(language: str) -> dict:
        lang_file = Path(__file__).parent / f"{language}.json"
        if not lang_file.exists():
            logger.warning(f"Translation file not found: {lang_file}")
            return {}

        try:
            with open(lang_file, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error(f"Failed to load translations for '{language}': {e}")
            return {}

    @classmethod
    def get(cls, key: str, **kwargs) -> str:
        """Get a translated string.

        Args:
            key: Translation key
            **kwargs: Format arguments for the string

        Returns:
            Translated string, or key if not found
        """
        if not cls._translations:
            cls.initialize(FALLBACK_LANGUAGE)

        text = cls._translations.get(key, key)

        if kwargs:
            try:
                text = text.format(**kwargs)
            except (KeyError, ValueError):
                pass

        return text

    @classmethod
    def get_language(cls) -> str:
        """Get the current language code."""
        return cls._language or FALLBACK_LANGUAGE

    @classmethod
    def get_available_languages(cls) -> list[tuple[str, str]]:
        """Get the languages that have a translation file.

        Returns:
            List of (code, name) tuples
        """
        i18n_dir = Path(__file__).parent
        codes = sorted(p.stem for p in i18n_dir.glob("*.json"))
        return [(code, LANGUAGE_NAMES.get(code, code)) for code in codes]


def _(key: str, **kwargs) -> str:
    """Shortcut function for getting translations."""
    return Translator.get(key, **kwargs)


def init_translator(language: str) -> None:
    """Initialize the translator with a language."""
    Translator.initialize(language)


def get_language() -> str:
    """Get the current language code."""
    return Translator.get_language()


def get_available_languages() -> list[tuple[str, str]]:
    """Get list of available languages."""
    return Translator.get_available_languages()
