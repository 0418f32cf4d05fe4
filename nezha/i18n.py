"""Message translation with per-language catalogues that can be switched at runtime."""

from __future__ import annotations

import gettext
import threading
from collections.abc import Mapping, Sequence
from typing import Any, Union

LANGUAGES = {
    "zh_CN": "简体中文",
    "zh_TW": "繁體中文",
    "en_US": "English",
    "es_ES": "Español",
    "de_DE": "Deutsch",
}

CatalogValue = Union[str, Sequence[str]]


class _MappingTranslations(gettext.NullTranslations):
    """Translations backed by a plain mapping of msgid to a string or plural forms."""

    def __init__(self, catalog: Mapping[str, CatalogValue]) -> None:
        super().__init__()
        self._messages = dict(catalog)

    def gettext(self, message: str) -> str:
        value = self._messages.get(message)
        if value is None:
            return message
        if isinstance(value, str):
            return value
        forms = list(value)
        return forms[0] if forms else message

    def ngettext(self, msgid1: str, msgid2: str, n: int) -> str:
        value = self._messages.get(msgid1)
        if value is None:
            return msgid1 if n == 1 else msgid2
        if isinstance(value, str):
            return value
        forms = list(value)
        if not forms:
            return msgid1 if n == 1 else msgid2
        index = 0 if n == 1 else 1
        return forms[min(index, len(forms) - 1)]


def _as_translations(
    translations: gettext.NullTranslations | Mapping[str, CatalogValue],
) -> gettext.NullTranslations:
    if isinstance(translations, gettext.NullTranslations):
        return translations
    if isinstance(translations, Mapping):
        return _MappingTranslations(translations)
    raise TypeError(f"unsupported translations object: {type(translations).__name__}")


def _format(template: str, args: tuple[Any, ...]) -> str:
    if not args:
        return template
    try:
        return template % args
    except (TypeError, ValueError):
        return template


class Localizer:
    """Holds one translation catalogue per language and translates with the active one."""

    def __init__(
        self,
        lang: str,
        translations: gettext.NullTranslations | Mapping[str, CatalogValue],
    ) -> None:
        self._catalogs: dict[str, gettext.NullTranslations] = {lang: _as_translations(translations)}
        self._lang = lang
        self._lock = threading.Lock()

    @property
    def language(self) -> str:
        with self._lock:
            return self._lang

    def set_language(self, lang: str) -> None:
        with self._lock:
            self._lang = lang

    def exists(self, lang: str) -> bool:
        with self._lock:
            return lang in self._catalogs

    def append(
        self,
        lang: str,
        translations: gettext.NullTranslations | Mapping[str, CatalogValue],
    ) -> None:
        """Add or replace the catalogue for lang."""
        catalog = _as_translations(translations)
        with self._lock:
            self._catalogs[lang] = catalog

    def _active(self) -> gettext.NullTranslations | None:
        with self._lock:
            return self._catalogs.get(self._lang)

    def t(self, orig: str) -> str:
        """Translate orig; without a catalogue for the active language it is returned as is."""
        catalog = self._active()
        if catalog is None:
            return orig
        return catalog.gettext(orig)

    def n(self, orig: str, *args: int) -> str:
        """Translate orig; with a count, pick the plural form and substitute the count."""
        catalog = self._active()
        if catalog is None:
            return orig
        if not args:
            return catalog.gettext(orig)
        count = args[0]
        return _format(catalog.ngettext(orig, orig + ".plural", count), (count,))

    def error(self, default: str, *args: Any) -> RuntimeError:
        """Build an exception carrying the translated, formatted message."""
        return RuntimeError(self.tf(default, *args))

    def tf(self, default: str, *args: Any) -> str:
        """Translate default and substitute args into it."""
        return _format(self.t(default), args)