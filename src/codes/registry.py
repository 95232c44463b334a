"""Language and script code registry.

The registry is an explicitly constructed, immutable lookup table built once at
startup and handed to every consumer that needs to turn index text into
``Language``/``Script`` values.  Lookups accept either the code or the English
name, case-insensitively.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Tuple

from .tables import LANGUAGE_TABLE, SCRIPT_TABLE


@dataclass(frozen=True, order=True)
class Language:
    """ISO 639 language."""

    code: str
    name: str = field(compare=False)

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True, order=True)
class Script:
    """ISO 15924 writing system."""

    code: str
    name: str = field(compare=False)

    def __str__(self) -> str:
        return self.code


def language_text(language: Language) -> str:
    """Canonical text form used for features and composite keys."""
    return language.code.lower()


def script_text(script: Script) -> str:
    """Canonical text form used for features and composite keys."""
    return script.code.lower()


def _index(entries: Iterable[Tuple[str, str]], factory) -> Tuple[Tuple, Mapping[str, object]]:
    values = []
    lookup: dict[str, object] = {}
    for code, name in entries:
        value = factory(code=code, name=name)
        values.append(value)
        lookup.setdefault(code.strip().lower(), value)
        lookup.setdefault(name.strip().lower(), value)
    return tuple(values), lookup


class CodeRegistry:
    """Immutable language/script lookups."""

    def __init__(
        self,
        languages: Iterable[Tuple[str, str]],
        scripts: Iterable[Tuple[str, str]],
    ) -> None:
        self._languages, self._language_lookup = _index(languages, Language)
        self._scripts, self._script_lookup = _index(scripts, Script)

    @property
    def languages(self) -> Tuple[Language, ...]:
        return self._languages

    @property
    def scripts(self) -> Tuple[Script, ...]:
        return self._scripts

    def language(self, text: Optional[str]) -> Optional[Language]:
        """Return the language for a code or name, or None when unknown."""
        if text is None:
            return None
        return self._language_lookup.get(str(text).strip().lower())  # type: ignore[return-value]

    def script(self, text: Optional[str]) -> Optional[Script]:
        """Return the script for a code or name, or None when unknown."""
        if text is None:
            return None
        return self._script_lookup.get(str(text).strip().lower())  # type: ignore[return-value]


def build_default_registry(
    extra_languages: Iterable[Tuple[str, str]] = (),
    extra_scripts: Iterable[Tuple[str, str]] = (),
) -> CodeRegistry:
    """Build the registry from the bundled ISO tables plus optional extra entries."""
    return CodeRegistry(
        languages=list(LANGUAGE_TABLE) + list(extra_languages),
        scripts=list(SCRIPT_TABLE) + list(extra_scripts),
    )
