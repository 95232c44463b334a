"""Language and script code registry."""

from .registry import CodeRegistry, Language, Script, build_default_registry, language_text, script_text

__all__ = [
    "CodeRegistry",
    "Language",
    "Script",
    "build_default_registry",
    "language_text",
    "script_text",
]
