from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from src.analyzers import TextInfo, decode
from src.codes import Language, Script


@dataclass(frozen=True)
class InputRecord:
    """One labeled sample: raw bytes plus the declared encoding, language and script."""

    input_file: Path
    data: bytes = field(repr=False)
    encoding: str
    language: Language
    script: Script

    def text(self) -> str:
        """Decode the bytes with the declared encoding."""
        return decode(self.data, self.encoding)

    def text_info(self) -> TextInfo:
        info = TextInfo()
        info.size = len(self.data)
        info.encoding = self.encoding
        info.language = self.language
        info.script = self.script
        return info
