"""Small self-contained analyzers usable without any external detector.

Factories take the code registry so they can be named in ``--analyzer``
specs, e.g. ``codec=src.analyzers.builtin:codec_probe``.
"""

from __future__ import annotations

import codecs
import unicodedata
from collections import Counter
from typing import Any, Callable, Optional, Sequence, Tuple

from src.codes import CodeRegistry

from .base import ENCODING, SCRIPT, Analysis, Analyzer, TextInfo
from .encoding import try_decode

# Checked in order; the first strict decode wins ties on printable share.
DEFAULT_CANDIDATES: Tuple[str, ...] = (
    "ascii",
    "utf-8",
    "utf-16",
    "cp1251",
    "cp1252",
    "koi8-r",
    "shift_jis",
    "euc-kr",
    "gb18030",
    "big5",
    "iso8859-1",
)

BOMS: Tuple[Tuple[bytes, str], ...] = (
    (codecs.BOM_UTF32_LE, "utf-32"),
    (codecs.BOM_UTF32_BE, "utf-32"),
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)


def _printable_share(text: str) -> float:
    if not text:
        return 0.0
    printable = sum(1 for ch in text if ch.isprintable() or ch in "\r\n\t")
    return printable / len(text)


class CodecProbeAnalyzer(Analyzer):
    """Rank candidate codecs by whether they decode the bytes cleanly."""

    def __init__(self, candidates: Sequence[str] = DEFAULT_CANDIDATES) -> None:
        super().__init__((bytes,), (ENCODING,), produces_rankings=True, produces_scores=True)
        self.candidates = tuple(candidates)

    def _analyze(self, input: Any, collect: Callable[[Optional[Analysis]], None]) -> None:
        data = bytes(input)
        for bom, encoding in BOMS:
            if data.startswith(bom):
                collect(_encoding_answer(encoding, 1.0))
                return
        for encoding in self.candidates:
            text = try_decode(data, encoding)
            if text is None:
                continue
            collect(_encoding_answer(encoding, _printable_share(text)))


def _encoding_answer(encoding: str, score: float) -> TextInfo:
    info = TextInfo()
    info.encoding = encoding
    info.score = score
    return info


class UnicodeScriptAnalyzer(Analyzer):
    """Rank writing systems by the share of letters that belong to each."""

    def __init__(self, registry: CodeRegistry) -> None:
        super().__init__((str,), (SCRIPT,), produces_rankings=True, produces_scores=True)
        self.registry = registry

    def _script_name(self, ch: str) -> Optional[str]:
        name = unicodedata.name(ch, "")
        if not name:
            return None
        head = name.split(" ", 1)[0]
        return "Han" if head == "CJK" else head.title()

    def _analyze(self, input: Any, collect: Callable[[Optional[Analysis]], None]) -> None:
        counts: Counter = Counter()
        for ch in str(input):
            if ch.isalpha():
                script_name = self._script_name(ch)
                if script_name is not None:
                    counts[script_name] += 1
        total = sum(counts.values())
        for script_name, count in counts.most_common():
            script = self.registry.script(script_name)
            if script is None:
                continue
            info = TextInfo()
            info.script = script
            info.score = count / total
            collect(info)


def codec_probe(registry: CodeRegistry) -> CodecProbeAnalyzer:
    return CodecProbeAnalyzer()


def unicode_script(registry: CodeRegistry) -> UnicodeScriptAnalyzer:
    return UnicodeScriptAnalyzer(registry)
