"""Shared stub analyzers and fixtures."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from src.analyzers import ENCODING, LANGUAGE, SCRIPT, Analysis, Analyzer, AnalyzerPool, TextInfo
from src.codes import CodeRegistry, build_default_registry
from src.datahub import InputRecord


# ---------------------------------------------------------------------------
# Stub analyzers


class StubEncodingAnalyzer(Analyzer):
    """Answers a fixed ranked list of encodings for any byte input."""

    def __init__(self, encodings: Sequence[str], scores: Optional[Sequence[float]] = None) -> None:
        super().__init__((bytes,), (ENCODING,), produces_rankings=len(encodings) > 1, produces_scores=scores is not None)
        self.encodings = list(encodings)
        self.scores = list(scores) if scores is not None else None
        self.calls = 0

    def _analyze(self, input: Any, collect: Callable[[Optional[Analysis]], None]) -> None:
        self.calls += 1
        for idx, encoding in enumerate(self.encodings):
            info = TextInfo()
            info.encoding = encoding
            if self.scores is not None:
                info.score = self.scores[idx]
            collect(info)


class StubTextAnalyzer(Analyzer):
    """Answers language and script from a lookup keyed by a marker substring."""

    def __init__(self, registry: CodeRegistry, answers: Iterable[Tuple[str, str, str]]) -> None:
        super().__init__((str,), (LANGUAGE, SCRIPT))
        self.registry = registry
        self.answers = list(answers)
        self.calls = 0

    def _analyze(self, input: Any, collect: Callable[[Optional[Analysis]], None]) -> None:
        self.calls += 1
        for marker, language, script in self.answers:
            if marker in input:
                info = TextInfo()
                info.language = self.registry.language(language)
                info.script = self.registry.script(script)
                collect(info)
                return


class FailingAnalyzer(Analyzer):
    def __init__(self) -> None:
        super().__init__((bytes,), (ENCODING,))

    def _analyze(self, input: Any, collect: Callable[[Optional[Analysis]], None]) -> None:
        raise RuntimeError("boom")


# ---------------------------------------------------------------------------
# Fixtures

SAMPLES: List[Tuple[str, str, str, str]] = [
    ("english", "utf-8", "en", "Latn"),
    ("russian", "utf-8", "ru", "Cyrl"),
]


@pytest.fixture
def registry() -> CodeRegistry:
    return build_default_registry()


@pytest.fixture
def text_analyzer(registry: CodeRegistry) -> StubTextAnalyzer:
    return StubTextAnalyzer(registry, [("hello", "en", "Latn"), ("привет", "ru", "Cyrl")])


@pytest.fixture
def pool(registry: CodeRegistry, text_analyzer: StubTextAnalyzer) -> AnalyzerPool:
    return AnalyzerPool(
        {
            "enc": StubEncodingAnalyzer(["utf-8", "ascii"], scores=[0.9, 0.1]),
            "txt": text_analyzer,
        }
    )


def make_records(tmp_path: Path, registry: CodeRegistry, repeat: int = 4) -> List[InputRecord]:
    """English and Russian UTF-8 samples written under ``tmp_path``."""
    texts = {"en": "hello world number {}", "ru": "привет мир номер {}"}
    records: List[InputRecord] = []
    for idx in range(repeat):
        for language, script in (("en", "Latn"), ("ru", "Cyrl")):
            path = tmp_path / f"{language}_{idx}.txt"
            data = texts[language].format(idx).encode("utf-8")
            path.write_bytes(data)
            records.append(
                InputRecord(
                    input_file=path,
                    data=data,
                    encoding="utf-8",
                    language=registry.language(language),
                    script=registry.script(script),
                )
            )
    return records


def write_index(tmp_path: Path, rows: Iterable[str]) -> Path:
    index = tmp_path / "index.csv"
    index.write_text("\n".join(["path,encoding,language,script", *rows]) + "\n", encoding="utf-8")
    return index
