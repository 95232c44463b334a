"""Analyzer contract and the analysis result types it produces."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Generic, Iterable, List, Optional, Type, TypeVar

from src.codes import Language, Script

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass(frozen=True)
class AnalysisFeature(Generic[V]):
    """Named attribute an analyzer may report."""

    name: str
    value_type: type

    def __repr__(self) -> str:
        return f"AnalysisFeature[{self.name}]"


SIZE: AnalysisFeature[int] = AnalysisFeature("size", int)
ENCODING: AnalysisFeature[str] = AnalysisFeature("encoding", str)
LENGTH: AnalysisFeature[int] = AnalysisFeature("length", int)
LANGUAGE: AnalysisFeature[Language] = AnalysisFeature("language", Language)
SCRIPT: AnalysisFeature[Script] = AnalysisFeature("script", Script)


class Analysis:
    """Feature values from one analyzer answer, with an optional score."""

    def __init__(self, to_copy: Optional["Analysis"] = None) -> None:
        self._features: Dict[AnalysisFeature[Any], Any] = {}
        self.score: Optional[float] = None
        if to_copy is not None:
            self._features.update(to_copy._features)
            self.score = to_copy.score

    @property
    def features(self) -> FrozenSet[AnalysisFeature[Any]]:
        return frozenset(self._features)

    def __contains__(self, feature: object) -> bool:
        return feature in self._features

    def get(self, feature: AnalysisFeature[V]) -> Optional[V]:
        return self._features.get(feature)

    def set(self, feature: AnalysisFeature[V], value: Optional[V]) -> None:
        if value is None:
            self._features.pop(feature, None)
        else:
            self._features[feature] = value

    def remove(self, feature: AnalysisFeature[Any]) -> None:
        self._features.pop(feature, None)

    def __repr__(self) -> str:
        values = ", ".join(f"{feature.name}={value!r}" for feature, value in self._features.items())
        return f"{type(self).__name__}[{values}; score={self.score}]"


class TextInfo(Analysis):
    """Analysis specialised to the text attributes."""

    def __init__(self, to_copy: Optional[Analysis] = None) -> None:
        super().__init__(to_copy)
        if self.encoding is not None:
            self.encoding = self.encoding

    @classmethod
    def of(cls, analysis: Optional[Analysis]) -> Optional["TextInfo"]:
        if analysis is None:
            return None
        if isinstance(analysis, TextInfo):
            return analysis
        return cls(analysis)

    @property
    def size(self) -> Optional[int]:
        return self.get(SIZE)

    @size.setter
    def size(self, value: Optional[int]) -> None:
        self.set(SIZE, value)

    @property
    def encoding(self) -> Optional[str]:
        return self.get(ENCODING)

    @encoding.setter
    def encoding(self, value: Optional[str]) -> None:
        value = value.strip().lower() if value is not None else None
        self.set(ENCODING, value or None)

    @property
    def length(self) -> Optional[int]:
        return self.get(LENGTH)

    @length.setter
    def length(self, value: Optional[int]) -> None:
        self.set(LENGTH, value)

    @property
    def language(self) -> Optional[Language]:
        return self.get(LANGUAGE)

    @language.setter
    def language(self, value: Optional[Language]) -> None:
        self.set(LANGUAGE, value)

    @property
    def script(self) -> Optional[Script]:
        return self.get(SCRIPT)

    @script.setter
    def script(self, value: Optional[Script]) -> None:
        self.set(SCRIPT, value)


def _score_key(analysis: Analysis) -> tuple:
    # Highest score first; unscored answers last.
    return (analysis.score is None, -(analysis.score or 0.0))


class Analyzer(ABC):
    """A pluggable detector producing ranked answers for byte or text input."""

    def __init__(
        self,
        input_types: Iterable[type],
        output_features: Iterable[AnalysisFeature[Any]],
        produces_rankings: bool = False,
        produces_scores: bool = False,
    ) -> None:
        self.input_types: FrozenSet[type] = frozenset(t for t in input_types if t is not None)
        self.output_features: FrozenSet[AnalysisFeature[Any]] = frozenset(
            f for f in output_features if f is not None
        )
        if not self.input_types:
            raise ValueError("Analyzer input types are required.")
        if not self.output_features:
            raise ValueError("Analyzer output features are required.")
        self.produces_rankings = produces_rankings
        self.produces_scores = produces_scores
        self._available = True
        self._lock = threading.RLock()

    @property
    def available(self) -> bool:
        return self._available

    def accepts(self, input_type: Optional[Type[Any]]) -> bool:
        if input_type is None:
            return False
        return any(issubclass(input_type, accepted) for accepted in self.input_types)

    def produces(self, feature: AnalysisFeature[Any]) -> bool:
        return feature in self.output_features

    def analyze(self, input: Any) -> List[Analysis]:
        """Run the analyzer; answers are best first when the analyzer scores them."""
        with self._lock:
            if not self._available:
                raise RuntimeError("Analyzer is not available.")
        results: List[Analysis] = []
        if input is None or not self.accepts(type(input)):
            return results

        def collect(analysis: Optional[Analysis]) -> None:
            if analysis is not None and analysis.features:
                results.append(analysis)

        try:
            self._analyze(input, collect)
        except Exception:
            logger.exception("%s failed to analyze input.", type(self).__name__)
            return []
        if self.produces_scores:
            results.sort(key=_score_key)
        return results

    @abstractmethod
    def _analyze(self, input: Any, collect: Callable[[Optional[Analysis]], None]) -> None:
        ...

    def dispose(self) -> None:
        with self._lock:
            if self._available:
                self._available = False
                self._dispose()

    def _dispose(self) -> None:
        return None

    def __getstate__(self) -> dict:
        state = self.__dict__.copy()
        state.pop("_lock", None)
        return state

    def __setstate__(self, state: dict) -> None:
        self.__dict__.update(state)
        self._lock = threading.RLock()
