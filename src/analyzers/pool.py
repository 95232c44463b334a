"""Explicit id -> analyzer registry shared by training, voting and testing."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from .base import Analysis, Analyzer

logger = logging.getLogger(__name__)

IdFilter = Callable[[str], bool]
AnalyzerFilter = Callable[[Analyzer], bool]


class AnalyzerPool:
    """Upstream analyzers keyed by a short string identifier.

    The pool is built once at start up and handed to every consumer; nothing in
    the project looks analyzers up through module level state.
    """

    def __init__(self, analyzers: Optional[Mapping[str, Analyzer]] = None) -> None:
        self._analyzers: Dict[str, Analyzer] = {}
        for analyzer_id, analyzer in (analyzers or {}).items():
            self.register(analyzer_id, analyzer)

    def register(self, analyzer_id: str, analyzer: Analyzer) -> "AnalyzerPool":
        analyzer_id = (analyzer_id or "").strip()
        if not analyzer_id:
            raise ValueError("Analyzer id is required.")
        if analyzer is None:
            raise ValueError(f"Analyzer required for id {analyzer_id!r}.")
        if analyzer_id in self._analyzers:
            raise ValueError(f"Duplicate analyzer id: {analyzer_id!r}")
        self._analyzers[analyzer_id] = analyzer
        return self

    def ids(self) -> List[str]:
        return sorted(self._analyzers)

    def __contains__(self, analyzer_id: object) -> bool:
        return analyzer_id in self._analyzers

    def __len__(self) -> int:
        return len(self._analyzers)

    def __iter__(self) -> Iterator[Tuple[str, Analyzer]]:
        return iter(sorted(self._analyzers.items()))

    def get(self, analyzer_id: str) -> Analyzer:
        try:
            return self._analyzers[analyzer_id]
        except KeyError as exc:
            raise ValueError(f"Unknown analyzer id: {analyzer_id!r}") from exc

    def select(
        self,
        id_filter: Optional[IdFilter] = None,
        analyzer_filter: Optional[AnalyzerFilter] = None,
    ) -> List[Tuple[str, Analyzer]]:
        """Analyzers passing both filters, ordered by id."""
        return [
            (analyzer_id, analyzer)
            for analyzer_id, analyzer in self
            if (id_filter is None or id_filter(analyzer_id))
            and (analyzer_filter is None or analyzer_filter(analyzer))
        ]

    def run(
        self,
        input: Any,
        id_filter: Optional[IdFilter] = None,
        analyzer_filter: Optional[AnalyzerFilter] = None,
    ) -> Dict[str, List[Analysis]]:
        """Run every selected analyzer that accepts ``input``; results keyed by id."""
        results: Dict[str, List[Analysis]] = {}
        if input is None:
            return results
        for analyzer_id, analyzer in self.select(id_filter, analyzer_filter):
            if analyzer.accepts(type(input)):
                results[analyzer_id] = analyzer.analyze(input)
        return results

    def dispose(self) -> None:
        for analyzer_id, analyzer in self:
            logger.debug("Disposing analyzer %s", analyzer_id)
            analyzer.dispose()

    def __repr__(self) -> str:
        return f"AnalyzerPool[{', '.join(self.ids())}]"
