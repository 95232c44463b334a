"""Majority vote composite over the pool analyzers."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Iterable, Optional

from src.config import MAX_VOTES

from .base import ENCODING, LANGUAGE, SCRIPT, AnalysisFeature
from .election import Election
from .encoding import normalize_encoding
from .ensemble import EnsembleAnalyzer, ResultsByInput, Working
from .pool import AnalyzerPool

logger = logging.getLogger(__name__)


class VotingAnalyzer(EnsembleAnalyzer):
    """Elect each attribute from the ranked answers of the selected analyzers.

    An analyzer that answers for both the bytes and the decoded text has its
    votes split evenly between the two.  No analyzer ids means every analyzer in
    the pool votes.
    """

    def __init__(self, pool: AnalyzerPool, analyzer_ids: Optional[Iterable[str]] = None) -> None:
        super().__init__(pool)
        self.analyzer_ids = frozenset(analyzer_ids or ())

    def _selected(self, analyzer_id: str) -> bool:
        return not self.analyzer_ids or analyzer_id in self.analyzer_ids

    def _elect(self, working: Working, feature: AnalysisFeature[Any]) -> Optional[Any]:
        results: ResultsByInput = working.run_analyzers(self._selected, lambda a: a.produces(feature))
        answered = Counter(analyzer_id for by_id in results.values() for analyzer_id in by_id)
        election: Election[Any] = Election(MAX_VOTES)
        for by_id in results.values():
            for analyzer_id, analyses in by_id.items():
                weight = 1.0 / answered[analyzer_id]
                for rank, analysis in enumerate(analyses, start=1):
                    value = analysis.get(feature)
                    if feature is ENCODING:
                        value = normalize_encoding(value)
                        analysis.set(ENCODING, value)
                    if value is not None:
                        election.add(value, rank, weight)
        return election.winner()

    def identify_encoding(self, working: Working) -> None:
        if not working.input_data:
            return
        encoding = self._elect(working, ENCODING)
        if encoding is None:
            logger.error("Could not determine encoding for binary input.")
            return
        working.encoding = encoding

    def identify_language(self, working: Working) -> None:
        if working.input_text and working.input_text.strip():
            language = self._elect(working, LANGUAGE)
            if language is not None:
                working.language = language

    def identify_script(self, working: Working) -> None:
        if working.input_text and working.input_text.strip():
            script = self._elect(working, SCRIPT)
            if script is not None:
                working.script = script
