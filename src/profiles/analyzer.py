"""Packaged analyzer combining the three trained attribute forests."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from src.analyzers import ENCODING, LANGUAGE, SCRIPT, AnalyzerPool, EnsembleAnalyzer, Working
from src.analyzers.ensemble import Input
from src.codes import Language, Script
from src.features import FeatureData
from src.forest import TrainedForest

from .text_models import (
    ENCODING_PREFIX,
    LANGUAGE_PREFIX,
    SCRIPT_PREFIX,
    fill_features,
    produces_encoding,
    produces_language_or_script,
)

logger = logging.getLogger(__name__)


class ForestWorking(Working):
    """Working state that always decodes and shares one feature set across forests."""

    def __init__(self, input: Input, pool: AnalyzerPool) -> None:
        super().__init__(input, pool)
        self.original_binary = self.is_binary
        self.is_binary = True
        self.feature_data = FeatureData()


class ForestAnalyzer(EnsembleAnalyzer):
    """Ask each attribute forest in turn, feeding it the required analyzers' answers."""

    def __init__(
        self,
        pool: AnalyzerPool,
        required: Iterable[str],
        encoding_forest: TrainedForest[str],
        language_forest: TrainedForest[Language],
        script_forest: TrainedForest[Script],
    ) -> None:
        super().__init__(pool)
        required = frozenset(analyzer_id for analyzer_id in (required or ()) if analyzer_id)
        if not required:
            raise ValueError("No required analyzers specified.")
        for name, forest in (("Encoding", encoding_forest), ("Language", language_forest), ("Script", script_forest)):
            if forest is None:
                raise ValueError(f"{name} forest is required.")
        self._required = required
        self.encoding_forest = encoding_forest
        self.language_forest = language_forest
        self.script_forest = script_forest
        self.check_required_analyzers()

    @property
    def required_analyzers(self) -> frozenset:
        return self._required

    def check_required_analyzers(self) -> None:
        missing = sorted(analyzer_id for analyzer_id in self._required if analyzer_id not in self.pool)
        if missing:
            raise RuntimeError(f"Required analyzers not available: {', '.join(missing)}")

    def _is_required(self, analyzer_id: str) -> bool:
        return analyzer_id in self._required

    def start_identification(self, input: Input) -> ForestWorking:
        return ForestWorking(input, self.pool)

    def identify_encoding(self, working: Working) -> None:
        assert isinstance(working, ForestWorking)
        fill_features(
            working.text_info,
            working.feature_data,
            self.encoding_forest.model,
            ENCODING_PREFIX,
            working.run_analyzers(self._is_required, produces_encoding),
            self.pool,
        )
        if working.original_binary:
            encoding = _first(self.encoding_forest, working.feature_data, ENCODING)
            if encoding is not None:
                working.encoding = encoding

    def identify_language(self, working: Working) -> None:
        assert isinstance(working, ForestWorking)
        fill_features(
            working.text_info,
            working.feature_data,
            self.language_forest.model,
            LANGUAGE_PREFIX,
            working.run_analyzers(self._is_required, produces_language_or_script),
            self.pool,
        )
        language = _first(self.language_forest, working.feature_data, LANGUAGE)
        if language is not None:
            working.language = language

    def identify_script(self, working: Working) -> None:
        assert isinstance(working, ForestWorking)
        fill_features(
            working.text_info,
            working.feature_data,
            self.script_forest.model,
            SCRIPT_PREFIX,
            working.run_analyzers(self._is_required, produces_language_or_script),
            self.pool,
        )
        script = _first(self.script_forest, working.feature_data, SCRIPT)
        if script is not None:
            working.script = script

    def _dispose(self) -> None:
        self.encoding_forest.dispose()
        self.language_forest.dispose()
        self.script_forest.dispose()

    def __repr__(self) -> str:
        return f"ForestAnalyzer[{', '.join(sorted(self._required))}]"


def _first(forest: TrainedForest, feature_data: FeatureData, feature) -> Optional[object]:
    results = forest.analyze(feature_data)
    if not results:
        logger.debug("%r produced no answer.", forest)
        return None
    return results[0].get(feature)
