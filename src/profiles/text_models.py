"""Feature models for the encoding, language and script forests.

Features are named after the upstream analyzer and answer rank that produced
them, e.g. ``b_icu_enc_1`` or ``t_cld_lang_2``.  ``b_`` features come from
analyzers run on raw bytes, ``t_`` features from analyzers run on decoded text.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Mapping, Sequence

from src.analyzers import ENCODING, LANGUAGE, SCRIPT, Analysis, Analyzer, AnalyzerPool, TextInfo
from src.codes import CodeRegistry, Language, Script, language_text, script_text
from src.config import MAX_FEATURE_RANKS
from src.features import EnumeratedFeature, FeatureData, FeatureModel, IntegerFeature, ModelFeature, RealFeature

logger = logging.getLogger(__name__)

ENCODING_PREFIX = "b_"
LANGUAGE_PREFIX = "t_"
SCRIPT_PREFIX = "t_"

BINARY_SIZE = "b_size"
DETECTED_ENCODING = "d_enc"

ENCODING_OUTPUT = "o_enc"
LANGUAGE_OUTPUT = "o_lang"
SCRIPT_OUTPUT = "o_script"

AnalyzerResults = Mapping[Any, Mapping[str, Sequence[Analysis]]]


def encoding_text(encoding: str) -> str:
    return encoding.strip().lower()


def new_encoding_feature(name: str) -> EnumeratedFeature[str]:
    return EnumeratedFeature(name, str, encoding_text, encoding_text)


def new_language_feature(name: str, registry: CodeRegistry) -> EnumeratedFeature[Language]:
    return EnumeratedFeature(name, Language, registry.language, language_text)


def new_script_feature(name: str, registry: CodeRegistry) -> EnumeratedFeature[Script]:
    return EnumeratedFeature(name, Script, registry.script, script_text)


def accepts_bytes_and_produces_encoding(analyzer: Analyzer) -> bool:
    return analyzer.accepts(bytes) and analyzer.produces(ENCODING)


def produces_encoding(analyzer: Analyzer) -> bool:
    return analyzer.produces(ENCODING)


def produces_language_or_script(analyzer: Analyzer) -> bool:
    return analyzer.produces(LANGUAGE) or analyzer.produces(SCRIPT)


def rankings(analyzer: Analyzer) -> int:
    return MAX_FEATURE_RANKS if analyzer.produces_rankings else 1


def encoding_model(pool: AnalyzerPool, required: Iterable[str], registry: CodeRegistry) -> FeatureModel[str]:
    model: FeatureModel[str] = FeatureModel(new_encoding_feature(ENCODING_OUTPUT))
    model.add_input_feature(IntegerFeature(BINARY_SIZE))
    _add_analyzer_features(model, ENCODING_PREFIX, pool, required, accepts_bytes_and_produces_encoding, registry)
    return model


def language_model(pool: AnalyzerPool, required: Iterable[str], registry: CodeRegistry) -> FeatureModel[Language]:
    return _text_model(new_language_feature(LANGUAGE_OUTPUT, registry), LANGUAGE_PREFIX, pool, required, registry)


def script_model(pool: AnalyzerPool, required: Iterable[str], registry: CodeRegistry) -> FeatureModel[Script]:
    return _text_model(new_script_feature(SCRIPT_OUTPUT, registry), SCRIPT_PREFIX, pool, required, registry)


def _text_model(
    output_feature: ModelFeature[Any],
    prefix: str,
    pool: AnalyzerPool,
    required: Iterable[str],
    registry: CodeRegistry,
) -> FeatureModel[Any]:
    required = list(required)
    model: FeatureModel[Any] = FeatureModel(output_feature)
    model.add_input_feature(IntegerFeature(BINARY_SIZE))
    model.add_input_feature(new_encoding_feature(DETECTED_ENCODING))
    _add_analyzer_features(model, ENCODING_PREFIX, pool, required, accepts_bytes_and_produces_encoding, registry)
    _add_analyzer_features(model, prefix, pool, required, produces_language_or_script, registry)
    return model


def _add_analyzer_features(
    model: FeatureModel[Any],
    prefix: str,
    pool: AnalyzerPool,
    required: Iterable[str],
    analyzer_filter: Callable[[Analyzer], bool],
    registry: CodeRegistry,
) -> None:
    for analyzer_id in sorted(set(required)):
        if analyzer_id not in pool:
            raise ValueError(f"Required analyzer not available: {analyzer_id}")
        analyzer = pool.get(analyzer_id)
        if not analyzer_filter(analyzer):
            continue
        for rank in range(1, rankings(analyzer) + 1):
            stem = f"{prefix}{analyzer_id}"
            if analyzer.produces(ENCODING):
                model.add_input_feature(new_encoding_feature(f"{stem}_enc_{rank}"))
            if analyzer.produces(LANGUAGE):
                model.add_input_feature(new_language_feature(f"{stem}_lang_{rank}", registry))
            if analyzer.produces(SCRIPT):
                model.add_input_feature(new_script_feature(f"{stem}_script_{rank}", registry))
            if analyzer.produces_scores:
                model.add_input_feature(RealFeature(f"{stem}_score_{rank}"))


def fill_features(
    text_info: TextInfo,
    feature_data: FeatureData,
    model: FeatureModel[Any],
    prefix: str,
    analyzer_results: AnalyzerResults,
    pool: AnalyzerPool,
) -> None:
    """Copy record level values and ranked analyzer answers into ``feature_data``.

    Only features present in ``model`` are filled, only with values the feature
    accepts, and a feature that already holds a value keeps it.
    """
    fill_feature(feature_data, model, BINARY_SIZE, text_info.size)
    fill_feature(feature_data, model, DETECTED_ENCODING, text_info.encoding)

    binary_prefix = prefix.lower() == ENCODING_PREFIX
    for input, by_id in analyzer_results.items():
        if isinstance(input, (bytes, bytearray)) != binary_prefix:
            continue
        for analyzer_id, results in by_id.items():
            _fill_analyzer_features(feature_data, model, prefix, analyzer_id, pool.get(analyzer_id), results)


def _fill_analyzer_features(
    feature_data: FeatureData,
    model: FeatureModel[Any],
    prefix: str,
    analyzer_id: str,
    analyzer: Analyzer,
    results: Sequence[Analysis],
) -> None:
    ranked: List[Analysis] = list(results)[: rankings(analyzer)]
    for rank, analysis in enumerate(ranked, start=1):
        stem = f"{prefix}{analyzer_id}"
        if analyzer.produces(ENCODING):
            fill_feature(feature_data, model, f"{stem}_enc_{rank}", analysis.get(ENCODING))
        if analyzer.produces(LANGUAGE):
            fill_feature(feature_data, model, f"{stem}_lang_{rank}", analysis.get(LANGUAGE))
        if analyzer.produces(SCRIPT):
            fill_feature(feature_data, model, f"{stem}_script_{rank}", analysis.get(SCRIPT))
        if analyzer.produces_scores:
            fill_feature(feature_data, model, f"{stem}_score_{rank}", analysis.score)


def fill_feature(feature_data: FeatureData, model: FeatureModel[Any], name: str, value: Any) -> bool:
    """Set ``name`` when the model has it and the value is usable; True if set."""
    feature = model.get_input_feature(name)
    if feature is None or value is None:
        return False
    if isinstance(feature, EnumeratedFeature) and isinstance(value, str):
        value = feature.parse(value)
        if value is None:
            return False
    if not feature.test(value):
        logger.debug("Ignoring value for %s: %r", name, value)
        return False
    if feature in feature_data:
        current = feature_data.get(feature)
        if current != value:
            logger.debug("Keeping %s = %r; ignoring %r", name, current, value)
        return False
    feature_data.set(feature, value)
    return True
