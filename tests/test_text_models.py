"""Tests for the attribute feature models and feature filling."""

from __future__ import annotations

import pytest

from conftest import StubEncodingAnalyzer
from src.analyzers import AnalyzerPool, TextInfo
from src.features import FeatureData
from src.profiles import (
    BINARY_SIZE,
    DETECTED_ENCODING,
    ENCODING_PREFIX,
    LANGUAGE_PREFIX,
    encoding_model,
    fill_feature,
    fill_features,
    language_model,
    script_model,
)


def _names(model) -> list:
    return [feature.name for feature in model.input_features]


# ---------------------------------------------------------------------------
# Models


def test_encoding_model_uses_byte_encoding_analyzers(pool: AnalyzerPool, registry) -> None:
    model = encoding_model(pool, ["enc", "txt"], registry)
    assert model.output_feature.name == "o_enc"
    assert _names(model) == [
        BINARY_SIZE,
        "b_enc_enc_1",
        "b_enc_score_1",
        "b_enc_enc_2",
        "b_enc_score_2",
        "b_enc_enc_3",
        "b_enc_score_3",
    ]


def test_text_models_add_detected_encoding_and_text_features(pool: AnalyzerPool, registry) -> None:
    language = language_model(pool, ["enc", "txt"], registry)
    script = script_model(pool, ["enc", "txt"], registry)
    assert language.output_feature.name == "o_lang"
    assert script.output_feature.name == "o_script"
    for model in (language, script):
        names = _names(model)
        assert names[:2] == [BINARY_SIZE, DETECTED_ENCODING]
        assert "b_enc_enc_1" in names
        assert "t_txt_lang_1" in names
        assert "t_txt_script_1" in names
        assert "t_txt_lang_2" not in names


def test_models_only_use_required_analyzers(pool: AnalyzerPool, registry) -> None:
    assert _names(encoding_model(pool, ["txt"], registry)) == [BINARY_SIZE]
    with pytest.raises(ValueError):
        encoding_model(pool, ["missing"], registry)


# ---------------------------------------------------------------------------
# Filling


def test_fill_features_splits_byte_and_text_results(pool: AnalyzerPool, registry) -> None:
    model = language_model(pool, ["enc", "txt"], registry)
    text = "hello"
    results = {
        text.encode("utf-8"): pool.run(text.encode("utf-8")),
        text: pool.run(text),
    }
    info = TextInfo()
    info.size = 5
    info.encoding = "UTF-8"
    data = FeatureData()

    fill_features(info, data, model, ENCODING_PREFIX, results, pool)
    fill_features(info, data, model, LANGUAGE_PREFIX, results, pool)

    values = {feature.name: value for feature, value in data.items()}
    assert values[BINARY_SIZE] == 5
    assert values[DETECTED_ENCODING] == "utf-8"
    assert values["b_enc_enc_1"] == "utf-8"
    assert values["b_enc_enc_2"] == "ascii"
    assert values["b_enc_score_1"] == pytest.approx(0.9)
    assert values["t_txt_lang_1"] == registry.language("en")
    assert values["t_txt_script_1"] == registry.script("Latn")


def test_byte_prefix_ignores_text_results(pool: AnalyzerPool, registry) -> None:
    model = language_model(pool, ["enc", "txt"], registry)
    data = FeatureData()
    fill_features(TextInfo(), data, model, ENCODING_PREFIX, {"hello": pool.run("hello")}, pool)
    assert len(data) == 0


def test_first_value_wins(pool: AnalyzerPool, registry) -> None:
    model = encoding_model(pool, ["enc"], registry)
    data = FeatureData()
    assert fill_feature(data, model, "b_enc_enc_1", "UTF-8")
    assert not fill_feature(data, model, "b_enc_enc_1", "ascii")
    assert data.get(model.get_input_feature("b_enc_enc_1")) == "utf-8"


def test_fill_feature_skips_unknown_and_invalid(registry) -> None:
    pool = AnalyzerPool({"enc": StubEncodingAnalyzer(["utf-8"])})
    model = encoding_model(pool, ["enc"], registry)
    data = FeatureData()
    assert not fill_feature(data, model, "nope", "utf-8")
    assert not fill_feature(data, model, "b_enc_enc_1", None)
    assert not fill_feature(data, model, BINARY_SIZE, "large")
    assert len(data) == 0
