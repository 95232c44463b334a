"""Unit tests for the feature vocabulary, feature data and datums."""

from __future__ import annotations

import pickle

import pytest

from src.features import (
    Datum,
    EnumeratedFeature,
    FeatureData,
    FeatureModel,
    IntegerFeature,
    NominalFeature,
    RealFeature,
)


# ---------------------------------------------------------------------------
# Model features


def test_parse_treats_blank_and_question_mark_as_missing() -> None:
    feature = IntegerFeature("b_size")
    assert feature.parse("") is None
    assert feature.parse("  ") is None
    assert feature.parse("?") is None
    assert feature.parse("42") == 42
    assert feature.as_text(None) == "?"
    assert feature.as_text(7) == "7"


def test_numeric_range_and_type_checks() -> None:
    feature = RealFeature("score", minimum=0.0, maximum=1.0)
    assert feature.test(None)
    assert feature.test(0.5)
    assert not feature.test(1.5)
    assert not feature.test("0.5")
    assert not feature.test(float("nan"))
    assert not IntegerFeature("size").test(True)

    with pytest.raises(ValueError):
        RealFeature("bad", minimum=2.0, maximum=1.0)


def test_dynamic_enumeration_grows_until_closed() -> None:
    feature = NominalFeature("enc")
    assert feature.test("utf-8")
    assert feature.test("ascii")
    assert feature.values == ("utf-8", "ascii")
    assert feature.to_ordinal("ascii") == 1
    assert feature.to_value(0) == "utf-8"
    assert feature.to_value(5) is None

    feature.close()
    assert feature.closed
    assert not feature.test("cp1252")
    assert feature.to_ordinal("cp1252") == -1
    assert feature.values == ("utf-8", "ascii")


def test_declared_domain_is_closed_immediately() -> None:
    feature = NominalFeature("enc", values=["utf-8"])
    assert feature.closed
    assert not feature.test("ascii")
    with pytest.raises(RuntimeError):
        feature.set_values(["ascii"])


def test_enumerated_feature_pickles_without_lock() -> None:
    feature = EnumeratedFeature("enc", str, str.strip, str)
    feature.test("utf-8")
    restored = pickle.loads(pickle.dumps(feature))
    assert restored.values == ("utf-8",)
    assert restored.test("ascii")


def test_features_compare_by_name() -> None:
    assert IntegerFeature("b_size") == IntegerFeature("b_size")
    assert hash(NominalFeature("x")) == hash(NominalFeature("x"))
    assert sorted([NominalFeature("b"), NominalFeature("a")])[0].name == "a"


# ---------------------------------------------------------------------------
# Feature model


def test_feature_model_lookup_is_case_insensitive() -> None:
    model = FeatureModel(NominalFeature("o_enc"))
    model.add_input_feature(IntegerFeature("B_Size"))
    assert model.get_input_feature("b_size") is not None
    assert model.get_input_feature("missing") is None
    with pytest.raises(ValueError):
        model.add_input_feature(IntegerFeature("B_Size"))


def test_feature_model_close_freezes_enumerations() -> None:
    output = NominalFeature("o_enc")
    model = FeatureModel(output).add_input_feature(NominalFeature("b_x_enc_1"))
    output.test("utf-8")
    model.close()
    assert output.closed
    assert model.get_input_feature("b_x_enc_1").closed


# ---------------------------------------------------------------------------
# Feature data and datums


def test_feature_data_is_set_once() -> None:
    feature = IntegerFeature("b_size")
    data = FeatureData()
    data.set(feature, None)
    assert feature not in data

    data.set(feature, 10)
    assert data.get(feature) == 10
    with pytest.raises(RuntimeError):
        data.set(feature, 11)


def test_datum_validates_ground_truth_and_features() -> None:
    output = NominalFeature("o_enc", values=["utf-8"])
    with pytest.raises(ValueError):
        Datum(output, None)
    with pytest.raises(ValueError):
        Datum(output, "ascii")

    datum = Datum(output, "utf-8")
    size = IntegerFeature("b_size", minimum=0)
    with pytest.raises(ValueError):
        datum.set_feature(size, -1)
    datum.set_feature(size, 3)
    assert datum.get_feature_value(size) == 3
    with pytest.raises(RuntimeError):
        datum.set_feature(size, 4)
