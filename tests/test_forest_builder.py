"""Tests for the forest schema, builder, trained forest and tuners."""

from __future__ import annotations

import pickle

import numpy as np
import pytest

from src.analyzers import ENCODING
from src.config import UNKNOWN_NOMINAL, UNKNOWN_NUMERIC
from src.features import Datum, FeatureData, FeatureModel, IntegerFeature, NominalFeature
from src.forest import (
    ColumnSpec,
    FixedForestTuner,
    ForestBuilder,
    ForestConfig,
    ForestSchema,
    ForestTuningConfig,
    OptunaForestTuner,
    RandomForestLearner,
    holdout_split,
)


# ---------------------------------------------------------------------------
# Helpers


def _model() -> FeatureModel[str]:
    model: FeatureModel[str] = FeatureModel(NominalFeature("o_enc"))
    model.add_input_feature(IntegerFeature("b_size"))
    model.add_input_feature(NominalFeature("b_stub_enc_1"))
    return model


def _datum(model: FeatureModel[str], truth: str, size, vote) -> Datum[str]:
    datum = Datum(model.output_feature, truth)
    if size is not None:
        datum.set_feature(model.get_input_feature("b_size"), size)
    if vote is not None:
        datum.set_feature(model.get_input_feature("b_stub_enc_1"), vote)
    return datum


def _builder(keep: bool = False) -> ForestBuilder[str]:
    model = _model()
    builder: ForestBuilder[str] = ForestBuilder(
        model,
        ENCODING,
        tuner=FixedForestTuner(ForestConfig(n_estimators=10)),
        keep_training_data=keep,
    )
    for _ in range(6):
        builder.add_training_data(_datum(model, "utf-8", 10, "utf-8"))
        builder.add_training_data(_datum(model, "ascii", 10, "ascii"))
    builder.add_training_data(None)
    return builder


# ---------------------------------------------------------------------------
# Schema


def test_column_spec_missing_values_use_sentinels() -> None:
    feature = NominalFeature("b_stub_enc_1", values=["utf-8"])
    nominal = ColumnSpec.for_feature(feature)
    numeric = ColumnSpec.for_feature(IntegerFeature("b_size"))

    assert nominal.categories == (UNKNOWN_NOMINAL, "utf-8")
    assert nominal.encode(None) == 0.0
    assert nominal.encode("utf-8") == 1.0
    assert numeric.encode(None) == UNKNOWN_NUMERIC
    assert numeric.encode(12) == 12.0


def test_column_spec_unknown_value_maps_to_unk_unless_strict() -> None:
    column = ColumnSpec.for_feature(NominalFeature("b_stub_enc_1", values=["utf-8"]))
    assert column.encode("cp1252") == 0.0
    assert column.decode(column.encode("cp1252")) == UNKNOWN_NOMINAL
    with pytest.raises(ValueError):
        column.encode("cp1252", strict=True)


def test_schema_vectorizes_sparse_feature_data() -> None:
    model = _model()
    model.get_input_feature("b_stub_enc_1").test("utf-8")
    model.close()
    schema = ForestSchema(model)
    data = FeatureData()
    data.set(model.get_input_feature("b_stub_enc_1"), "utf-8")

    row = schema.vectorize(data)
    assert schema.column_names == ["b_size", "b_stub_enc_1"]
    assert row.tolist() == [UNKNOWN_NUMERIC, 1.0]
    assert schema.matrix([]).shape == (0, 2)


# ---------------------------------------------------------------------------
# Builder and trained forest


def test_build_without_data_fails() -> None:
    builder: ForestBuilder[str] = ForestBuilder(_model(), ENCODING)
    with pytest.raises(ValueError):
        builder.build()


def test_trained_forest_ranks_classes_by_probability() -> None:
    builder = _builder()
    assert len(builder) == 12
    forest = builder.build()

    data = FeatureData()
    data.set(forest.model.get_input_feature("b_size"), 11)
    data.set(forest.model.get_input_feature("b_stub_enc_1"), "ascii")
    results = forest.analyze(data)

    assert results
    assert results[0].get(ENCODING) == "ascii"
    scores = [result.score for result in results]
    assert scores == sorted(scores, reverse=True)
    assert all(0.0 < score <= 1.0 for score in scores)


def test_trained_forest_accepts_novel_values_at_inference() -> None:
    forest = _builder().build()
    data = FeatureData()
    data.set(forest.model.get_input_feature("b_stub_enc_1"), "koi8-r")
    results = forest.analyze(data)
    assert {result.get(ENCODING) for result in results} <= {"utf-8", "ascii"}


def test_training_rows_are_kept_for_export_but_not_pickled() -> None:
    forest = _builder(keep=True).build()
    frame = forest.training_frame()
    assert frame is not None
    assert list(frame.columns) == ["b_size", "b_stub_enc_1", "o_enc"]
    assert len(frame) == 12

    restored = pickle.loads(pickle.dumps(forest))
    assert restored.training_frame() is None
    assert restored.analyze(FeatureData())


# ---------------------------------------------------------------------------
# Learner and tuners


def test_learner_requires_fit() -> None:
    learner = RandomForestLearner()
    with pytest.raises(RuntimeError):
        learner.predict(np.zeros((1, 2)))


def test_learner_rejects_mismatched_rows() -> None:
    learner = RandomForestLearner(ForestConfig(n_estimators=5))
    with pytest.raises(ValueError):
        learner.fit(np.zeros((3, 2)), ["a", "b"])


def test_learner_scores_rows() -> None:
    features = np.array([[0.0], [0.0], [1.0], [1.0]])
    learner = RandomForestLearner(ForestConfig(n_estimators=5)).fit(features, ["a", "a", "b", "b"])
    assert learner.score(features, ["a", "a", "b", "b"]) == pytest.approx(1.0)
    assert learner.score(features, ["b", "b", "b", "b"]) == pytest.approx(0.5)


def test_holdout_split_is_stratified_when_possible() -> None:
    features = np.arange(20, dtype=float).reshape(10, 2)
    labels = np.array(["a"] * 5 + ["b"] * 5, dtype=object)
    X_train, X_held, y_train, y_held = holdout_split(features, labels, 0.2, seed=0)
    assert X_train.shape == (8, 2) and X_held.shape == (2, 2)
    assert sorted(y_held) == ["a", "b"]

    lonely = np.array(["a"] * 9 + ["b"], dtype=object)
    _, X_held, _, _ = holdout_split(features, lonely, 0.2, seed=0)
    assert X_held.shape == (2, 2)


def test_optuna_tuner_skips_single_class() -> None:
    base = ForestConfig(n_estimators=7)
    tuner = OptunaForestTuner(base, ForestTuningConfig(trials=2))
    tuner.tune(np.zeros((10, 2)), np.array(["a"] * 10, dtype=object))
    assert tuner.best_config is base
    assert tuner.make_learner().config is base


def test_optuna_tuner_picks_a_config() -> None:
    rng = np.random.default_rng(0)
    features = rng.normal(size=(40, 3))
    labels = np.array(["a" if value > 0 else "b" for value in features[:, 0]], dtype=object)
    tuner = OptunaForestTuner(ForestConfig(n_jobs=1), ForestTuningConfig(trials=2))
    tuner.tune(features, labels)
    assert tuner.best_config is not None
    assert 50 <= tuner.best_config.n_estimators <= 400
