"""Training, packaging and reloading a forest analyzer profile."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import make_records
from src.analyzers import AnalyzerPool, TextInfo
from src.forest import FixedForestTuner, ForestConfig
from src.profiles import ForestAnalyzer, Profile, Trainer, load_artifact


def _small_tuner() -> FixedForestTuner:
    return FixedForestTuner(ForestConfig(n_estimators=10))


@pytest.fixture
def trainer(tmp_path: Path, pool: AnalyzerPool, registry) -> Trainer:
    return Trainer(
        "Demo ",
        pool,
        registry,
        ["enc", "txt"],
        records=make_records(tmp_path, registry),
        artifact_root=tmp_path / "artifacts",
        export_matrices=True,
        tuner_factory=_small_tuner,
    )


# ---------------------------------------------------------------------------
# Validation


def test_trainer_requires_name_and_analyzers(tmp_path: Path, pool: AnalyzerPool, registry) -> None:
    records = make_records(tmp_path, registry, repeat=1)
    with pytest.raises(ValueError):
        Trainer(" ", pool, registry, ["enc"], records=records)
    with pytest.raises(ValueError):
        Trainer("demo", pool, registry, [], records=records)
    with pytest.raises(ValueError):
        Trainer("demo", pool, registry, ["enc", "missing"], records=records)
    with pytest.raises(ValueError):
        Trainer("demo", pool, registry, ["enc"])


def test_trainer_without_records_fails(tmp_path: Path, pool: AnalyzerPool, registry) -> None:
    trainer = Trainer("demo", pool, registry, ["enc"], records=[], artifact_root=tmp_path)
    with pytest.raises(ValueError):
        trainer.run()


# ---------------------------------------------------------------------------
# Training and artifacts


def test_training_writes_profile_and_matrices(trainer: Trainer) -> None:
    analyzer = trainer.run()
    assert isinstance(analyzer, ForestAnalyzer)
    assert analyzer.required_analyzers == frozenset({"enc", "txt"})

    target = trainer.artifact_path
    assert target is not None and target.name == "demo"
    profile = json.loads((target / "profile.json").read_text(encoding="utf-8"))
    assert profile["name"] == "demo"
    assert profile["required_analyzers"] == ["enc", "txt"]
    assert profile["training_instances"] == 8
    assert profile["training_file"] == "null"
    for attribute in ("encoding", "language", "script"):
        assert (target / "matrices" / f"{attribute}.csv").exists()


def test_trained_analyzer_identifies_text(trainer: Trainer, registry) -> None:
    analyzer = trainer.run()

    info = TextInfo.of(analyzer.analyze("hello again".encode("utf-8"))[0])
    assert info.encoding == "utf-8"
    assert info.language == registry.language("en")
    assert info.script == registry.script("Latn")

    info = TextInfo.of(analyzer.analyze("привет снова и снова")[0])
    assert info.encoding == "utf-8"
    assert info.language == registry.language("ru")
    assert info.script == registry.script("Cyrl")


def test_artifact_round_trip(trainer: Trainer, pool: AnalyzerPool, registry) -> None:
    trainer.run()
    profile, analyzer = load_artifact(trainer.artifact_root, "demo", pool)
    assert isinstance(profile, Profile)
    assert profile.training_instances == 8
    assert analyzer.required_analyzers == frozenset({"enc", "txt"})
    assert analyzer.language_forest.training_frame() is None

    info = TextInfo.of(analyzer.analyze("привет снова и снова".encode("utf-8"))[0])
    assert info.language == registry.language("ru")


def test_load_artifact_checks_pool(trainer: Trainer, registry) -> None:
    trainer.run()
    with pytest.raises(FileNotFoundError):
        load_artifact(trainer.artifact_root, "other", AnalyzerPool())
    with pytest.raises(RuntimeError):
        load_artifact(trainer.artifact_root, "demo", AnalyzerPool())


def test_forest_analyzer_requires_required_ids(trainer: Trainer, pool: AnalyzerPool) -> None:
    analyzer = trainer.run()
    with pytest.raises(ValueError):
        ForestAnalyzer(pool, [], analyzer.encoding_forest, analyzer.language_forest, analyzer.script_forest)
    with pytest.raises(ValueError):
        ForestAnalyzer(pool, ["enc"], None, analyzer.language_forest, analyzer.script_forest)


def test_trainer_without_input_file_fails(trainer: Trainer) -> None:
    trainer._records_given = False
    trainer.input_file = None
    with pytest.raises(ValueError):
        trainer.load_training_records()
