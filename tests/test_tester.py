"""Tests for the tester, its scoring tracks and the written report."""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from conftest import StubEncodingAnalyzer, make_records
from src.analyzers import AnalyzerPool, TextInfo
from src.evaluation import (
    AnalyzerEval,
    Tester,
    Track,
    composite_key,
    confusion_frame,
    sort_class_values,
    write_report,
)
from src.forest import FixedForestTuner, ForestConfig
from src.profiles import Trainer


@pytest.fixture
def run(tmp_path: Path, pool: AnalyzerPool, registry):
    records = make_records(tmp_path, registry)
    trainer = Trainer(
        "demo",
        pool,
        registry,
        ["enc", "txt"],
        records=records,
        artifact_root=tmp_path / "artifacts",
        tuner_factory=lambda: FixedForestTuner(ForestConfig(n_estimators=10)),
    )
    analyzer = trainer.run()
    return Tester("demo", analyzer, pool, registry, records=records).run()


# ---------------------------------------------------------------------------
# Helpers


def test_composite_key(registry) -> None:
    info = TextInfo()
    info.encoding = "UTF-8"
    info.language = registry.language("en")
    info.script = registry.script("Latn")
    assert composite_key(info) == "utf-8:en:latn"
    assert composite_key(TextInfo()) == "::"
    assert composite_key(None) == "::"


def test_sort_class_values_puts_none_first(registry) -> None:
    assert sort_class_values(["b", None, "a", "a"]) == [None, "a", "b"]
    languages = [registry.language("ru"), registry.language("en")]
    assert sort_class_values(languages) == [registry.language("en"), registry.language("ru")]


def test_confusion_frame_rows_are_actual() -> None:
    evaluation = AnalyzerEval()
    evaluation.add_test_result("utf-8", "ascii")
    evaluation.add_test_result("utf-8", "utf-8")
    frame = confusion_frame(evaluation)
    assert list(frame.index) == ["ascii", "utf-8"]
    assert frame.loc["ascii", "utf-8"] == 1
    assert frame.loc["utf-8", "ascii"] == 0


def test_tester_requires_input(pool: AnalyzerPool, registry) -> None:
    with pytest.raises(ValueError):
        Tester("demo", StubEncodingAnalyzer(["utf-8"]), pool, registry)


def test_tester_without_input_file_fails(tmp_path: Path, pool: AnalyzerPool, registry) -> None:
    records = make_records(tmp_path, registry, repeat=1)
    tester = Tester("demo", StubEncodingAnalyzer(["utf-8"]), pool, registry, records=records)
    tester._records = None
    with pytest.raises(ValueError):
        tester.load_testing_records()


# ---------------------------------------------------------------------------
# Tracks


def test_analyzer_order(run) -> None:
    assert run.analyzer_ids == ["demo", "voting", "enc", "txt"]
    assert run.required_analyzers == frozenset({"enc", "txt"})
    assert len(run.outputs) == 8


def test_tracks_follow_what_each_analyzer_produces(run) -> None:
    assert set(run.evaluations[Track.STRICT_ENCODING]) == {"demo", "voting", "enc"}
    assert set(run.evaluations[Track.LANGUAGE]) == {"demo", "voting", "txt"}
    assert set(run.evaluations[Track.STRICT_COMPOSITE]) == {"demo", "voting"}
    assert "txt" not in run.evaluations[Track.LENIENT_COMPOSITE]


def test_scores_on_clean_data(run) -> None:
    for analyzer_id in ("demo", "voting"):
        for track in Track:
            evaluation = run.evaluations[track][analyzer_id]
            assert evaluation.get_tests() == 8
            assert evaluation.get_percent_correct() == pytest.approx(1.0), (track, analyzer_id)
    assert run.evaluations[Track.LANGUAGE]["txt"].get_correct() == 8


def test_lenient_track_credits_equivalent_encodings(registry, tmp_path: Path) -> None:
    pool = AnalyzerPool({"enc": StubEncodingAnalyzer(["ascii"])})
    records = [record for record in make_records(tmp_path, registry, repeat=1) if record.language.code == "en"]
    run = Tester("enc-only", pool.get("enc"), pool, registry, records=records).run()
    assert run.evaluations[Track.STRICT_ENCODING]["enc"].get_correct() == 0
    assert run.evaluations[Track.LENIENT_ENCODING]["enc"].get_correct() == 1


# ---------------------------------------------------------------------------
# Report


def test_write_report(run, tmp_path: Path) -> None:
    target = write_report(run, tmp_path / "reports", output_raw=True)
    assert target.name == "demo_report"

    metadata = json.loads((target / "metadata.json").read_text(encoding="utf-8"))
    assert metadata["analyzers"] == ["demo", "voting", "enc", "txt"]
    assert metadata["testing_records"] == 8

    stats = pd.read_csv(target / "statistics.csv")
    assert {"track", "analyzer", "precision", "recall", "f1_score"} <= set(stats.columns)
    language = stats[(stats["track"] == "Language") & (stats["analyzer"] == "demo")]
    assert float(language["percent_correct"].iloc[0]) == pytest.approx(100.0)

    raw = pd.read_csv(target / "raw_results.csv", keep_default_na=False)
    assert len(raw) == 8
    assert set(raw["demo_language"]) == {"en", "ru"}

    assert (target / "matrices" / "language" / "txt.csv").exists()
    assert not (target / "matrices" / "language" / "enc.csv").exists()
    assert (target / "matrices" / "strict_encoding" / "enc.csv").exists()


def test_write_report_replaces_previous(run, tmp_path: Path) -> None:
    root = tmp_path / "reports"
    write_report(run, root, output_raw=True)
    target = write_report(run, root)
    assert not (target / "raw_results.csv").exists()
