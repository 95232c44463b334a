"""Write evaluation results as CSV tables plus a metadata JSON file.

Layout under ``<report_root>/<name>_report/``::

    metadata.json
    statistics.csv
    raw_results.csv                      # only with output_raw
    matrices/<track>/<analyzer>.csv      # rows actual, columns truth
"""

from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from src.analyzers import ENCODING, LANGUAGE, SCRIPT, TextInfo
from src.codes import Language, Script, language_text, script_text

from .accumulator import AnalyzerEval
from .stats import REPORT_STATISTICS
from .tester import EvaluationRun, Track

logger = logging.getLogger(__name__)

NONE_LABEL = ""
MATRIX_TRACKS = {
    Track.STRICT_ENCODING: ENCODING,
    Track.LENIENT_ENCODING: ENCODING,
    Track.LANGUAGE: LANGUAGE,
    Track.SCRIPT: SCRIPT,
}


def value_text(value: Any) -> str:
    if value is None:
        return NONE_LABEL
    if isinstance(value, Language):
        return language_text(value)
    if isinstance(value, Script):
        return script_text(value)
    return str(value).strip()


def sort_class_values(values: Iterable[Any]) -> List[Any]:
    """None first, then by name for codes and natural order for everything else."""
    values = set(values)
    present = [value for value in values if value is not None]
    if any(isinstance(value, (Language, Script)) for value in present):
        present.sort(key=lambda value: getattr(value, "name", str(value)))
    else:
        present.sort(key=str)
    return ([None] if None in values else []) + present


def statistics_frame(run: EvaluationRun) -> pd.DataFrame:
    rows: List[Dict[str, Any]] = []
    for track in Track:
        evaluations = run.evaluations[track]
        for analyzer_id in run.analyzer_ids:
            evaluation = evaluations.get(analyzer_id)
            if evaluation is None:
                continue
            row: Dict[str, Any] = {
                "track": track.value,
                "analyzer": analyzer_id,
                "tests": evaluation.get_tests(),
                "correct": evaluation.get_correct(),
                "percent_correct": evaluation.get_percent_correct() * 100.0,
            }
            for column, stat in REPORT_STATISTICS.items():
                row[column] = evaluation.get_statistic(stat)
            rows.append(row)
    return pd.DataFrame(rows, columns=["track", "analyzer", "tests", "correct", "percent_correct", *REPORT_STATISTICS])


def confusion_frame(evaluation: AnalyzerEval) -> pd.DataFrame:
    classes = sort_class_values(evaluation.get_class_values())
    labels = [value_text(value) for value in classes]
    frame = pd.DataFrame(
        [[evaluation.get_confusion_count(truth, actual) for truth in classes] for actual in classes],
        index=pd.Index(labels, name="actual"),
        columns=pd.Index(labels, name="truth"),
    )
    return frame


def raw_results_frame(run: EvaluationRun) -> pd.DataFrame:
    rows: List[Dict[str, str]] = []
    for record, results in run.outputs:
        row = {
            "file": record.input_file.name,
            "truth_encoding": record.encoding,
            "truth_language": value_text(record.language),
            "truth_script": value_text(record.script),
        }
        for analyzer_id in run.analyzer_ids:
            info: Optional[TextInfo] = results.get(analyzer_id)
            row[f"{analyzer_id}_encoding"] = value_text(info.encoding) if info else NONE_LABEL
            row[f"{analyzer_id}_language"] = value_text(info.language) if info else NONE_LABEL
            row[f"{analyzer_id}_script"] = value_text(info.script) if info else NONE_LABEL
        rows.append(row)
    return pd.DataFrame(rows)


def metadata(run: EvaluationRun) -> Dict[str, Any]:
    updated = None
    if run.input_file is not None and run.input_file.exists():
        updated = datetime.fromtimestamp(run.input_file.stat().st_mtime, timezone.utc).isoformat()
    return {
        "name": run.name,
        "required_analyzers": sorted(run.required_analyzers),
        "analyzers": run.analyzer_ids,
        "test_date": datetime.now(timezone.utc).isoformat(),
        "test_file": run.input_file.name if run.input_file is not None else None,
        "test_file_updated": updated,
        "testing_records": len(run.outputs),
    }


def write_report(run: EvaluationRun, report_root: Path, output_raw: bool = False) -> Path:
    """Write every table for ``run``; an existing report of the same name is replaced."""
    target = Path(report_root) / f"{run.name}_report"
    logger.info("Generating report.")
    if target.exists():
        logger.info("Removing old report.")
        shutil.rmtree(target)
    target.mkdir(parents=True)

    (target / "metadata.json").write_text(json.dumps(metadata(run), indent=2), encoding="utf-8")
    statistics_frame(run).to_csv(target / "statistics.csv", index=False)
    if output_raw:
        raw_results_frame(run).to_csv(target / "raw_results.csv", index=False)

    for track, feature in MATRIX_TRACKS.items():
        track_dir = target / "matrices" / track.name.lower()
        for analyzer_id, analyzer in run.analyzers:
            evaluation = run.evaluations[track].get(analyzer_id)
            if evaluation is None or not analyzer.produces(feature):
                continue
            track_dir.mkdir(parents=True, exist_ok=True)
            confusion_frame(evaluation).to_csv(track_dir / f"{analyzer_id}.csv")

    logger.info("Wrote report: %s", target)
    return target
