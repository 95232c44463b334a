"""Score a candidate analyzer, the voting composite and the pool on labeled records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from src.analyzers import ENCODING, LANGUAGE, SCRIPT, Analyzer, AnalyzerPool, TextInfo, VotingAnalyzer
from src.analyzers.encoding import normalize_encoding, try_decode
from src.codes import CodeRegistry, language_text, script_text
from src.config import PROGRESS_INTERVAL, VOTING_ANALYZER_ID
from src.datahub import InputRecord, load_input_records

from .accumulator import AnalyzerEval

logger = logging.getLogger(__name__)


class Track(str, Enum):
    """One way of scoring an analyzer; each gets its own accumulator per analyzer."""

    STRICT_ENCODING = "Strict Encoding"
    LENIENT_ENCODING = "Lenient Encoding"
    LANGUAGE = "Language"
    SCRIPT = "Script"
    STRICT_COMPOSITE = "Strict Composite"
    LENIENT_COMPOSITE = "Lenient Composite"


def check_lenient_encodings(data: bytes, true_encoding: Optional[str], detected_encoding: Optional[str]) -> bool:
    """True when both names normalize alike or decode ``data`` to the same text."""
    normal_true = normalize_encoding(true_encoding)
    normal_detected = normalize_encoding(detected_encoding)
    if normal_true == normal_detected:
        return True
    expected = try_decode(data, normal_true)
    return expected is not None and expected == try_decode(data, normal_detected)


def composite_key(text_info: Optional[TextInfo]) -> str:
    """``encoding:language:script`` with lower-case codes and blanks for missing parts."""
    if text_info is None:
        return "::"
    encoding = (text_info.encoding or "").strip()
    language = language_text(text_info.language) if text_info.language is not None else ""
    script = script_text(text_info.script) if text_info.script is not None else ""
    return f"{encoding}:{language}:{script}"


@dataclass
class EvaluationRun:
    """Everything a report needs from one finished test run."""

    name: str
    analyzers: List[Tuple[str, Analyzer]]
    evaluations: Dict[Track, Dict[str, AnalyzerEval]]
    outputs: List[Tuple[InputRecord, Dict[str, TextInfo]]]
    input_file: Optional[Path] = None
    required_analyzers: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def analyzer_ids(self) -> List[str]:
        return [analyzer_id for analyzer_id, _ in self.analyzers]


class Tester:
    """Evaluate ``analyzer`` against every pool analyzer and the voting composite.

    Report order is the candidate, then ``voting``, then the pool sorted by id.
    """

    __test__ = False

    def __init__(
        self,
        name: str,
        analyzer: Analyzer,
        pool: AnalyzerPool,
        registry: CodeRegistry,
        input_file: Optional[Path] = None,
        *,
        records: Optional[Sequence[InputRecord]] = None,
    ) -> None:
        if input_file is None and records is None:
            raise ValueError("A test file or test records are required.")
        self.name = name
        self.analyzer = analyzer
        self.pool = pool
        self.registry = registry
        self.input_file = Path(input_file) if input_file is not None else None
        self._records = list(records) if records is not None else None

        self.required_analyzers: FrozenSet[str] = frozenset(getattr(analyzer, "required_analyzers", ()) or ())
        self.analyzers: List[Tuple[str, Analyzer]] = [
            (name, analyzer),
            (VOTING_ANALYZER_ID, VotingAnalyzer(pool, self.required_analyzers)),
            *pool,
        ]
        self.evaluations: Dict[Track, Dict[str, AnalyzerEval]] = {track: {} for track in Track}
        self.outputs: List[Tuple[InputRecord, Dict[str, TextInfo]]] = []
        self.input_records: List[InputRecord] = []

    def load_testing_records(self) -> List[InputRecord]:
        if self._records is not None:
            return self._records
        if self.input_file is None:
            raise ValueError("No input file or records to test with.")
        return load_input_records(self.input_file, self.registry)

    def run(self) -> EvaluationRun:
        """Collect results for every record, then compute every accumulator's stats."""
        logger.info("Loading test records.")
        self.input_records = self.load_testing_records()

        logger.info("Collecting test results.")
        for record in self.input_records:
            self.outputs.append((record, self.evaluate_record(record)))
            if len(self.outputs) % PROGRESS_INTERVAL == 0:
                logger.info("Processed %d / %d records.", len(self.outputs), len(self.input_records))

        logger.info("Analyzing evaluation results.")
        for evaluations in self.evaluations.values():
            for evaluation in evaluations.values():
                evaluation.compute_stats()

        return EvaluationRun(
            name=self.name,
            analyzers=list(self.analyzers),
            evaluations=self.evaluations,
            outputs=self.outputs,
            input_file=self.input_file,
            required_analyzers=self.required_analyzers,
        )

    def evaluate_record(self, record: InputRecord) -> Dict[str, TextInfo]:
        results: Dict[str, TextInfo] = {}
        for analyzer_id, analyzer in self.analyzers:
            if analyzer.accepts(bytes):
                best = _best(analyzer.analyze(record.data))
                results[analyzer_id] = best
                self.update_evaluations(record, analyzer_id, analyzer, best)

        text = record.text()
        for analyzer_id, analyzer in self.analyzers:
            # Analyzers already scored on the bytes are not scored again on the text.
            if analyzer.accepts(str) and not analyzer.accepts(bytes):
                best = _best(analyzer.analyze(text))
                results[analyzer_id] = best
                self.update_evaluations(record, analyzer_id, analyzer, best)
        return results

    def update_evaluations(
        self,
        record: InputRecord,
        analyzer_id: str,
        analyzer: Analyzer,
        result: Optional[TextInfo],
    ) -> None:
        if result is None:
            logger.warning("No results for %s from %s.", record.input_file.name, analyzer_id)
            result = TextInfo()
        encoding, language, script = result.encoding, result.language, result.script

        produces = 0
        lenient = False
        if analyzer.produces(ENCODING):
            produces += 1
            lenient = check_lenient_encodings(record.data, record.encoding, encoding)
            self._eval(Track.STRICT_ENCODING, analyzer_id).add_test_result(record.encoding, encoding)
            self._eval(Track.LENIENT_ENCODING, analyzer_id).add_test_result(
                record.encoding, record.encoding if lenient else encoding
            )
        if analyzer.produces(LANGUAGE):
            produces += 1
            self._eval(Track.LANGUAGE, analyzer_id).add_test_result(record.language, language)
        if analyzer.produces(SCRIPT):
            produces += 1
            self._eval(Track.SCRIPT, analyzer_id).add_test_result(record.script, script)

        if produces == 3:
            truth = composite_key(record.text_info())
            self._eval(Track.STRICT_COMPOSITE, analyzer_id).add_test_result(truth, composite_key(result))
            answer = result
            if lenient:
                answer = TextInfo()
                answer.encoding = record.encoding
                answer.language = language
                answer.script = script
            self._eval(Track.LENIENT_COMPOSITE, analyzer_id).add_test_result(truth, composite_key(answer))

    def _eval(self, track: Track, analyzer_id: str) -> AnalyzerEval:
        return self.evaluations[track].setdefault(analyzer_id, AnalyzerEval())


def _best(results: Sequence[object]) -> TextInfo:
    if not results:
        return TextInfo()
    return TextInfo.of(results[0]) or TextInfo()
