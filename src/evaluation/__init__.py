"""Evaluation accumulators, derived statistics, the tester and its report."""

from .accumulator import AnalyzerEval
from .report import confusion_frame, sort_class_values, statistics_frame, write_report
from .stats import (
    ACCURACY,
    DOR,
    ERROR_RATE,
    F1_SCORE,
    FALL_OUT,
    FALSE_NEGATIVE,
    FALSE_POSITIVE,
    FDR,
    FOR,
    INFORMEDNESS,
    LR_NEGATIVE,
    LR_POSITIVE,
    MARKEDNESS,
    MCC,
    MISS_RATE,
    NPV,
    PRECISION,
    RECALL,
    REPORT_STATISTICS,
    SPECIFICITY,
    TRUE_NEGATIVE,
    TRUE_POSITIVE,
    AnalyzerStats,
    StatFunction,
)
from .tester import EvaluationRun, Tester, Track, check_lenient_encodings, composite_key

__all__ = [
    "ACCURACY",
    "AnalyzerEval",
    "AnalyzerStats",
    "DOR",
    "ERROR_RATE",
    "EvaluationRun",
    "F1_SCORE",
    "FALL_OUT",
    "FALSE_NEGATIVE",
    "FALSE_POSITIVE",
    "FDR",
    "FOR",
    "INFORMEDNESS",
    "LR_NEGATIVE",
    "LR_POSITIVE",
    "MARKEDNESS",
    "MCC",
    "MISS_RATE",
    "NPV",
    "PRECISION",
    "RECALL",
    "REPORT_STATISTICS",
    "SPECIFICITY",
    "StatFunction",
    "TRUE_NEGATIVE",
    "TRUE_POSITIVE",
    "Tester",
    "Track",
    "check_lenient_encodings",
    "composite_key",
    "confusion_frame",
    "sort_class_values",
    "statistics_frame",
    "write_report",
]
