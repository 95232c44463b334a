"""Confusion counts for one class and the metrics derived from them."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator != 0 else 0.0


@dataclass(frozen=True)
class AnalyzerStats:
    """True/false positive/negative counts; every derived metric is 0 instead of NaN or inf."""

    true_positive: float = 0.0
    true_negative: float = 0.0
    false_positive: float = 0.0
    false_negative: float = 0.0

    @property
    def total(self) -> float:
        return self.true_positive + self.true_negative + self.false_positive + self.false_negative

    def precision(self) -> float:
        return _ratio(self.true_positive, self.true_positive + self.false_positive)

    def recall(self) -> float:
        return _ratio(self.true_positive, self.true_positive + self.false_negative)

    def f1_score(self) -> float:
        tp2 = 2 * self.true_positive
        return _ratio(tp2, tp2 + self.false_positive + self.false_negative)

    def accuracy(self) -> float:
        return _ratio(self.true_positive + self.true_negative, self.total)

    def specificity(self) -> float:
        return _ratio(self.true_negative, self.false_positive + self.true_negative)

    def negative_predictive_value(self) -> float:
        return _ratio(self.true_negative, self.true_negative + self.false_negative)

    def fall_out(self) -> float:
        return _ratio(self.false_positive, self.false_positive + self.true_negative)

    def false_discovery_rate(self) -> float:
        return _ratio(self.false_positive, self.false_positive + self.true_positive)

    def false_omission_rate(self) -> float:
        return _ratio(self.false_negative, self.false_negative + self.true_negative)

    def miss_rate(self) -> float:
        return _ratio(self.false_negative, self.false_negative + self.true_positive)

    def error_rate(self) -> float:
        return _ratio(self.false_positive + self.false_negative, self.total)

    def mcc(self) -> float:
        """Matthews correlation coefficient."""
        tp, tn, fp, fn = self.true_positive, self.true_negative, self.false_positive, self.false_negative
        root = math.sqrt((tp + fp) * (tp + fn) * (tn + fp) * (tn + fn))
        return _ratio(tp * tn - fp * fn, root)

    def informedness(self) -> float:
        if not self.total:
            return 0.0
        return self.recall() + self.specificity() - 1

    def markedness(self) -> float:
        if not self.total:
            return 0.0
        return self.precision() + self.negative_predictive_value() - 1

    def positive_likelihood_ratio(self) -> float:
        return _ratio(self.recall(), self.fall_out())

    def negative_likelihood_ratio(self) -> float:
        return _ratio(self.miss_rate(), self.specificity())

    def diagnostic_odds_ratio(self) -> float:
        return _ratio(self.positive_likelihood_ratio(), self.negative_likelihood_ratio())


StatFunction = Callable[[AnalyzerStats], float]


def TRUE_POSITIVE(stats: AnalyzerStats) -> float:
    return stats.true_positive


def TRUE_NEGATIVE(stats: AnalyzerStats) -> float:
    return stats.true_negative


def FALSE_POSITIVE(stats: AnalyzerStats) -> float:
    return stats.false_positive


def FALSE_NEGATIVE(stats: AnalyzerStats) -> float:
    return stats.false_negative


PRECISION: StatFunction = AnalyzerStats.precision
RECALL: StatFunction = AnalyzerStats.recall
F1_SCORE: StatFunction = AnalyzerStats.f1_score
ACCURACY: StatFunction = AnalyzerStats.accuracy
SPECIFICITY: StatFunction = AnalyzerStats.specificity
NPV: StatFunction = AnalyzerStats.negative_predictive_value
FALL_OUT: StatFunction = AnalyzerStats.fall_out
FDR: StatFunction = AnalyzerStats.false_discovery_rate
FOR: StatFunction = AnalyzerStats.false_omission_rate
MISS_RATE: StatFunction = AnalyzerStats.miss_rate
ERROR_RATE: StatFunction = AnalyzerStats.error_rate
MCC: StatFunction = AnalyzerStats.mcc
INFORMEDNESS: StatFunction = AnalyzerStats.informedness
MARKEDNESS: StatFunction = AnalyzerStats.markedness
LR_POSITIVE: StatFunction = AnalyzerStats.positive_likelihood_ratio
LR_NEGATIVE: StatFunction = AnalyzerStats.negative_likelihood_ratio
DOR: StatFunction = AnalyzerStats.diagnostic_odds_ratio

# Report column name -> metric, in report order.
REPORT_STATISTICS: Dict[str, StatFunction] = {
    "true_positive": TRUE_POSITIVE,
    "true_negative": TRUE_NEGATIVE,
    "false_positive": FALSE_POSITIVE,
    "false_negative": FALSE_NEGATIVE,
    "precision": PRECISION,
    "recall": RECALL,
    "f1_score": F1_SCORE,
    "accuracy": ACCURACY,
    "specificity": SPECIFICITY,
    "npv": NPV,
    "fall_out": FALL_OUT,
    "fdr": FDR,
    "for": FOR,
    "miss_rate": MISS_RATE,
    "error_rate": ERROR_RATE,
    "mcc": MCC,
    "informedness": INFORMEDNESS,
    "markedness": MARKEDNESS,
    "lr_positive": LR_POSITIVE,
    "lr_negative": LR_NEGATIVE,
    "dor": DOR,
}
