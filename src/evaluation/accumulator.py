"""Running confusion matrix for one analyzer on one attribute."""

from __future__ import annotations

import threading
from typing import Any, Dict, Hashable, Optional, Set

from .stats import AnalyzerStats, StatFunction

_ALL = object()


class AnalyzerEval:
    """Test results for one analyzer and attribute.

    ``None`` is a legal class value on both sides and means "no answer".
    ``add_test_result`` and ``compute_stats`` hold the lock; the read accessors
    do not, so read only once writers are done.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.tests = 0
        self.correct = 0
        self.truth_counts: Dict[Optional[Hashable], int] = {}
        self.confusion_matrix: Dict[Optional[Hashable], Dict[Optional[Hashable], int]] = {}
        self.truth_stats: Dict[Optional[Hashable], AnalyzerStats] = {}
        self.overall_stats = AnalyzerStats()

    def add_test_result(self, truth: Optional[Hashable], actual: Optional[Hashable]) -> None:
        with self._lock:
            self.tests += 1
            if truth == actual:
                self.correct += 1
            self.truth_counts[truth] = self.truth_counts.get(truth, 0) + 1
            row = self.confusion_matrix.setdefault(truth, {})
            row[actual] = row.get(actual, 0) + 1

    def compute_stats(self) -> None:
        """Per class counts, then the overall counts as their macro average.

        Run once after the last ``add_test_result``; running it earlier gives
        partial statistics, running it again gives the same ones.
        """
        with self._lock:
            truth_stats: Dict[Optional[Hashable], AnalyzerStats] = {}
            for truth in self.truth_counts:
                tp = tn = fp = fn = 0.0
                for class_value, actual_counts in self.confusion_matrix.items():
                    for actual, count in actual_counts.items():
                        if class_value == truth:
                            if actual == truth:
                                tp += count
                            else:
                                fn += count
                        elif actual == truth:
                            fp += count
                        else:
                            tn += count
                truth_stats[truth] = AnalyzerStats(tp, tn, fp, fn)
            self.truth_stats = truth_stats

            n = len(truth_stats)
            if n:
                values = truth_stats.values()
                self.overall_stats = AnalyzerStats(
                    sum(s.true_positive for s in values) / n,
                    sum(s.true_negative for s in values) / n,
                    sum(s.false_positive for s in values) / n,
                    sum(s.false_negative for s in values) / n,
                )
            else:
                self.overall_stats = AnalyzerStats()

    def get_truth_values(self) -> Set[Optional[Hashable]]:
        return set(self.truth_counts)

    def get_class_values(self) -> Set[Optional[Hashable]]:
        values = set(self.truth_counts)
        for actual_counts in self.confusion_matrix.values():
            values.update(actual_counts)
        return values

    def get_tests(self, class_value: Any = _ALL) -> int:
        if class_value is _ALL:
            return self.tests
        return self.truth_counts.get(class_value, 0)

    def get_correct(self, class_value: Any = _ALL) -> int:
        if class_value is _ALL:
            return self.correct
        return self.get_confusion_count(class_value, class_value)

    def get_percent_correct(self, class_value: Any = _ALL) -> float:
        tests = self.get_tests(class_value)
        return self.get_correct(class_value) / tests if tests > 0 else 0.0

    def get_confusion_count(self, truth: Optional[Hashable], actual: Optional[Hashable]) -> int:
        return self.confusion_matrix.get(truth, {}).get(actual, 0)

    def get_statistic(self, stat_function: StatFunction, class_value: Optional[Hashable] = None) -> float:
        """``stat_function`` over the overall stats (``class_value`` None) or one class's stats."""
        if stat_function is None:
            raise ValueError("Stat function required.")
        if class_value is None:
            stats = self.overall_stats
        else:
            stats = self.truth_stats.get(class_value, AnalyzerStats())
        return stat_function(stats)

    def __repr__(self) -> str:
        return f"AnalyzerEval[{self.correct}/{self.tests} correct, {len(self.truth_counts)} classes]"
