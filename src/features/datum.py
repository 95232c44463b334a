"""Labeled training instance for feature based classifiers."""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from .data import FeatureData
from .model import ModelFeature

C = TypeVar("C")


class Datum(Generic[C]):
    """Ground truth plus the feature data that describes it."""

    def __init__(self, output_feature: ModelFeature[C], ground_truth: C) -> None:
        if output_feature is None:
            raise ValueError("Output feature is required.")
        if ground_truth is None:
            raise ValueError("Ground truth is required.")
        result = output_feature.validate(ground_truth)
        if not result:
            raise ValueError(f"Invalid ground truth value {output_feature!r} = {ground_truth!r}: {result.reason}")
        self._ground_truth = ground_truth
        self._feature_data = FeatureData()

    @property
    def ground_truth(self) -> C:
        return self._ground_truth

    @property
    def feature_data(self) -> FeatureData:
        return self._feature_data

    def get_feature_value(self, feature: ModelFeature[Any]) -> Optional[Any]:
        return self._feature_data.get(feature)

    def set_feature(self, feature: ModelFeature[Any], value: Any) -> None:
        """Set a feature value exactly once; the value must pass the feature's check."""
        if feature is None:
            raise ValueError("Feature required.")
        if feature in self._feature_data:
            raise RuntimeError(
                f"Feature value is already specified: {feature!r}: "
                f"current = {self._feature_data.get(feature)!r}: new = {value!r}"
            )
        result = feature.validate(value)
        if not result:
            raise ValueError(f"Invalid feature value: {feature!r} = {value!r}: {result.reason}")
        self._feature_data.set(feature, value)

    def __repr__(self) -> str:
        return f"Datum[{self._ground_truth!r} <== {self._feature_data!r}]"
