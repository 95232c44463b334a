"""Feature vocabulary, sparse feature data, and labeled training instances."""

from .data import FeatureData
from .datum import Datum
from .model import (
    EnumeratedFeature,
    FeatureModel,
    IntegerFeature,
    ModelFeature,
    NominalFeature,
    NumericFeature,
    RealFeature,
    ValidationResult,
)

__all__ = [
    "Datum",
    "EnumeratedFeature",
    "FeatureData",
    "FeatureModel",
    "IntegerFeature",
    "ModelFeature",
    "NominalFeature",
    "NumericFeature",
    "RealFeature",
    "ValidationResult",
]
