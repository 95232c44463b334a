"""Trained attribute forest used as an analyzer over feature data."""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

import numpy as np
import pandas as pd

from src.analyzers import Analysis, AnalysisFeature, Analyzer
from src.config import MAX_PREDICTIONS
from src.features import FeatureData, FeatureModel

from .learner import ForestLearner
from .schema import ForestSchema

logger = logging.getLogger(__name__)

C = TypeVar("C")


class TrainedForest(Analyzer, Generic[C]):
    """Schema, fitted learner and output feature for one attribute.

    Answers are the classes with positive probability, best first, at most
    ``MAX_PREDICTIONS`` of them.  Training rows are kept for export only and are
    not pickled.
    """

    def __init__(
        self,
        model: FeatureModel[C],
        schema: ForestSchema[C],
        learner: ForestLearner,
        attribute: AnalysisFeature[C],
        training_matrix: Optional[np.ndarray] = None,
        training_labels: Optional[Sequence[str]] = None,
    ) -> None:
        super().__init__((FeatureData,), (attribute,), produces_rankings=True, produces_scores=True)
        model.close()
        self.model = model
        self.schema = schema
        self.learner = learner
        self.attribute = attribute
        self.training_matrix = training_matrix
        self.training_labels = list(training_labels) if training_labels is not None else None

    @property
    def output_feature(self):
        return self.model.output_feature

    def _analyze(self, input: Any, collect: Callable[[Optional[Analysis]], None]) -> None:
        row = self.schema.vectorize(input, strict=False)
        probabilities = self.learner.predict_proba(row.reshape(1, -1))[0]
        classes = self.learner.classes_
        order = np.argsort(-probabilities, kind="stable")
        emitted = 0
        for idx in order:
            if emitted >= MAX_PREDICTIONS or probabilities[idx] <= 0.0:
                break
            value = self.output_feature.parse(str(classes[idx]))
            if value is None:
                continue
            analysis = Analysis()
            analysis.set(self.attribute, value)
            analysis.score = float(probabilities[idx])
            collect(analysis)
            emitted += 1

    def training_frame(self) -> Optional[pd.DataFrame]:
        if self.training_matrix is None or self.training_labels is None:
            return None
        return self.schema.to_frame(self.training_matrix, self.training_labels)

    def __getstate__(self) -> dict:
        state = super().__getstate__()
        state["training_matrix"] = None
        state["training_labels"] = None
        return state

    def __repr__(self) -> str:
        return f"TrainedForest[{self.attribute.name}: {self.schema!r}]"
