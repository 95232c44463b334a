"""Collect labeled data and fit one attribute forest."""

from __future__ import annotations

import logging
import time
from typing import Generic, List, Optional, TypeVar

import numpy as np

from src.analyzers import AnalysisFeature
from src.features import Datum, FeatureModel

from .schema import ForestSchema
from .trained import TrainedForest
from .tuner import FixedForestTuner, ForestTuner

logger = logging.getLogger(__name__)

C = TypeVar("C")


class ForestBuilder(Generic[C]):
    """Materialize datums into a dense matrix and train a random forest on it.

    Missing numeric cells get ``UNKNOWN_NUMERIC`` and missing nominal cells the
    ``UNK`` category, so "no signal" never collides with a real value.
    """

    def __init__(
        self,
        model: FeatureModel[C],
        attribute: AnalysisFeature[C],
        tuner: Optional[ForestTuner] = None,
        keep_training_data: bool = False,
    ) -> None:
        if model is None:
            raise ValueError("Feature model is required.")
        self.model = model
        self.attribute = attribute
        self.tuner = tuner or FixedForestTuner()
        self.keep_training_data = keep_training_data
        self._data: List[Datum[C]] = []

    def __len__(self) -> int:
        return len(self._data)

    def add_training_data(self, datum: Optional[Datum[C]]) -> None:
        if datum is None:
            return
        self._data.append(datum)

    def build(self) -> TrainedForest[C]:
        if not self._data:
            raise ValueError(f"No training data for {self.model.output_feature.name}.")
        self.model.close()
        schema = ForestSchema(self.model)
        name = self.model.output_feature.name

        logger.info("Creating %s model from %d instances.", name, len(self._data))
        start = time.perf_counter()
        matrix = schema.matrix((datum.feature_data for datum in self._data), strict=True)
        labels = np.array([schema.label(datum.ground_truth) for datum in self._data], dtype=object)
        logger.info("Created %s model: %r in %.2fs", name, schema, time.perf_counter() - start)

        self.tuner.tune(matrix, labels)
        learner = self.tuner.make_learner()

        logger.info("Training %s model.", name)
        start = time.perf_counter()
        learner.fit(matrix, labels)
        logger.info(
            "Trained %s model in %.2fs (training accuracy %.4f)",
            name,
            time.perf_counter() - start,
            learner.score(matrix, labels),
        )

        return TrainedForest(
            self.model,
            schema,
            learner,
            self.attribute,
            training_matrix=matrix if self.keep_training_data else None,
            training_labels=labels.tolist() if self.keep_training_data else None,
        )
