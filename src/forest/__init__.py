"""Random forest training and inference over feature data."""

from .builder import ForestBuilder
from .learner import ForestConfig, ForestLearner, RandomForestLearner, holdout_split
from .schema import ColumnSpec, ForestSchema
from .trained import TrainedForest
from .tuner import FixedForestTuner, ForestTuner, ForestTuningConfig, OptunaForestTuner

__all__ = [
    "ColumnSpec",
    "FixedForestTuner",
    "ForestBuilder",
    "ForestConfig",
    "ForestLearner",
    "ForestSchema",
    "ForestTuner",
    "ForestTuningConfig",
    "OptunaForestTuner",
    "RandomForestLearner",
    "TrainedForest",
    "holdout_split",
]
