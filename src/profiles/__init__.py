"""Feature extraction, training, and the packaged forest analyzer."""

from .analyzer import ForestAnalyzer, ForestWorking
from .artifact import Profile, load_artifact, write_artifact
from .text_models import (
    BINARY_SIZE,
    DETECTED_ENCODING,
    ENCODING_PREFIX,
    LANGUAGE_PREFIX,
    SCRIPT_PREFIX,
    encoding_model,
    fill_feature,
    fill_features,
    language_model,
    script_model,
)
from .trainer import Trainer

__all__ = [
    "BINARY_SIZE",
    "DETECTED_ENCODING",
    "ENCODING_PREFIX",
    "ForestAnalyzer",
    "ForestWorking",
    "LANGUAGE_PREFIX",
    "Profile",
    "SCRIPT_PREFIX",
    "Trainer",
    "encoding_model",
    "fill_feature",
    "fill_features",
    "language_model",
    "load_artifact",
    "script_model",
    "write_artifact",
]
