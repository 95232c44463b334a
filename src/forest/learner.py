"""Random forest learner wrapping scikit-learn's RandomForestClassifier."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Sequence, Tuple, Union

import numpy as np
from sklearn.ensemble import RandomForestClassifier
from sklearn.model_selection import train_test_split

from src.config import DEFAULT_FOREST_SEED

MatrixLike = Union[np.ndarray, Sequence[Sequence[float]]]
LabelLike = Union[np.ndarray, Sequence[str]]


class ForestLearner(Protocol):
    """Minimal surface the forest builder needs from a learner."""

    classes_: np.ndarray

    def fit(self, features: MatrixLike, labels: LabelLike) -> "ForestLearner": ...

    def predict(self, features: MatrixLike) -> np.ndarray: ...

    def predict_proba(self, features: MatrixLike) -> np.ndarray: ...

    def score(self, features: MatrixLike, labels: LabelLike) -> float: ...


@dataclass
class ForestConfig:
    """Hyper-parameters forwarded to scikit-learn's RandomForestClassifier."""

    n_estimators: int = 100
    criterion: str = "gini"
    max_depth: Optional[int] = None
    min_samples_split: Union[int, float] = 2
    min_samples_leaf: Union[int, float] = 1
    max_features: Optional[Union[int, float, str]] = "sqrt"
    max_leaf_nodes: Optional[int] = None
    bootstrap: bool = True
    n_jobs: Optional[int] = None
    random_state: Optional[int] = DEFAULT_FOREST_SEED
    class_weight: Optional[Union[str, Dict[str, float]]] = None

    def to_classifier_kwargs(self) -> Dict[str, Any]:
        """Return kwargs compatible with RandomForestClassifier."""
        return dict(
            n_estimators=self.n_estimators,
            criterion=self.criterion,
            max_depth=self.max_depth,
            min_samples_split=self.min_samples_split,
            min_samples_leaf=self.min_samples_leaf,
            max_features=self.max_features,
            max_leaf_nodes=self.max_leaf_nodes,
            bootstrap=self.bootstrap,
            class_weight=self.class_weight,
            n_jobs=self.n_jobs,
            random_state=self.random_state,
        )


def ensure_matrix(features: MatrixLike, *, name: str = "features") -> np.ndarray:
    """Coerce rows into a float64 array of shape (n_samples, n_columns)."""
    arr = np.asarray(features, dtype=np.float64)
    if arr.ndim != 2:
        raise ValueError(f"{name} must be 2-D (rows × columns), got shape {arr.shape}")
    if arr.shape[0] == 0:
        raise ValueError(f"{name} cannot be empty")
    return arr


def ensure_labels(labels: LabelLike, *, name: str = "labels") -> np.ndarray:
    arr = np.asarray(labels, dtype=object)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be 1-D (rows,), got shape {arr.shape}")
    return arr


def holdout_split(
    features: np.ndarray,
    labels: np.ndarray,
    fraction: float,
    seed: Optional[int] = DEFAULT_FOREST_SEED,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Split rows into (train_X, held_X, train_y, held_y).

    The split is stratified when every class has two rows and both sides can
    hold one row per class; otherwise it is a plain shuffled split.
    """
    _, counts = np.unique(labels, return_counts=True)
    held = int(np.ceil(fraction * labels.shape[0]))
    stratified = counts.min() >= 2 and counts.size <= held <= labels.shape[0] - counts.size
    return train_test_split(
        features,
        labels,
        test_size=fraction,
        random_state=seed,
        stratify=labels if stratified else None,
    )


class RandomForestLearner:
    """Random forest over dense, numerically encoded feature rows."""

    config: ForestConfig
    model: Optional[RandomForestClassifier]

    def __init__(self, config: Optional[ForestConfig] = None) -> None:
        self.config = config or ForestConfig()
        self.model = None

    @property
    def classes_(self) -> np.ndarray:
        return np.asarray(self._require_model().classes_)

    def fit(self, features: MatrixLike, labels: LabelLike) -> "RandomForestLearner":
        X = ensure_matrix(features)
        y = ensure_labels(labels)
        if X.shape[0] != y.shape[0]:
            raise ValueError(f"Feature rows ({X.shape[0]}) and label count ({y.shape[0]}) must match")
        self.model = RandomForestClassifier(**self.config.to_classifier_kwargs())
        self.model.fit(X, y.astype(str))
        return self

    def predict(self, features: MatrixLike) -> np.ndarray:
        model = self._require_model()
        return np.asarray(model.predict(ensure_matrix(features)))

    def predict_proba(self, features: MatrixLike) -> np.ndarray:
        model = self._require_model()
        return np.asarray(model.predict_proba(ensure_matrix(features)))

    def score(self, features: MatrixLike, labels: LabelLike) -> float:
        """Share of rows whose predicted label equals the given one."""
        expected = ensure_labels(labels).astype(str)
        return float((self.predict(features) == expected).mean())

    def _require_model(self) -> RandomForestClassifier:
        if self.model is None:
            raise RuntimeError("RandomForestLearner has not been fitted yet.")
        return self.model
