"""Optuna-backed hyperparameter tuning for attribute forests."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Protocol, Tuple

import numpy as np
import optuna

from .learner import ForestConfig, ForestLearner, RandomForestLearner, holdout_split

logger = logging.getLogger(__name__)


class ForestTuner(Protocol):
    """How the forest builder obtains a configured learner."""

    def tune(self, features: np.ndarray, labels: np.ndarray) -> None:
        """Inspect training rows and run tuning (no-op if already tuned)."""

    def make_learner(self) -> ForestLearner:
        """Return a newly configured learner ready to fit."""


@dataclass
class ForestTuningConfig:
    """Configuration controlling one Optuna tuning pass."""

    trials: int = 25
    random_seed: int = 42
    validation_size: float = 0.2
    subsample: int = 2000  # cap tuning cost on large training files


class FixedForestTuner:
    """No tuning; always hands out the base configuration."""

    def __init__(self, config: Optional[ForestConfig] = None) -> None:
        self.config = config or ForestConfig()

    def tune(self, features: np.ndarray, labels: np.ndarray) -> None:
        if self._best_config is not None:
            return

        X, y = _sample_rows(features, np.asarray(labels).astype(str), self.tuning_config)
        if np.unique(y).size < 2 or X.shape[0] < 5:
            logger.info("Skipping forest tuning: not enough distinct labels or rows.")
            self._best_config = self.base_config
            return

        # One hold-out split shared by every trial.
        split = holdout_split(X, y, self.tuning_config.validation_size, self.tuning_config.random_seed)

        def objective(trial: optuna.Trial) -> float:
            X_train, X_held, y_train, y_held = split
            learner = RandomForestLearner(self._suggest_config(trial))
            return learner.fit(X_train, y_train).score(X_held, y_held)

        sampler = optuna.samplers.TPESampler(seed=self.tuning_config.random_seed)
        self._study = optuna.create_study(direction="maximize", sampler=sampler, study_name="attribute_forest")
        self._study.optimize(objective, n_trials=self.tuning_config.trials)

        self._best_config = replace(self.base_config, **self._study.best_params)
        logger.info(
            "Best forest parameters: %s (held-out accuracy %.4f)", self._study.best_params, self._study.best_value
        )

    def make_learner(self) -> RandomForestLearner:
        return RandomForestLearner(self._best_config or self.base_config)

    def _suggest_config(self, trial: optuna.Trial) -> ForestConfig:
        # Parameter names match ForestConfig fields so best_params replace them directly.
        return replace(
            self.base_config,
            n_estimators=trial.suggest_int("n_estimators", 50, 400),
            max_depth=trial.suggest_int("max_depth", 5, 32),
            max_features=trial.suggest_categorical("max_features", ["sqrt", "log2", None]),
            min_samples_split=trial.suggest_int("min_samples_split", 2, 20),
            min_samples_leaf=trial.suggest_int("min_samples_leaf", 1, 20),
        )


def _sample_rows(
    features: np.ndarray, labels: np.ndarray, config: ForestTuningConfig
) -> Tuple[np.ndarray, np.ndarray]:
    if features.shape[0] <= config.subsample:
        return features, labels
    rng = np.random.default_rng(config.random_seed)
    idx = rng.choice(features.shape[0], size=config.subsample, replace=False)
    return features[idx], labels[idx]
