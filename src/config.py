"""Static configuration for training, evaluation, and artifact paths."""

from __future__ import annotations

from pathlib import Path

# Sentinels written into dense training rows when an upstream analyzer gave no signal.
UNKNOWN_NOMINAL = "UNK"
UNKNOWN_NUMERIC = -1.0

# Ranked results per upstream analyzer that are turned into model features.
MAX_FEATURE_RANKS = 3

# Ranks that count towards the voting composite.
MAX_VOTES = 5

# Ranked predictions emitted by a trained forest.
MAX_PREDICTIONS = 5

PROGRESS_INTERVAL = 100

VOTING_ANALYZER_ID = "voting"

# Default directories used by the Typer CLI; callers may override these.
DEFAULT_ARTIFACT_ROOT = Path("build/artifacts/profiles")
DEFAULT_REPORT_ROOT = Path("build/reports")

# Random forest seed; training is deterministic given this value.
DEFAULT_FOREST_SEED = 1


__all__ = [
    "DEFAULT_ARTIFACT_ROOT",
    "DEFAULT_FOREST_SEED",
    "DEFAULT_REPORT_ROOT",
    "MAX_FEATURE_RANKS",
    "MAX_PREDICTIONS",
    "MAX_VOTES",
    "PROGRESS_INTERVAL",
    "UNKNOWN_NOMINAL",
    "UNKNOWN_NUMERIC",
    "VOTING_ANALYZER_ID",
]
