"""Profile metadata and the on-disk analyzer artifact.

An artifact is a directory named after the profile::

    <artifact_root>/<name>/
        profile.json          # Profile metadata
        forests.joblib        # required analyzer ids and the three trained forests
        matrices/<attr>.csv   # optional training matrices

The upstream analyzers are not stored; a loaded artifact is bound to the pool
passed to :func:`load_artifact`.
"""

from __future__ import annotations

import getpass
import json
import logging
import shutil
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import joblib

from src.analyzers import AnalyzerPool
from src.forest import TrainedForest

from .analyzer import ForestAnalyzer

logger = logging.getLogger(__name__)

PROFILE_FILE = "profile.json"
FORESTS_FILE = "forests.joblib"
MATRICES_DIR = "matrices"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S %Z"


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


@dataclass(frozen=True)
class Profile:
    """Who trained an artifact, when, and on what."""

    name: str
    required_analyzers: List[str]
    training_file: str
    training_instances: int
    last_training_file_update: Optional[str] = None
    create_date: str = field(default_factory=lambda: datetime.now(timezone.utc).strftime(DATE_FORMAT))
    trainer: str = field(default_factory=_current_user)

    @classmethod
    def for_training(
        cls,
        name: str,
        analyzer: ForestAnalyzer,
        training_file: Optional[Path],
        training_instances: int,
    ) -> "Profile":
        updated = None
        if training_file is not None and training_file.exists():
            updated = datetime.fromtimestamp(training_file.stat().st_mtime, timezone.utc).strftime(DATE_FORMAT)
        return cls(
            name=name.strip(),
            required_analyzers=sorted(analyzer.required_analyzers),
            training_file=training_file.name if training_file is not None else "null",
            training_instances=training_instances,
            last_training_file_update=updated,
        )

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, object]) -> "Profile":
        return cls(**payload)  # type: ignore[arg-type]


def artifact_dir(artifact_root: Path, name: str) -> Path:
    return Path(artifact_root) / name


def write_artifact(
    artifact_root: Path,
    profile: Profile,
    analyzer: ForestAnalyzer,
    export_matrices: bool = False,
) -> Path:
    """Write ``analyzer`` and ``profile`` under ``artifact_root``, replacing any previous copy."""
    target = artifact_dir(artifact_root, profile.name)
    logger.info("Creating analyzer artifact: %s", target)
    if target.exists():
        logger.info("Removing existing artifact.")
        shutil.rmtree(target)
    target.mkdir(parents=True)

    forests = {
        "encoding": analyzer.encoding_forest,
        "language": analyzer.language_forest,
        "script": analyzer.script_forest,
    }
    if export_matrices:
        # Written before serialization, which drops the training rows.
        matrices = target / MATRICES_DIR
        matrices.mkdir()
        for attribute, forest in forests.items():
            frame = forest.training_frame()
            if frame is None:
                logger.warning("No training rows kept for the %s forest; skipping export.", attribute)
                continue
            frame.to_csv(matrices / f"{attribute}.csv", index=False)

    (target / PROFILE_FILE).write_text(json.dumps(profile.to_dict(), indent=2, sort_keys=True), encoding="utf-8")
    joblib.dump({"required": sorted(analyzer.required_analyzers), **forests}, target / FORESTS_FILE)
    return target


def load_artifact(artifact_root: Path, name: str, pool: AnalyzerPool) -> Tuple[Profile, ForestAnalyzer]:
    """Load a profile and rebuild its analyzer on top of ``pool``."""
    source = artifact_dir(artifact_root, name)
    profile_path = source / PROFILE_FILE
    if not profile_path.exists():
        raise FileNotFoundError(f"No analyzer profile at {source}")
    profile = Profile.from_dict(json.loads(profile_path.read_text(encoding="utf-8")))
    payload = joblib.load(source / FORESTS_FILE)
    forests: Dict[str, TrainedForest] = {key: payload[key] for key in ("encoding", "language", "script")}
    analyzer = ForestAnalyzer(
        pool,
        payload["required"],
        forests["encoding"],
        forests["language"],
        forests["script"],
    )
    logger.info("Loaded analyzer profile %s (%d training instances).", profile.name, profile.training_instances)
    return profile, analyzer
