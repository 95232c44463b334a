"""Train the encoding, language and script forests and package them."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from src.analyzers import ENCODING, LANGUAGE, SCRIPT, AnalysisFeature, AnalyzerPool
from src.codes import CodeRegistry
from src.config import DEFAULT_ARTIFACT_ROOT, PROGRESS_INTERVAL
from src.datahub import InputRecord, load_input_records
from src.features import Datum, FeatureModel
from src.forest import FixedForestTuner, ForestBuilder, ForestTuner, TrainedForest

from .analyzer import ForestAnalyzer
from .artifact import Profile, write_artifact
from .text_models import (
    ENCODING_PREFIX,
    LANGUAGE_PREFIX,
    SCRIPT_PREFIX,
    encoding_model,
    fill_features,
    language_model,
    produces_encoding,
    produces_language_or_script,
    script_model,
)

logger = logging.getLogger(__name__)

TunerFactory = Callable[[], ForestTuner]


class Trainer:
    """One training run: three attribute forests from one labeled index."""

    def __init__(
        self,
        name: str,
        pool: AnalyzerPool,
        registry: CodeRegistry,
        required: Iterable[str],
        input_file: Optional[Path] = None,
        *,
        records: Optional[Sequence[InputRecord]] = None,
        artifact_root: Path = DEFAULT_ARTIFACT_ROOT,
        export_matrices: bool = False,
        tuner_factory: Optional[TunerFactory] = None,
    ) -> None:
        name = (name or "").strip().lower()
        if not name:
            raise ValueError("Profile name is required.")
        if input_file is None and records is None:
            raise ValueError("A training file or training records are required.")
        self.name = name
        self.pool = pool
        self.registry = registry
        self.required = sorted(set(required))
        if not self.required:
            raise ValueError("No required analyzers specified.")
        missing = [analyzer_id for analyzer_id in self.required if analyzer_id not in pool]
        if missing:
            raise ValueError(f"Required analyzer not available: {', '.join(missing)}")
        self.input_file = Path(input_file) if input_file is not None else None
        self.artifact_root = Path(artifact_root)
        self.export_matrices = export_matrices
        self.tuner_factory: TunerFactory = tuner_factory or FixedForestTuner
        self.input_records: List[InputRecord] = list(records) if records is not None else []
        self._records_given = records is not None
        self.profile: Optional[Profile] = None
        self.artifact_path: Optional[Path] = None

    def load_training_records(self) -> List[InputRecord]:
        if self._records_given:
            return self.input_records
        if self.input_file is None:
            raise ValueError("No input file or records to train with.")
        return load_input_records(self.input_file, self.registry)

    def run(self) -> ForestAnalyzer:
        self.input_records = self.load_training_records()
        if not self.input_records:
            raise ValueError("No usable training records.")
        encoding_forest = self.train_encoding_forest()
        language_forest = self.train_language_forest()
        script_forest = self.train_script_forest()
        return self.create_artifact(encoding_forest, language_forest, script_forest)

    # --- attribute runs ------------------------------------------------

    def train_encoding_forest(self) -> TrainedForest[str]:
        model = encoding_model(self.pool, self.required, self.registry)
        return self._train(model, ENCODING, lambda record: record.encoding, decode_text=False, text_prefix=None)

    def train_language_forest(self) -> TrainedForest[Any]:
        model = language_model(self.pool, self.required, self.registry)
        return self._train(model, LANGUAGE, lambda record: record.language, decode_text=True, text_prefix=LANGUAGE_PREFIX)

    def train_script_forest(self) -> TrainedForest[Any]:
        model = script_model(self.pool, self.required, self.registry)
        return self._train(model, SCRIPT, lambda record: record.script, decode_text=True, text_prefix=SCRIPT_PREFIX)

    def _train(
        self,
        model: FeatureModel[Any],
        attribute: AnalysisFeature[Any],
        truth: Callable[[InputRecord], Any],
        decode_text: bool,
        text_prefix: Optional[str],
    ) -> TrainedForest[Any]:
        logger.info("Creating training data for %s model.", attribute.name)
        builder: ForestBuilder[Any] = ForestBuilder(
            model,
            attribute,
            tuner=self.tuner_factory(),
            keep_training_data=self.export_matrices,
        )
        total = len(self.input_records)
        for count, record in enumerate(self.input_records, start=1):
            datum: Datum[Any] = Datum(model.output_feature, truth(record))
            results: Dict[Any, Dict[str, Any]] = {
                record.data: self.pool.run(record.data, self._is_required, produces_encoding)
            }
            if decode_text:
                text = record.text()
                results[text] = self.pool.run(text, self._is_required, produces_language_or_script)
            text_info = record.text_info()
            fill_features(text_info, datum.feature_data, model, ENCODING_PREFIX, results, self.pool)
            if text_prefix is not None:
                fill_features(text_info, datum.feature_data, model, text_prefix, results, self.pool)
            builder.add_training_data(datum)
            if count % PROGRESS_INTERVAL == 0:
                logger.debug("Processed %d / %d training records.", count, total)

        logger.info("Training %s model.", attribute.name)
        forest = builder.build()
        logger.info("%s model training complete.", attribute.name.capitalize())
        return forest

    def _is_required(self, analyzer_id: str) -> bool:
        return analyzer_id in self.required

    # --- packaging -----------------------------------------------------

    def create_artifact(
        self,
        encoding_forest: TrainedForest[str],
        language_forest: TrainedForest[Any],
        script_forest: TrainedForest[Any],
    ) -> ForestAnalyzer:
        analyzer = ForestAnalyzer(self.pool, self.required, encoding_forest, language_forest, script_forest)
        self.profile = Profile.for_training(self.name, analyzer, self.input_file, len(self.input_records))
        self.artifact_path = write_artifact(
            self.artifact_root,
            self.profile,
            analyzer,
            export_matrices=self.export_matrices,
        )
        return analyzer
