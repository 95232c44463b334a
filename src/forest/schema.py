"""Dense column layout shared by forest training and inference."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

import numpy as np
import pandas as pd

from src.config import UNKNOWN_NOMINAL, UNKNOWN_NUMERIC
from src.features import EnumeratedFeature, FeatureData, FeatureModel, ModelFeature

logger = logging.getLogger(__name__)

C = TypeVar("C")

UNKNOWN_ORDINAL = 0


@dataclass(frozen=True)
class ColumnSpec:
    """One input column: numeric, or nominal with ``UNK`` as category zero."""

    feature: ModelFeature[Any]
    categories: Optional[Tuple[str, ...]] = None
    _ordinals: Dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        ordinals = {text: idx for idx, text in enumerate(self.categories or ())}
        object.__setattr__(self, "_ordinals", ordinals)

    @classmethod
    def for_feature(cls, feature: ModelFeature[Any]) -> "ColumnSpec":
        if isinstance(feature, EnumeratedFeature):
            categories = [UNKNOWN_NOMINAL]
            for value in feature.values:
                text = feature.as_text(value)
                if text not in categories:
                    categories.append(text)
            return cls(feature, tuple(categories))
        return cls(feature)

    @property
    def name(self) -> str:
        return self.feature.name

    @property
    def nominal(self) -> bool:
        return self.categories is not None

    def encode(self, value: Any, strict: bool = False) -> float:
        """Numeric cell for ``value``; missing values become the column sentinel.

        A nominal value outside the category list raises ``ValueError`` when
        ``strict`` and maps to ``UNK`` otherwise.
        """
        if not self.nominal:
            return UNKNOWN_NUMERIC if value is None else float(value)
        if value is None:
            return float(UNKNOWN_ORDINAL)
        text = self.feature.as_text(value)
        ordinal = self._ordinals.get(text)
        if ordinal is None:
            if strict:
                raise ValueError(f"Unknown nominal value for {self.name}: {text!r}")
            logger.debug("Unknown value for %s: %r; using %s", self.name, text, UNKNOWN_NOMINAL)
            return float(UNKNOWN_ORDINAL)
        return float(ordinal)

    def decode(self, cell: float) -> Any:
        if not self.nominal:
            return cell
        return self.categories[int(cell)]


class ForestSchema(Generic[C]):
    """Column layout for a feature model: one column per input feature."""

    def __init__(self, model: FeatureModel[C]) -> None:
        self.output_feature: ModelFeature[C] = model.output_feature
        self.columns: Tuple[ColumnSpec, ...] = tuple(ColumnSpec.for_feature(f) for f in model.input_features)

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def __len__(self) -> int:
        return len(self.columns)

    def vectorize(self, feature_data: FeatureData, strict: bool = False) -> np.ndarray:
        return np.array(
            [column.encode(feature_data.get(column.feature), strict) for column in self.columns],
            dtype=np.float64,
        )

    def matrix(self, rows: Iterable[FeatureData], strict: bool = False) -> np.ndarray:
        vectors = [self.vectorize(row, strict) for row in rows]
        if not vectors:
            return np.empty((0, len(self.columns)), dtype=np.float64)
        return np.vstack(vectors)

    def label(self, value: C) -> str:
        return self.output_feature.as_text(value)

    def to_frame(self, matrix: np.ndarray, labels: Sequence[str]) -> pd.DataFrame:
        """Readable training table: nominal cells as category text, class label last."""
        frame = pd.DataFrame(
            {column.name: [column.decode(cell) for cell in matrix[:, idx]] for idx, column in enumerate(self.columns)}
        )
        frame[self.output_feature.name] = list(labels)
        return frame

    def __repr__(self) -> str:
        nominal = sum(1 for column in self.columns if column.nominal)
        return f"ForestSchema[{self.output_feature.name}: {len(self.columns)} columns, {nominal} nominal]"
