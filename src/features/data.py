from __future__ import annotations

from typing import Any, Dict, Iterator, Optional, Tuple

from .model import ModelFeature


class FeatureData:
    """Sparse, set-once mapping from feature to value."""

    def __init__(self) -> None:
        self._features: Dict[ModelFeature[Any], Any] = {}

    @property
    def features(self) -> Dict[ModelFeature[Any], Any]:
        return dict(self._features)

    def __contains__(self, feature: object) -> bool:
        return feature in self._features

    def __len__(self) -> int:
        return len(self._features)

    def get(self, feature: ModelFeature[Any]) -> Optional[Any]:
        return self._features.get(feature)

    def set(self, feature: ModelFeature[Any], value: Any) -> None:
        """Record ``value`` for ``feature``; ``None`` leaves the slot empty."""
        if value is None:
            return
        if feature in self._features:
            raise RuntimeError(f"Feature value is already specified: {feature!r}")
        self._features[feature] = value

    def items(self) -> Iterator[Tuple[ModelFeature[Any], Any]]:
        return iter(list(self._features.items()))

    def __repr__(self) -> str:
        return f"FeatureData[{len(self._features)} features]"
