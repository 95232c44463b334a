"""Typed, validated feature vocabulary used to describe training instances."""

from __future__ import annotations

import math
import numbers
import threading
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, List, Optional, Sequence, Tuple, Type, TypeVar

F = TypeVar("F")
C = TypeVar("C")

Parser = Callable[[str], Any]
Formatter = Callable[[Any], str]

UNSET_TEXT = "?"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of checking a candidate value against a feature."""

    ok: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.ok


VALID = ValidationResult(True)


def _invalid(reason: str) -> ValidationResult:
    return ValidationResult(False, reason)


class ModelFeature(Generic[F]):
    """A named, typed slot in a feature model.

    ``None`` is always a valid value and stands for "no signal".  Text conversion
    treats a blank string or ``"?"`` as ``None`` in both directions.
    """

    def __init__(self, name: str, value_type: Type[F], parser: Parser, formatter: Formatter) -> None:
        if not name:
            raise ValueError("Feature name required.")
        if value_type is None:
            raise ValueError("Value type required.")
        if parser is None or formatter is None:
            raise ValueError("Value parser and formatter required.")
        self._name = name
        self.value_type = value_type
        self._parser = parser
        self._formatter = formatter

    @property
    def name(self) -> str:
        return self._name

    def parse(self, text: Optional[str]) -> Optional[F]:
        if text is None or not str(text).strip() or str(text).strip() == UNSET_TEXT:
            return None
        return self._parser(str(text))

    def as_text(self, value: Optional[F]) -> str:
        return self._formatter(value) if value is not None else UNSET_TEXT

    def validate(self, value: Any) -> ValidationResult:
        if value is None:
            return VALID
        if not isinstance(value, self.value_type):
            return _invalid(f"expected {self.value_type.__name__}, got {type(value).__name__}")
        return VALID

    def test(self, value: Any) -> bool:
        return self.validate(value).ok

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ModelFeature) and other._name == self._name

    def __hash__(self) -> int:
        return hash(self._name)

    def __lt__(self, other: "ModelFeature[Any]") -> bool:
        return self._name < other._name

    def __repr__(self) -> str:
        return f"{type(self).__name__}[{self._name}]"


class NumericFeature(ModelFeature[F]):
    """Numeric slot with an optional inclusive range check."""

    def __init__(
        self,
        name: str,
        value_type: Type[F],
        parser: Parser,
        minimum: Optional[float] = None,
        maximum: Optional[float] = None,
    ) -> None:
        super().__init__(name, value_type, parser, str)
        if minimum is not None and maximum is not None and maximum < minimum:
            raise ValueError("maximum cannot be smaller than minimum.")
        self.minimum = minimum
        self.maximum = maximum

    def validate(self, value: Any) -> ValidationResult:
        if value is None:
            return VALID
        if isinstance(value, bool) or not isinstance(value, self.value_type):
            return _invalid(f"expected {self.value_type.__name__}, got {type(value).__name__}")
        if not math.isfinite(float(value)):
            return _invalid("value must be finite")
        if self.minimum is not None and value < self.minimum:
            return _invalid(f"{value} is below the minimum {self.minimum}")
        if self.maximum is not None and value > self.maximum:
            return _invalid(f"{value} is above the maximum {self.maximum}")
        return VALID


class IntegerFeature(NumericFeature[int]):
    def __init__(self, name: str, minimum: Optional[int] = None, maximum: Optional[int] = None) -> None:
        super().__init__(name, numbers.Integral, int, minimum, maximum)  # type: ignore[arg-type]


class RealFeature(NumericFeature[float]):
    def __init__(self, name: str, minimum: Optional[float] = None, maximum: Optional[float] = None) -> None:
        super().__init__(name, numbers.Real, float, minimum, maximum)  # type: ignore[arg-type]


class EnumeratedFeature(ModelFeature[F]):
    """Slot whose values come from a closed set.

    The domain is either declared up front (and closed immediately) or grows as
    values are validated until :meth:`close` is called.
    """

    def __init__(
        self,
        name: str,
        value_type: Type[F],
        parser: Parser,
        formatter: Formatter,
        values: Optional[Iterable[F]] = None,
    ) -> None:
        super().__init__(name, value_type, parser, formatter)
        self._lock = threading.RLock()
        self._values: List[F] = []
        self._index: dict = {}
        self._dynamic = True
        if values is not None:
            self.set_values(values)

    @property
    def closed(self) -> bool:
        return not self._dynamic

    @property
    def values(self) -> Tuple[F, ...]:
        with self._lock:
            return tuple(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def set_values(self, values: Iterable[F]) -> None:
        """Declare the domain and close it."""
        values = list(values)
        if not values:
            return
        with self._lock:
            if not self._dynamic:
                raise RuntimeError(f"Value list of {self.name} is closed.")
            if self._values:
                raise RuntimeError(f"Value list of {self.name} is not empty.")
            for value in values:
                if not isinstance(value, self.value_type):
                    raise ValueError(f"Invalid domain value for {self.name}: {value!r}")
                self._add(value)
            self._dynamic = False

    def close(self) -> None:
        with self._lock:
            self._dynamic = False

    def to_ordinal(self, value: Optional[F]) -> int:
        """Position of ``value`` in the domain, or -1."""
        if not self.test(value) or value is None:
            return -1
        return self._index.get(value, -1)

    def to_value(self, ordinal: int) -> Optional[F]:
        with self._lock:
            if 0 <= ordinal < len(self._values):
                return self._values[ordinal]
        return None

    def validate(self, value: Any) -> ValidationResult:
        result = super().validate(value)
        if not result or value is None:
            return result
        with self._lock:
            if value in self._index:
                return VALID
            if not self._dynamic:
                return _invalid(f"{value!r} is not in the closed value set of {self.name}")
            self._add(value)
        return VALID

    def _add(self, value: F) -> None:
        if value not in self._index:
            self._index[value] = len(self._values)
            self._values.append(value)

    def __getstate__(self) -> dict:
        state = self.__dict__.copy()
        state.pop("_lock", None)
        return state

    def __setstate__(self, state: dict) -> None:
        self.__dict__.update(state)
        self._lock = threading.RLock()


class NominalFeature(EnumeratedFeature[str]):
    """String valued enumerated feature."""

    def __init__(self, name: str, values: Optional[Sequence[str]] = None) -> None:
        super().__init__(name, str, str.strip, str, values)


class FeatureModel(Generic[C]):
    """Ordered input features plus the output (ground truth) feature."""

    def __init__(self, output_feature: ModelFeature[C]) -> None:
        if output_feature is None:
            raise ValueError("Output feature is required.")
        self.output_feature = output_feature
        self._input_features: List[ModelFeature[Any]] = []

    @property
    def input_features(self) -> List[ModelFeature[Any]]:
        return list(self._input_features)

    def get_input_feature(self, name: str) -> Optional[ModelFeature[Any]]:
        target = name.lower()
        for feature in self._input_features:
            if feature.name.lower() == target:
                return feature
        return None

    def add_input_feature(self, feature: ModelFeature[Any]) -> "FeatureModel[C]":
        if feature is None:
            raise ValueError("Model feature is required.")
        if feature in self._input_features:
            raise ValueError(f"Duplicate feature: {feature!r}")
        self._input_features.append(feature)
        return self

    def parse(self, text: Optional[str]) -> Optional[C]:
        return self.output_feature.parse(text)

    def as_text(self, value: Optional[C]) -> str:
        return self.output_feature.as_text(value)

    def close(self) -> None:
        """Freeze every enumerated domain in the model."""
        for feature in [*self._input_features, self.output_feature]:
            if isinstance(feature, EnumeratedFeature):
                feature.close()

    def __repr__(self) -> str:
        return f"FeatureModel[{self.output_feature.name} <- {len(self._input_features)} features]"
