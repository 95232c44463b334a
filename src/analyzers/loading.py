"""Build an analyzer pool from ``id=module:factory`` specs."""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import Iterable

from src.codes import CodeRegistry

from .base import Analyzer
from .pool import AnalyzerPool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyzerSpec:
    analyzer_id: str
    module: str
    factory: str

    @classmethod
    def parse(cls, text: str) -> "AnalyzerSpec":
        analyzer_id, sep, target = text.partition("=")
        module, colon, factory = target.partition(":")
        if not sep or not colon or not analyzer_id.strip() or not module.strip() or not factory.strip():
            raise ValueError(f"Analyzer spec must look like id=module:factory, got {text!r}")
        return cls(analyzer_id.strip(), module.strip(), factory.strip())

    def create(self, registry: CodeRegistry) -> Analyzer:
        """Import the factory and call it with the code registry."""
        module = importlib.import_module(self.module)
        factory = getattr(module, self.factory, None)
        if factory is None:
            raise ValueError(f"{self.module} has no attribute {self.factory!r}")
        analyzer = factory(registry)
        if not isinstance(analyzer, Analyzer):
            raise ValueError(f"{self.module}:{self.factory} did not return an Analyzer")
        return analyzer


def build_pool(specs: Iterable[str], registry: CodeRegistry) -> AnalyzerPool:
    pool = AnalyzerPool()
    for text in specs:
        spec = AnalyzerSpec.parse(text)
        logger.info("Initializing analyzer %s from %s:%s", spec.analyzer_id, spec.module, spec.factory)
        pool.register(spec.analyzer_id, spec.create(registry))
    return pool
