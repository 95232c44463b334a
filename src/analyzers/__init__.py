"""Analyzer contract, pool, and the ensemble/voting composites."""

from .base import (
    ENCODING,
    LANGUAGE,
    LENGTH,
    SCRIPT,
    SIZE,
    Analysis,
    AnalysisFeature,
    Analyzer,
    TextInfo,
)
from .builtin import CodecProbeAnalyzer, UnicodeScriptAnalyzer
from .election import Election
from .encoding import codec_name, decode, lenient_name, normalize_encoding, try_decode
from .ensemble import EnsembleAnalyzer, Working
from .loading import AnalyzerSpec, build_pool
from .pool import AnalyzerPool
from .voting import VotingAnalyzer

__all__ = [
    "Analysis",
    "AnalysisFeature",
    "Analyzer",
    "AnalyzerPool",
    "AnalyzerSpec",
    "CodecProbeAnalyzer",
    "ENCODING",
    "Election",
    "EnsembleAnalyzer",
    "LANGUAGE",
    "LENGTH",
    "SCRIPT",
    "SIZE",
    "TextInfo",
    "UnicodeScriptAnalyzer",
    "VotingAnalyzer",
    "Working",
    "build_pool",
    "codec_name",
    "decode",
    "lenient_name",
    "normalize_encoding",
    "try_decode",
]
