"""Analyzers that combine the answers of other analyzers in the pool."""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Any, Callable, Dict, List, Optional, Union

from src.codes import Language, Script

from .base import ENCODING, LANGUAGE, LENGTH, SCRIPT, SIZE, Analysis, Analyzer, TextInfo
from .encoding import codec_name, decode
from .pool import AnalyzerFilter, AnalyzerPool, IdFilter

logger = logging.getLogger(__name__)

Input = Union[bytes, str]
ResultsByInput = Dict[Input, Dict[str, List[Analysis]]]


class Working:
    """Per input state of one ensemble identification.

    Upstream results are remembered per input so an analyzer that already
    answered for the bytes or the decoded text is not run a second time.
    """

    def __init__(self, input: Input, pool: AnalyzerPool) -> None:
        self.pool = pool
        self.text_info = TextInfo()
        self.is_binary = isinstance(input, (bytes, bytearray))
        self.input_text: Optional[str]
        if self.is_binary:
            self.input_data = bytes(input)
            self.input_text = None
        else:
            self.input_text = str(input)
            self.input_data = self.input_text.encode("utf-8")
            self.text_info.encoding = "utf-8"
            self.text_info.length = len(self.input_text)
        self.text_info.size = len(self.input_data)
        self._prior: ResultsByInput = {}

    @property
    def encoding(self) -> Optional[str]:
        return self.text_info.encoding

    @encoding.setter
    def encoding(self, encoding: Optional[str]) -> None:
        previous = self.text_info.encoding
        self.text_info.encoding = encoding
        if previous == self.text_info.encoding and previous is not None:
            return
        length = None
        if encoding and codec_name(encoding) is not None:
            self.input_text = decode(self.input_data, encoding, errors="replace")
            length = len(self.input_text)
        self.text_info.length = length

    @property
    def language(self) -> Optional[Language]:
        return self.text_info.language

    @language.setter
    def language(self, language: Optional[Language]) -> None:
        self.text_info.language = language

    @property
    def script(self) -> Optional[Script]:
        return self.text_info.script

    @script.setter
    def script(self, script: Optional[Script]) -> None:
        self.text_info.script = script

    def run_analyzers(
        self,
        id_filter: Optional[IdFilter] = None,
        analyzer_filter: Optional[AnalyzerFilter] = None,
    ) -> ResultsByInput:
        """Run the selected pool analyzers on the bytes and, when known, the text."""
        results: ResultsByInput = {}
        inputs: List[Input] = [self.input_data]
        if self.input_text and self.input_text.strip():
            inputs.append(self.input_text)
        for input in inputs:
            answered = self._run(input, id_filter, analyzer_filter)
            self._prior.setdefault(input, {}).update(answered)
            results[input] = answered
        return results

    def _run(
        self,
        input: Input,
        id_filter: Optional[IdFilter],
        analyzer_filter: Optional[AnalyzerFilter],
    ) -> Dict[str, List[Analysis]]:
        results: Dict[str, List[Analysis]] = {}
        for analyzer_id, prior in self._prior.get(input, {}).items():
            if id_filter is not None and not id_filter(analyzer_id):
                continue
            analyzer = self.pool.get(analyzer_id)
            if (analyzer_filter is None or analyzer_filter(analyzer)) and analyzer.accepts(type(input)):
                results[analyzer_id] = prior
        reused = set(results)
        results.update(
            self.pool.run(
                input,
                lambda analyzer_id: analyzer_id not in reused and (id_filter is None or id_filter(analyzer_id)),
                analyzer_filter,
            )
        )
        return results


class EnsembleAnalyzer(Analyzer):
    """Identify encoding, then decode, then identify language and script."""

    INPUT_TYPES = (bytes, str)
    OUTPUT_FEATURES = (SIZE, ENCODING, LENGTH, LANGUAGE, SCRIPT)

    def __init__(self, pool: AnalyzerPool) -> None:
        super().__init__(self.INPUT_TYPES, self.OUTPUT_FEATURES)
        self.pool = pool

    def start_identification(self, input: Input) -> Working:
        return Working(input, self.pool)

    def _analyze(self, input: Any, collect: Callable[[Optional[Analysis]], None]) -> None:
        working = self.start_identification(input)
        if working.is_binary:
            self.identify_encoding(working)
            if working.encoding is not None and codec_name(working.encoding) is not None:
                working.input_text = decode(working.input_data, working.encoding, errors="replace")
                working.text_info.length = len(working.input_text)
        self.identify_language(working)
        self.identify_script(working)
        collect(working.text_info)

    @abstractmethod
    def identify_encoding(self, working: Working) -> None:
        ...

    @abstractmethod
    def identify_language(self, working: Working) -> None:
        ...

    @abstractmethod
    def identify_script(self, working: Working) -> None:
        ...
