"""Load labeled records from a comma separated index file.

The index has a header row followed by ``path,encoding,language,script`` rows.
Fields may be quoted, so a path can hold a comma.  Paths are relative to the
directory holding the index.  Rows that cannot be used are logged and skipped;
the run continues with the remaining records.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd

from src.analyzers import decode
from src.codes import CodeRegistry
from src.config import PROGRESS_INTERVAL

from .records import InputRecord

logger = logging.getLogger(__name__)

INDEX_COLUMNS = 4


def _wrong_column_count(fields: List[str]) -> None:
    logger.error("Wrong number of columns: %s", ",".join(fields))
    return None


def read_index_rows(index_file: Path) -> List[List[Optional[str]]]:
    """Every data row of ``index_file`` as a list of fields; absent fields are None.

    Rows with more than four fields are logged and dropped here.
    """
    try:
        frame = pd.read_csv(
            index_file,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=_wrong_column_count,
        )
    except pd.errors.EmptyDataError:
        logger.error("Index file is empty: %s", index_file)
        return []
    return [[None if pd.isna(value) else value for value in row] for row in frame.itertuples(index=False, name=None)]


def parse_index_row(
    fields: Sequence[Optional[str]],
    row_number: int,
    data_root: Path,
    registry: CodeRegistry,
) -> Optional[InputRecord]:
    """Build a record from one index row, or log why it is unusable and return None."""
    if len(fields) != INDEX_COLUMNS or any(field is None for field in fields):
        logger.error("Wrong number of columns on row #%d", row_number)
        return None

    path_text, encoding_text, language_text, script_text = (field.strip() for field in fields)
    input_file = (data_root / path_text).resolve()
    if not path_text or not input_file.is_file():
        logger.error("Could not find input file on row #%d: %s", row_number, input_file)
        return None

    encoding = encoding_text.lower()
    if not encoding:
        logger.error("No encoding on row #%d", row_number)
        return None

    language = registry.language(language_text)
    if language is None:
        logger.error("Invalid language on row #%d: %s", row_number, language_text)
        return None

    script = registry.script(script_text)
    if script is None:
        logger.error("Invalid script on row #%d: %s", row_number, script_text)
        return None

    try:
        data = input_file.read_bytes()
    except OSError:
        logger.exception("Could not load data from row #%d: %s", row_number, input_file)
        return None

    try:
        decode(data, encoding)
    except (LookupError, UnicodeDecodeError):
        logger.exception("Could not decode data from row #%d: %s", row_number, input_file)
        return None

    return InputRecord(input_file=input_file, data=data, encoding=encoding, language=language, script=script)


def load_input_records(index_file: Path, registry: CodeRegistry) -> List[InputRecord]:
    """Read every usable record listed in ``index_file``."""
    index_file = Path(index_file)
    logger.info("Loading input records from %s", index_file)
    start = time.perf_counter()
    rows = read_index_rows(index_file)
    data_root = index_file.parent

    records: List[InputRecord] = []
    for row_number, fields in enumerate(rows, start=1):
        record = parse_index_row(fields, row_number, data_root, registry)
        if record is not None:
            records.append(record)
        if row_number % PROGRESS_INTERVAL == 0:
            logger.info("Loaded %d / %d records.", row_number, len(rows))

    logger.info("Loaded %d input records in %.2fs.", len(records), time.perf_counter() - start)
    return records
