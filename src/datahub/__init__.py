from .index import load_input_records, parse_index_row, read_index_rows
from .records import InputRecord

__all__ = [
    "InputRecord",
    "load_input_records",
    "parse_index_row",
    "read_index_rows",
]
