from .csv_row_reader import CsvRowReader, CsvTable
from .key_value_store import KeyValueStore

__all__ = [
    "CsvRowReader",
    "CsvTable",
    "KeyValueStore",
]
