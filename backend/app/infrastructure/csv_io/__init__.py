from .stdlib_csv_row_reader import StdlibCsvRowReader

__all__ = ["StdlibCsvRowReader"]
