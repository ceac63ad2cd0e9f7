"""Abstract interface (port) for turning CSV file content into keyed rows."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class CsvTable:
    """Result of reading a CSV file."""

    headers: list[str]
    rows: list[dict[str, str]] = field(default_factory=list)  # header-as-written → cell text


class CsvRowReader(ABC):
    """Port for CSV parsing — implemented in the infrastructure layer."""

    @abstractmethod
    def read(self, content: bytes) -> CsvTable:
        """Parse raw file content.

        The first row defines the headers; blank rows are skipped. Cells
        missing from short rows are returned as empty strings.

        Raises:
            CsvParseError: If the content is not readable as tabular text.
        """
        ...
