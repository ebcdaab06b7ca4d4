"""
File parsers module.
"""

from parsers.csv_parser import (
    CsvRowReader,
    ImportRow,
)

__all__ = [
    "CsvRowReader",
    "ImportRow",
]
