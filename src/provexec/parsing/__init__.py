"""
Parsers for semi-structured tool output.
"""

from .table import TableParser, column_spans, parse_table

__all__ = [
    "TableParser",
    "column_spans",
    "parse_table",
]
