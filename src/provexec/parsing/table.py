"""
Fixed-width table parsing for remote CLI output.

Example input:

    Name                    Virtual Switch  Active Clients  VLAN ID
    ----------------------  --------------  --------------  -------
    Management Network      vSwitch0                     1        0
    vMotion                 vSwitch1                     1       23

The separator line defines the columns: each run of dashes starts a column
and its length is the column width. esxcli leaves two blanks between runs.
Header names and row values are cut at the same offsets, so values may
contain spaces as long as the tool keeps its columns aligned.
"""

import logging
import re
from typing import List, Tuple

from ..models import TableRecord
from ..validation import ParseError

logger = logging.getLogger(__name__)

_SEPARATOR_RUN = re.compile(r"\S+")


def column_spans(separator_line: str) -> List[Tuple[int, int]]:
    """
    Compute (offset, width) pairs for every run in a separator line.

    Example:
        >>> column_spans("----  --  -------")
        [(0, 4), (6, 2), (10, 7)]

    Raises:
        ParseError: If the line has no runs or a run mixes characters
    """
    spans = []
    for match in _SEPARATOR_RUN.finditer(separator_line):
        run = match.group(0)
        if len(set(run)) != 1:
            raise ParseError(f"Malformed table separator run {run!r} in {separator_line!r}")
        spans.append((match.start(), len(run)))

    if not spans:
        raise ParseError("Table separator line is empty")
    return spans


def _slice_fields(line: str, spans: List[Tuple[int, int]]) -> List[str]:
    return [line[pos:pos + width].strip() for pos, width in spans]


def parse_table(text: str) -> List[TableRecord]:
    """
    Parse fixed-width tabular text into a list of records.

    Args:
        text: Tool output whose first line is the header and second line
            the dash separator

    Returns:
        One dict per data line, keyed by trimmed header name. Empty when the
        text has fewer than two lines.

    Raises:
        ParseError: If the separator line is malformed
    """
    lines = text.splitlines()
    if len(lines) < 2:
        return []

    header_line, separator_line, *rows = lines
    spans = column_spans(separator_line)
    headers = _slice_fields(header_line, spans)
    logger.debug(f"Parsed table header with {len(headers)} columns: {headers}")

    return [dict(zip(headers, _slice_fields(row, spans))) for row in rows]


class TableParser:
    """Object form of parse_table, for callers that inject a parser."""

    def parse(self, text: str) -> List[TableRecord]:
        return parse_table(text)
