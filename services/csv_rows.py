"""
Delimited-text row parsing for LinkedIn export files.

``CsvRows`` wraps one CSV text blob and yields one ``{header: value}`` dict
per record. Iteration is lazy (pandas chunked reads) and can be repeated.
Malformed lines are dropped and recorded in ``errors``; they never stop
the rest of the file from parsing.
"""

import io
import logging
import math
import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

import pandas as pd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CsvParseError:
    line: Optional[int]
    reason: str


# Only LF and CRLF end a line; U+2028 and form feeds stay inside fields
_LINE_BREAK = re.compile(r"\r?\n")


def split_lines(text: str) -> List[str]:
    return _LINE_BREAK.split(text) if text else []


def locate_header(text: str, token: str) -> Optional[int]:
    """Return the index of the first line that starts with ``token``."""
    for idx, line in enumerate(split_lines(text)):
        if line.lstrip("\ufeff").lstrip('"').startswith(token):
            return idx
    return None


def _scan_line(line: str, in_quotes: bool) -> Tuple[bool, bool, int]:
    """Walk one physical line with CSV quoting rules.

    A quote opens a quoted field only at the start of a field; anywhere else
    it is a literal character. Returns ``(still_in_quotes, closes_cleanly,
    delimiters)`` where ``closes_cleanly`` is False when a closing quote is
    followed by something other than a delimiter or the end of the line.
    """
    clean = True
    delimiters = 0
    at_field_start = not in_quotes
    i, n = 0, len(line)
    while i < n:
        ch = line[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < n and line[i + 1] == '"':
                    i += 2
                    continue
                in_quotes = False
                if i + 1 < n and line[i + 1] != ",":
                    clean = False
        elif ch == ",":
            delimiters += 1
            at_field_start = True
            i += 1
            continue
        elif ch == '"' and at_field_start:
            in_quotes = True
        at_field_start = False
        i += 1
    return in_quotes, clean, delimiters


def _split_records(lines: List[str], first_line_no: int) -> Tuple[List[str], List[CsvParseError]]:
    """Group physical lines into records and drop lines whose quote never closes.

    A record may span several lines (quoted newlines). A record is only
    accepted when every closing quote is followed by a delimiter and, if it
    spans lines, it has no more fields than the first record. Otherwise just
    its first line is dropped and scanning restarts on the next line, so good
    rows after a stray quote survive.
    """
    kept: List[str] = []
    errors: List[CsvParseError] = []
    expected_fields: Optional[int] = None
    i = 0
    n = len(lines)
    while i < n:
        in_quotes, clean, delimiters = _scan_line(lines[i], False)
        j = i
        while in_quotes and clean and j + 1 < n:
            j += 1
            in_quotes, line_clean, more = _scan_line(lines[j], True)
            clean = clean and line_clean
            delimiters += more
        spans = j > i
        too_wide = expected_fields is not None and delimiters + 1 > expected_fields
        if in_quotes or not clean or (spans and too_wide):
            errors.append(CsvParseError(line=first_line_no + i, reason="unbalanced quotes"))
            i += 1
            continue
        kept.extend(lines[i:j + 1])
        if expected_fields is None and lines[i].strip():
            expected_fields = delimiters + 1
        i = j + 1
    return kept, errors


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return str(value).strip()


class CsvRows:
    """Lazy, restartable sequence of rows parsed from CSV text."""

    def __init__(self, text: str, *, has_header: bool = True, skip_lines: int = 0, chunk_size: int = 500):
        self.text = text.lstrip("\ufeff") if text else ""
        self.has_header = has_header
        self.skip_lines = skip_lines
        self.chunk_size = chunk_size
        self._errors: List[CsvParseError] = []

    @property
    def errors(self) -> List[CsvParseError]:
        """Parse errors from the most recent (or current) iteration."""
        return list(self._errors)

    def _on_bad_line(self, fields: List[str]) -> None:
        preview = ",".join(fields)[:80]
        self._errors.append(CsvParseError(line=None, reason=f"too many fields: {preview}"))
        return None

    def __iter__(self) -> Iterator[Dict[str, Optional[str]]]:
        self._errors = []
        lines = split_lines(self.text)[self.skip_lines:]
        kept, errors = _split_records(lines, first_line_no=self.skip_lines + 1)
        self._errors.extend(errors)
        body = "\n".join(kept)
        if not body.strip():
            return

        try:
            with pd.read_csv(
                io.StringIO(body),
                header=0 if self.has_header else None,
                index_col=False,
                dtype=str,
                na_filter=False,
                skip_blank_lines=True,
                engine="python",
                on_bad_lines=self._on_bad_line,
                chunksize=self.chunk_size,
            ) as reader:
                for chunk in reader:
                    chunk.columns = [str(c).strip() for c in chunk.columns]
                    for record in chunk.to_dict(orient="records"):
                        yield {k: _clean(v) for k, v in record.items()}
        except pd.errors.EmptyDataError:
            return
        except pd.errors.ParserError as e:
            logger.warning(f"CSV parsing stopped early: {e}")
            self._errors.append(CsvParseError(line=None, reason=f"unparseable remainder: {e}"))
