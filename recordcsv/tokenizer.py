from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Tuple

LINE_TERMINATOR = "\r\n"
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def _delimiter_char(delimiter: str) -> str:
    if not delimiter:
        raise ValueError("delimiter must contain at least one character")
    return delimiter[0]


def parse_line(line: str, delimiter: str = ",") -> List[str]:
    """
    Split one logical CSV line into raw field texts.

    A doubled quote inside a quoted section is a literal quote, and the
    delimiter is literal while inside quotes. An unterminated quote runs to the
    end of the line. The last field is always emitted, so "" yields [""].
    """
    d = _delimiter_char(delimiter)
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    i, n = 0, len(line)

    while i < n:
        c = line[i]
        if c == '"':
            if in_quotes and i + 1 < n and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif c == d and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(c)
        i += 1

    fields.append("".join(current))
    return fields


def escape_field(value: str, delimiter: str = ",") -> str:
    if not value:
        return ""
    d = _delimiter_char(delimiter)
    if d in value or '"' in value or "\n" in value or "\r" in value:
        return '"' + value.replace('"', '""') + '"'
    return value


def format_row(cells: Iterable[str], delimiter: str = ",") -> str:
    """Join already-escaped cells and terminate the row with CRLF."""
    return _delimiter_char(delimiter).join(cells) + LINE_TERMINATOR


# ----------------------------
# Line splitting
# ----------------------------

def iter_lines(text: str) -> Iterator[Tuple[str, str]]:
    """
    Yield (line, terminator) pairs, splitting on CRLF, CR or LF.
    A trailing terminator does not produce an extra empty line.
    """
    pos, n = 0, len(text)
    while pos < n:
        m = _LINE_BREAK.search(text, pos)
        if m is None:
            yield text[pos:], ""
            return
        yield text[pos:m.start()], m.group()
        pos = m.end()


def _ends_in_quoted_field(line: str, d: str, in_quotes: bool) -> bool:
    """
    Scan one physical line and report whether a field that opened with a quote
    is still open at its end. Quotes not at the start of a field never open one.
    """
    field_start = not in_quotes
    i, n = 0, len(line)
    while i < n:
        c = line[i]
        if in_quotes:
            if c == '"':
                if i + 1 < n and line[i + 1] == '"':
                    i += 1
                else:
                    in_quotes = False
        elif c == d:
            field_start = True
            i += 1
            continue
        elif c == '"' and field_start:
            in_quotes = True
        field_start = False
        i += 1
    return in_quotes


def iter_records(text: str, delimiter: str = ",") -> Iterator[str]:
    """
    Yield logical CSV lines. A physical line ending inside a quoted field is
    joined with the next one, keeping its original line break. Any other
    unbalanced quote ends with its line.
    """
    d = _delimiter_char(delimiter)
    pending = None
    carried = ""
    in_quotes = False
    for line, terminator in iter_lines(text):
        pending = line if pending is None else pending + carried + line
        in_quotes = _ends_in_quoted_field(line, d, in_quotes)
        if terminator and in_quotes:
            carried = terminator
            continue
        yield pending
        pending = None
        in_quotes = False
    if pending is not None:
        # quoted field still open at end of input
        yield pending
