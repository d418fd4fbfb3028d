"""
Custom date/time format patterns in the familiar ``yyyy-MM-dd HH:mm:ss`` style.

Supported specifiers:
    yyyy yyy yy y   year (4+, 3+, 2 digit, 1-2 digit)
    MMMM MMM MM M   month (name, abbreviated name, 2 digit, 1-2 digit)
    dddd ddd dd d   day (weekday name, abbreviated weekday, 2 digit, 1-2 digit)
    HH H hh h       hour (24h padded/unpadded, 12h padded/unpadded)
    mm m ss s       minute, second
    f..fffffff      fraction of a second, fixed width
    F..FFFFFFF      fraction of a second, trailing zeros trimmed
    tt t            AM/PM designator (full, first character)
    /  :            culture date and time separators
    'text' "text"   quoted literal
    \\c             escaped literal character
Any other character is copied literally.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import List, Tuple

from .options import Culture

_SPECIFIERS = frozenset("yMdHhmsfFt")
_MAX_RUN = {"y": 5, "M": 4, "d": 4, "H": 2, "h": 2, "m": 2, "s": 2, "f": 7, "F": 7, "t": 2}


@dataclass(frozen=True)
class _Token:
    kind: str     # specifier letter, "/" or ":" for separators, "" for literal
    width: int
    text: str = ""


def _tokenize(pattern: str) -> List[_Token]:
    tokens: List[_Token] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c in _SPECIFIERS:
            j = i
            while j < n and pattern[j] == c:
                j += 1
            run = j - i
            limit = _MAX_RUN[c]
            while run > limit:
                tokens.append(_Token(c, limit))
                run -= limit
            tokens.append(_Token(c, run))
            i = j
        elif c in ("'", '"'):
            j = pattern.find(c, i + 1)
            if j == -1:
                raise ValueError(f"Unterminated quoted literal in date/time format: {pattern!r}")
            tokens.append(_Token("", 0, pattern[i + 1:j]))
            i = j + 1
        elif c == "\\":
            if i + 1 >= n:
                raise ValueError(f"Dangling escape in date/time format: {pattern!r}")
            tokens.append(_Token("", 0, pattern[i + 1]))
            i += 2
        elif c in ("/", ":"):
            tokens.append(_Token(c, 1))
            i += 1
        else:
            tokens.append(_Token("", 0, c))
            i += 1
    return tokens


def _hour12(hour: int) -> int:
    h = hour % 12
    return 12 if h == 0 else h


def _format_token(tok: _Token, dt: datetime, culture: Culture) -> str:
    k, w = tok.kind, tok.width
    if k == "":
        return tok.text
    if k == "/":
        return culture.date_separator
    if k == ":":
        return culture.time_separator
    if k == "y":
        if w <= 2:
            yy = dt.year % 100
            return f"{yy:02d}" if w == 2 else str(yy)
        return str(dt.year).zfill(w)
    if k == "M":
        if w == 4:
            return culture.month_names[dt.month - 1]
        if w == 3:
            return culture.abbreviated_month_names[dt.month - 1]
        return f"{dt.month:0{w}d}"
    if k == "d":
        if w == 4:
            return culture.day_names[dt.weekday()]
        if w == 3:
            return culture.abbreviated_day_names[dt.weekday()]
        return f"{dt.day:0{w}d}"
    if k == "H":
        return f"{dt.hour:0{w}d}"
    if k == "h":
        return f"{_hour12(dt.hour):0{w}d}"
    if k == "m":
        return f"{dt.minute:0{w}d}"
    if k == "s":
        return f"{dt.second:0{w}d}"
    if k in ("f", "F"):
        digits = f"{dt.microsecond:06d}0"[:w]
        return digits.rstrip("0") if k == "F" else digits
    if k == "t":
        designator = culture.am_designator if dt.hour < 12 else culture.pm_designator
        return designator[:1] if w == 1 else designator
    raise AssertionError(f"Unhandled token: {tok!r}")


def _alternation(names: Tuple[str, ...]) -> str:
    ordered = sorted(set(names), key=len, reverse=True)
    return "|".join(re.escape(n) for n in ordered if n)


@dataclass(frozen=True)
class DateTimePattern:
    """A compiled format pattern bound to one culture."""

    pattern: str
    culture: Culture
    tokens: Tuple[_Token, ...]
    regex: "re.Pattern[str]"

    def format(self, dt: datetime) -> str:
        return "".join(_format_token(t, dt, self.culture) for t in self.tokens)

    def parse(self, text: str) -> datetime:
        m = self.regex.fullmatch(text.strip())
        if m is None:
            raise ValueError(f"{text!r} does not match date/time format {self.pattern!r}")
        g = m.groupdict()
        c = self.culture

        year = 1
        if g.get("y4") is not None:
            year = int(g["y4"])
        elif g.get("y2") is not None:
            yy = int(g["y2"])
            year = 2000 + yy if yy < 50 else 1900 + yy

        month = 1
        if g.get("Mn") is not None:
            month = int(g["Mn"])
        elif g.get("Mname") is not None:
            month = _lookup_name(g["Mname"], c.month_names, c.abbreviated_month_names)

        day = int(g["d"]) if g.get("d") is not None else 1

        hour = 0
        if g.get("H") is not None:
            hour = int(g["H"])
        elif g.get("h") is not None:
            hour = int(g["h"])
            if not 1 <= hour <= 12:
                raise ValueError(f"12-hour clock value out of range: {hour}")
            hour %= 12
            designator = g.get("t")
            if designator and _is_pm(designator, c):
                hour += 12

        minute = int(g["m"]) if g.get("m") is not None else 0
        second = int(g["s"]) if g.get("s") is not None else 0
        microsecond = 0
        if g.get("f"):
            microsecond = int(g["f"].ljust(7, "0")[:6])

        return datetime(year, month, day, hour, minute, second, microsecond)


def _lookup_name(name: str, full: Tuple[str, ...], abbreviated: Tuple[str, ...]) -> int:
    lowered = name.lower()
    for names in (full, abbreviated):
        for idx, candidate in enumerate(names):
            if candidate.lower() == lowered:
                return idx + 1
    raise ValueError(f"Unknown month name: {name!r}")


def _is_pm(designator: str, culture: Culture) -> bool:
    d = designator.lower()
    pm = culture.pm_designator.lower()
    return bool(pm) and (d == pm or (len(d) == 1 and pm.startswith(d)))


def _build_regex(tokens: Tuple[_Token, ...], culture: Culture) -> "re.Pattern[str]":
    parts: List[str] = []
    seen = set()

    def group(name: str, body: str) -> str:
        if name in seen:
            return f"(?:{body})"
        seen.add(name)
        return f"(?P<{name}>{body})"

    for tok in tokens:
        k, w = tok.kind, tok.width
        if k == "":
            parts.append(re.escape(tok.text))
        elif k == "/":
            parts.append(re.escape(culture.date_separator))
        elif k == ":":
            parts.append(re.escape(culture.time_separator))
        elif k == "y":
            if w <= 2:
                parts.append(group("y2", r"\d{2}" if w == 2 else r"\d{1,2}"))
            else:
                parts.append(group("y4", rf"\d{{{w},}}"))
        elif k == "M":
            if w >= 3:
                names = culture.month_names if w == 4 else culture.abbreviated_month_names
                parts.append(group("Mname", _alternation(names)))
            else:
                parts.append(group("Mn", r"\d{2}" if w == 2 else r"\d{1,2}"))
        elif k == "d":
            if w >= 3:
                names = culture.day_names if w == 4 else culture.abbreviated_day_names
                parts.append(f"(?:{_alternation(names)})")
            else:
                parts.append(group("d", r"\d{2}" if w == 2 else r"\d{1,2}"))
        elif k in ("H", "h", "m", "s"):
            parts.append(group(k, r"\d{2}" if w == 2 else r"\d{1,2}"))
        elif k == "f":
            parts.append(group("f", rf"\d{{{w}}}"))
        elif k == "F":
            parts.append(group("f", rf"\d{{0,{w}}}"))
        elif k == "t":
            designators = tuple(
                d[:1] if w == 1 else d for d in (culture.am_designator, culture.pm_designator)
            )
            alt = _alternation(designators)
            parts.append(group("t", alt) if alt else "")
    return re.compile("".join(parts), re.IGNORECASE)


@lru_cache(maxsize=64)
def compile_pattern(pattern: str, culture: Culture) -> DateTimePattern:
    tokens = tuple(_tokenize(pattern))
    return DateTimePattern(
        pattern=pattern,
        culture=culture,
        tokens=tokens,
        regex=_build_regex(tokens, culture),
    )


def format_datetime(dt: datetime, pattern: str, culture: Culture) -> str:
    return compile_pattern(pattern, culture).format(dt)


def parse_datetime(text: str, pattern: str, culture: Culture) -> datetime:
    """Parse ``text`` with ``pattern``; fall back to ISO-8601 when it does not match."""
    compiled = compile_pattern(pattern, culture)
    try:
        return compiled.parse(text)
    except ValueError as exc:
        try:
            return datetime.fromisoformat(text.strip())
        except ValueError:
            raise exc from None
