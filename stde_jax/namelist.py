"""Minimal reader for Fortran-style namelist groups (``&STDE ... /``).

Estimator settings can be kept in a small text file next to a driver script:

    &STDE
      DIM = 5          ! dimension of x
      NUM_SAMPLES = 1000
      SPARSE = F
      SEED = 0
    /

Supported: ``KEY = value`` assignments (case-insensitive keys), ``!``
comments, single-quoted strings, ``T``/``F`` booleans, ints and floats with
``E`` or ``D`` exponents, comma/space separated lists. Repeat counts and
indexed keys are not.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Union

Number = Union[int, float]
Scalar = Union[str, bool, Number]
Value = Union[Scalar, List[Scalar]]


def _strip_comments(line: str) -> str:
    """Remove '!' comments outside single-quoted strings."""
    in_quote = False
    for i, ch in enumerate(line):
        if ch == "'":
            in_quote = not in_quote
        elif ch == "!" and not in_quote:
            return line[:i]
    return line


_ASSIGN_RE = re.compile(r"(?P<key>[A-Za-z_]\w*)\s*=")


def _tokenize(chunk: str) -> List[str]:
    """Split on commas/whitespace, keeping quoted strings intact."""
    tokens: List[str] = []
    buf: List[str] = []
    in_quote = False
    for ch in chunk.strip():
        if ch == "'":
            in_quote = not in_quote
            buf.append(ch)
        elif not in_quote and ch in ", \t\r\n":
            if buf:
                tokens.append("".join(buf))
                buf = []
        else:
            buf.append(ch)
    if buf:
        tokens.append("".join(buf))
    return tokens


_BOOL_TRUE = {"T", ".T.", ".TRUE.", "TRUE"}
_BOOL_FALSE = {"F", ".F.", ".FALSE.", "FALSE"}


def _parse_scalar(tok: str) -> Scalar:
    tok = tok.strip()
    if len(tok) >= 2 and tok[0] == "'" and tok[-1] == "'":
        return tok[1:-1]
    up = tok.upper()
    if up in _BOOL_TRUE:
        return True
    if up in _BOOL_FALSE:
        return False
    if re.fullmatch(r"[+-]?\d+", tok):
        return int(tok)
    try:
        return float(tok.replace("D", "E").replace("d", "E"))
    except ValueError:
        return tok


@dataclass
class Namelist:
    group: str
    scalars: Dict[str, Value]

    def __contains__(self, name: str) -> bool:
        return name.upper() in self.scalars

    def get(self, name: str, default: Value | None = None) -> Value | None:
        return self.scalars.get(name.upper(), default)

    def _first(self, name: str, default):
        v = self.get(name, default)
        if isinstance(v, list):
            v = v[0] if v else default
        return v

    def get_bool(self, name: str, default: bool = False) -> bool:
        v = self._first(name, default)
        if isinstance(v, str):
            raise ValueError(f"{name} must be a logical (T/F), got {v!r}")
        return bool(v)

    def get_int(self, name: str, default: int = 0) -> int:
        v = self._first(name, default)
        if isinstance(v, bool) or not isinstance(v, (int, float)) or int(v) != v:
            raise ValueError(f"{name} must be an integer, got {v!r}")
        return int(v)

    def get_float(self, name: str, default: float = 0.0) -> float:
        v = self._first(name, default)
        if isinstance(v, (bool, str)):
            raise ValueError(f"{name} must be a number, got {v!r}")
        return float(v)

    def get_str(self, name: str, default: str = "") -> str:
        return str(self._first(name, default))


def parse_namelist(text: str, group: str = "STDE") -> Namelist:
    """Parse the ``&group ... /`` block out of ``text``."""
    m_start = re.search(rf"&\s*{re.escape(group)}\b", text, flags=re.IGNORECASE)
    if not m_start:
        raise ValueError(f"No &{group} found")
    body = text[m_start.end() :]
    lines = [_strip_comments(ln) for ln in body.splitlines()]
    cleaned = "\n".join(lines)
    # first '/' on its own (or ending a line) closes the group
    m_end = re.search(r"(^|\s)/\s*($|\n)", cleaned)
    if not m_end:
        raise ValueError(f"No terminating '/' for &{group}")
    cleaned = cleaned[: m_end.start()]

    scalars: Dict[str, Value] = {}
    matches = list(_ASSIGN_RE.finditer(cleaned))
    for i, m in enumerate(matches):
        val_end = matches[i + 1].start() if i + 1 < len(matches) else len(cleaned)
        chunk = re.sub(r",\s*$", "", cleaned[m.end() : val_end].strip())
        parsed = [_parse_scalar(t) for t in _tokenize(chunk)]
        if not parsed:
            continue
        scalars[m.group("key").upper()] = parsed[0] if len(parsed) == 1 else parsed
    return Namelist(group=group.upper(), scalars=scalars)


def read_namelist(path: str | Path, group: str = "STDE") -> Namelist:
    """Read the ``&group`` namelist from a file."""
    return parse_namelist(Path(path).read_text(), group=group)
