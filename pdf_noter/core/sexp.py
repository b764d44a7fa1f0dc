"""
Reader and printer for the s-expression literals stored in notes properties.

Grammar (whitespace and `;` comments are skipped between tokens):

    datum  := list | record | string | atom
    list   := "(" datum* ")"
    record := "#s(" datum* ")"      -- read as a plain list
    string := '"' (char | "\\" char)* '"'
    atom   := integer | float | symbol
"""

import re
from typing import Any, List, Tuple

from pdf_noter.core.errors import SexpSyntaxError

_INT_RE = re.compile(r"[+-]?\d+\.?\Z", re.ASCII)
_FLOAT_RE = re.compile(r"[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?\Z", re.ASCII)
_DELIMITERS = set('()"; \t\r\n\f')
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"'}


class Symbol(str):
    """A bare atom that is neither a number nor a string."""

    def __repr__(self) -> str:
        return f"Symbol({str.__repr__(self)})"


def _skip_blank(text: str, pos: int) -> int:
    n = len(text)
    while pos < n:
        ch = text[pos]
        if ch == ";":
            while pos < n and text[pos] != "\n":
                pos += 1
        elif ch.isspace():
            pos += 1
        else:
            break
    return pos


def _read_string(text: str, pos: int) -> Tuple[str, int]:
    # pos points just past the opening quote
    out: List[str] = []
    n = len(text)
    while pos < n:
        ch = text[pos]
        if ch == '"':
            return "".join(out), pos + 1
        if ch == "\\":
            pos += 1
            if pos >= n:
                break
            out.append(_ESCAPES.get(text[pos], text[pos]))
        else:
            out.append(ch)
        pos += 1
    raise SexpSyntaxError("Unterminated string literal")


def _atom(token: str) -> Any:
    if _INT_RE.match(token):
        return int(token.rstrip("."))
    if _FLOAT_RE.match(token):
        return float(token)
    return Symbol(token)


def _read(text: str, pos: int) -> Tuple[Any, int]:
    pos = _skip_blank(text, pos)
    if pos >= len(text):
        raise SexpSyntaxError("Unexpected end of input")

    ch = text[pos]
    if ch == ")":
        raise SexpSyntaxError(f"Unexpected ')' at offset {pos}")
    if ch == '"':
        return _read_string(text, pos + 1)
    if text.startswith("#s(", pos):
        return _read_list(text, pos + 3)
    if ch == "(":
        return _read_list(text, pos + 1)

    start = pos
    while pos < len(text) and text[pos] not in _DELIMITERS:
        pos += 1
    return _atom(text[start:pos]), pos


def _read_list(text: str, pos: int) -> Tuple[List[Any], int]:
    items: List[Any] = []
    while True:
        pos = _skip_blank(text, pos)
        if pos >= len(text):
            raise SexpSyntaxError("Unbalanced parentheses: missing ')'")
        if text[pos] == ")":
            return items, pos + 1
        item, pos = _read(text, pos)
        items.append(item)


def loads(text: str) -> Any:
    """Read exactly one datum from `text`."""
    if not isinstance(text, str):
        raise SexpSyntaxError(f"Expected text, got {type(text).__name__}")
    try:
        value, pos = _read(text, 0)
    except RecursionError:
        raise SexpSyntaxError("Nesting too deep") from None
    pos = _skip_blank(text, pos)
    if pos != len(text):
        raise SexpSyntaxError(f"Trailing data at offset {pos}: {text[pos:pos + 20]!r}")
    return value


def dumps(obj: Any) -> str:
    """Print `obj` in the grammar `loads` reads."""
    if isinstance(obj, (list, tuple)):
        return "(" + " ".join(dumps(o) for o in obj) + ")"
    if isinstance(obj, Symbol):
        return str(obj)
    if isinstance(obj, str):
        escaped = obj.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if isinstance(obj, bool):
        return "t" if obj else "nil"
    if isinstance(obj, (int, float)):
        return repr(obj)
    raise TypeError(f"Cannot print {type(obj).__name__} as an s-expression")
