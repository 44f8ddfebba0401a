"""
Escaping and printability checks for quoted literals.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import math
from typing import Callable, Iterable

# Constants ------------------------------------------------------------------------------------------------------------

# Control characters with a short named escape
ESCAPES: dict[str, str] = {
    "\a": "\\a",
    "\b": "\\b",
    "\x7f": "\\d",
    "\x1b": "\\e",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\\": "\\\\",
    "\t": "\\t",
    "\v": "\\v",
}

# Subset used inside regex literals, where backslashes are significant
REGEX_ESCAPES: dict[str, str] = {
    "\a": "\\a",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}

_PRINTABLE_CONTROLS = frozenset(ord(c) for c in "\n\r\t\v\b\f\x1b\x7f\a")

# Methods --------------------------------------------------------------------------------------------------------------


def is_printable_char(cp: int) -> bool:
    """Check whether a code point can appear unescaped in a quoted literal."""
    return (0x20 <= cp <= 0x7E
            or 0xA0 <= cp <= 0xD7FF
            or 0xE000 <= cp <= 0xFFFD
            or 0x10000 <= cp <= 0x10FFFF)


def is_printable(text: str, limit: int | float = math.inf) -> bool:
    """
    Check whether the first `limit` characters of text are printable.

    Control characters with a named escape (newline, tab, escape, ...) count as printable.

    Examples:
        >>> is_printable("hello\\n")
        True
        >>> is_printable("a\\x00b")
        False
        >>> is_printable("a\\x00b", limit=1)
        True
    """
    for i, char in enumerate(text):
        if i >= limit:
            break
        cp = ord(char)
        if not (is_printable_char(cp) or cp in _PRINTABLE_CONTROLS):
            return False
    return True


def is_ascii_printable(codes: Iterable, limit: int | float = math.inf) -> bool:
    """
    Check whether the first `limit` items are ints within printable ASCII.

    Examples:
        >>> is_ascii_printable([104, 105])
        True
        >>> is_ascii_printable([104, 200])
        False
    """
    for i, code in enumerate(codes):
        if i >= limit:
            break
        if not isinstance(code, int) or isinstance(code, bool):
            return False
        if not (0x20 <= code <= 0x7E or code in _PRINTABLE_CONTROLS):
            return False
    return True


def escape(text: str, quote: str, limit: int | float = math.inf,
           escape_map: Callable[[str], str | None] | None = None, *,
           surrogate_bytes: bool = False) -> tuple[str, str]:
    """
    Escape text for placement between `quote` characters.

    The quote character and `#{` are backslash-escaped. Characters found in escape_map use
    their short escape; other non-printable characters become `\\xHH` or `\\uHHHH`.
    At most `limit` characters are escaped.

    Args:
        text: Text to escape.
        quote: Delimiter character to escape.
        limit: Maximum number of characters to process.
        escape_map: Lookup for short escapes; defaults to ESCAPES.get.
        surrogate_bytes: Treat lone surrogates U+DC80..U+DCFF as undecodable bytes,
            as produced by `bytes.decode("utf-8", "surrogateescape")`.

    Returns:
        Tuple of the escaped text and the unprocessed remainder.

    Examples:
        >>> escape('say "hi"\\n', '"')
        ('say \\\\"hi\\\\"\\\\n', '')
        >>> escape("abcdef", '"', limit=3)
        ('abc', 'def')
    """
    if escape_map is None:
        escape_map = ESCAPES.get

    out = []
    i, n = 0, len(text)
    count = limit
    while i < n and count > 0:
        char = text[i]
        if char == quote:
            out.append("\\" + quote)
            i += 1
        elif char == "#" and text.startswith("{", i + 1):
            out.append("\\#{")
            i += 2
        else:
            cp = ord(char)
            mapped = escape_map(char)
            if mapped:
                out.append(mapped)
            elif surrogate_bytes and 0xDC80 <= cp <= 0xDCFF:
                out.append(f"\\x{cp - 0xDC00:02X}")
            else:
                out.append(escape_char(cp))
            i += 1
        count -= 1
    return "".join(out), text[i:]


def escape_char(cp: int) -> str:
    """
    Return the literal form of a single code point.

    Examples:
        >>> escape_char(0x41)
        'A'
        >>> escape_char(0x01)
        '\\\\x01'
        >>> escape_char(0xFFFE)
        '\\\\uFFFE'
    """
    if cp == 0:
        return "\\0"
    if cp == 0xFEFF:
        return "\\uFEFF"
    if is_printable_char(cp):
        return chr(cp)
    if cp < 0x100:
        return f"\\x{cp:02X}"
    return f"\\u{cp:04X}"
