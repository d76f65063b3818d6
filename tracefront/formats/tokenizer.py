"""
Trace line tokenizer.

Splits a trace line into whitespace-delimited tokens and normalizes each one:

    "0x10(x5),"  -> "x5"     parenthesized interior wins
    "x5,"        -> "x5"     one trailing separator stripped
    "x5"         -> "x5"     unchanged

The tokenizer never fails. Deciding whether a token is acceptable is the
caller's job.
"""

from typing import Tuple


# Trailing punctuation separating list items in the disassembly
TRAILING_SEPARATORS = (',',)


def normalize_token(raw: str) -> str:
    """
    Normalize one raw token.

    Order matters: a parenthesized segment takes precedence over separator
    stripping, so "0x10(x5)," yields "x5".
    """
    open_pos = raw.find('(')
    if open_pos != -1:
        close_pos = raw.find(')', open_pos + 1)
        if close_pos == -1:
            return raw[open_pos + 1:]
        return raw[open_pos + 1:close_pos]

    if raw and raw.endswith(TRAILING_SEPARATORS):
        return raw[:-1]

    return raw


def next_token(line: str, pos: int) -> Tuple[str, int]:
    """
    Read the token starting at or after pos.

    Args:
        line: Trace line
        pos: Cursor position in line

    Returns:
        (normalized token, new cursor position). The token is '' when the
        cursor is at end of line; the position then equals len(line).
    """
    length = len(line)

    while pos < length and line[pos].isspace():
        pos += 1
    if pos >= length:
        return '', length

    end = pos
    while end < length and not line[end].isspace():
        end += 1

    return normalize_token(line[pos:end]), end


class LineTokenizer:
    """
    Cursor over one trace line.

    Usage:
        tok = LineTokenizer("@I 0x1000 add x1, x2, x3", start=3)
        tok.next()   # '0x1000'
        tok.next()   # 'add'
    """

    def __init__(self, line: str, start: int = 0):
        self.line = line
        self.pos = start

    @property
    def at_end(self) -> bool:
        """True when no further token remains."""
        return not self.line[self.pos:].strip()

    def next(self) -> str:
        """Return the next normalized token, or '' at end of line."""
        token, self.pos = next_token(self.line, self.pos)
        return token

    def rest(self) -> str:
        """Unconsumed remainder of the line (for error messages)."""
        return self.line[self.pos:].strip()
