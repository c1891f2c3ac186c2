"""
Source cursor for the EFP parser.

Lexing is fused into the grammar rules, so instead of a token list the parser
works on a Cursor: the immutable source text plus a read offset. The offset is
a plain int, which makes checkpoints a copy and restoring an assignment. That
is all the backtracking parser needs.

Author: xwest
"""

from typing import Callable, Optional

from .tokens import QUOTE, is_whitespace


class Cursor:
    """
    Read position over an immutable source string.

    Lookahead methods (peek, peek_char, peek_literal, find_matching) never
    move the position; only advance, advance_by, skip_whitespace and restore do.
    """

    def __init__(self, source: str, filename: str = "<unknown>"):
        """
        Initialize the cursor at the start of the source.

        Args:
            source: Source code string
            filename: Name of source file for error reporting
        """
        self.source = source
        self.filename = filename
        self.pos = 0

    @property
    def position(self) -> int:
        return self.pos

    def checkpoint(self) -> int:
        """Return the current position so it can be restored later."""
        return self.pos

    def restore(self, position: int):
        """Move back to a position previously returned by checkpoint()."""
        self.pos = position

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def current(self) -> str:
        """Character at the position, or '' at end of input."""
        if self.at_end():
            return ""
        return self.source[self.pos]

    def text(self, start: int, end: Optional[int] = None) -> str:
        """Slice of the source between two offsets."""
        if end is None:
            end = self.pos
        return self.source[start:end]

    def peek(self, predicate: Callable[[str], bool]) -> bool:
        """True iff a character exists at the position and satisfies predicate."""
        if self.at_end():
            return False
        return predicate(self.source[self.pos])

    def peek_char(self, char: str) -> bool:
        if self.at_end():
            return False
        return self.source[self.pos] == char

    def peek_literal(self, text: str) -> bool:
        """True iff the remaining input starts with text."""
        return self.source.startswith(text, self.pos)

    def advance(self):
        """Advance position by one character. No-op at end of input."""
        if self.pos < len(self.source):
            self.pos += 1

    def advance_by(self, count: int):
        for _ in range(count):
            self.advance()

    def skip_whitespace(self):
        while self.pos < len(self.source) and is_whitespace(self.source[self.pos]):
            self.pos += 1

    def find_matching(self, left: str, right: str) -> Optional[int]:
        """
        Locate the delimiter closing the one at the current position.

        Counts nesting depth of left/right from the current position onward
        and returns the offset of the right delimiter that brings the depth
        back to zero, or None if input ends first. Text between double quotes
        is skipped, so delimiters inside string literals are not counted.
        """
        depth = 0
        scan = self.pos
        length = len(self.source)

        while scan < length:
            char = self.source[scan]
            if char == QUOTE:
                closing = self.source.find(QUOTE, scan + 1)
                if closing == -1:
                    return None
                scan = closing + 1
                continue
            if char == left:
                depth += 1
            elif char == right:
                depth -= 1
                if depth == 0:
                    return scan
            scan += 1

        return None

    def __repr__(self) -> str:
        return f"Cursor({self.filename!r}, pos={self.pos}, length={len(self.source)})"
