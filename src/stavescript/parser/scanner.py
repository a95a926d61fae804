"""Cursor-based scanner used by the structural parser.

The scanner walks the source once, front to back. Lookahead is limited to
fixed literals (keywords and punctuation); nothing is ever un-read.
"""

from __future__ import annotations

import bisect

from stavescript.errors import ParseError

_WHITESPACE = frozenset(" \t\r")
_IDENT_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_"
)
# Stave prefixes such as ``c'`` or ``F#`` are attribute names too.
_ATTR_CHARS = _IDENT_CHARS | frozenset(",'#")
_DIGITS = frozenset("0123456789")


class Scanner:
    """Mutable cursor over an immutable source string."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.cursor = 0
        # Offset of the first character of each line
        self._line_starts = [0] + [
            i + 1 for i, ch in enumerate(source) if ch == "\n"
        ]

    # --- Position ---

    def finished(self) -> bool:
        return self.cursor >= len(self.source)

    def peek(self) -> str:
        return "" if self.finished() else self.source[self.cursor]

    def location(self, offset: int | None = None) -> tuple[int, int]:
        """1-based ``(line, col)`` of *offset* (default: the cursor)."""
        if offset is None:
            offset = self.cursor
        line = bisect.bisect_right(self._line_starts, offset)
        return line, offset - self._line_starts[line - 1] + 1

    def error(self, message: str, offset: int | None = None) -> ParseError:
        line, col = self.location(offset)
        return ParseError(message, line, col)

    # --- Literals ---

    def check(self, literal: str) -> bool:
        return self.source.startswith(literal, self.cursor)

    def skip_only(self, literal: str) -> bool:
        """Consume *literal* if it is next, without skipping whitespace."""
        if self.check(literal):
            self.cursor += len(literal)
            return True
        return False

    def skip(self, literal: str) -> bool:
        """Consume *literal* and any whitespace after it."""
        if self.skip_only(literal):
            self.skip_whitespace()
            return True
        return False

    def expect(self, literal: str) -> None:
        if self.finished():
            raise self.error(
                f"Expected `{literal}` but reached the end of the input."
            )
        found = self.peek()
        if not self.skip(literal):
            raise self.error(f"Expected `{literal}` but saw `{found}`")

    # --- Keywords ---

    def check_keyword(self, keyword: str) -> bool:
        """True if *keyword* is next and not the start of a longer name."""
        end = self.cursor + len(keyword)
        return self.check(keyword) and (
            end >= len(self.source) or self.source[end] not in _IDENT_CHARS
        )

    def skip_keyword(self, keyword: str) -> bool:
        if self.check_keyword(keyword):
            self.cursor += len(keyword)
            self.skip_whitespace()
            return True
        return False

    # --- Whitespace and comments ---

    def skip_whitespace(self) -> None:
        """Skip blanks, newlines, and ``//`` line comments."""
        in_comment = False
        while not self.finished():
            if self.skip_only("//"):
                in_comment = True
            elif self.skip_only("\n"):
                in_comment = False
            elif in_comment or self.source[self.cursor] in _WHITESPACE:
                self.cursor += 1
            else:
                break

    def skip_whitespace_in_line(self) -> None:
        """Like :meth:`skip_whitespace` but stop in front of a newline."""
        in_comment = False
        while not self.finished() and not self.check("\n"):
            if self.skip_only("//"):
                in_comment = True
            elif in_comment or self.source[self.cursor] in _WHITESPACE:
                self.cursor += 1
            else:
                break

    # --- Values ---

    def check_attr(self) -> str | None:
        end = self.cursor
        while end < len(self.source) and self.source[end] in _ATTR_CHARS:
            end += 1
        if end == self.cursor:
            return None
        return self.source[self.cursor:end]

    def parse_attr(self) -> str | None:
        attr = self.check_attr()
        if attr is not None:
            self.cursor += len(attr)
            self.skip_whitespace()
        return attr

    def parse_number_only(self, low: int, high: int) -> int:
        """Parse an optionally negative integer within ``low..high``."""
        start = end = self.cursor
        if end < len(self.source) and self.source[end] == "-":
            end += 1
        while end < len(self.source) and self.source[end] in _DIGITS:
            end += 1

        text = self.source[start:end]
        try:
            value = int(text)
        except ValueError:
            found = self.peek() or "end of input"
            raise self.error(f"Could not parse number at `{found}`") from None
        if not low <= value <= high:
            raise self.error(
                f"Number {value} out of range ({low}-{high})", start
            )

        self.cursor = end
        return value

    def parse_string_only(self) -> str:
        """Parse a double-quoted string; ``\\`` escapes the next character."""
        if not self.check('"'):
            raise self.error('String must open with `"`')

        start = self.cursor
        chars: list[str] = []
        escaping = False
        for i in range(self.cursor + 1, len(self.source)):
            ch = self.source[i]
            if escaping:
                chars.append(ch)
                escaping = False
            elif ch == "\\":
                escaping = True
            elif ch == '"':
                self.cursor = i + 1
                return "".join(chars)
            else:
                chars.append(ch)

        raise self.error("Unclosed string!", start)

    def parse_bool_only(self) -> bool:
        for keyword, value in (("true", True), ("false", False)):
            if self.check_keyword(keyword):
                self.cursor += len(keyword)
                return value
        raise self.error("Failed to parse bool.")

    # --- Staves ---

    def skip_end_of_stave(self) -> bool:
        """Consume a stave terminator (newline or ``;``); ``}`` is left in place."""
        return (
            self.finished()
            or self.skip_only("\n")
            or self.skip_only(";")
            or self.check("}")
        )
