"""
Tag Stream Reader and Writer
============================

A DXF stream is a flat sequence of line pairs:

      0          <- group code (integer, usually right-aligned in 3 columns)
    CIRCLE       <- value
      5
    1A
     40
    2.500000

TagReader turns a text stream into Token(code, value) pairs and keeps a
line counter for diagnostics. It does not interpret values: every value is
returned verbatim (without its line terminator) and coercion to the field
kind happens in the record codec.

TagWriter is the inverse: it writes pairs with codes right-aligned to
three columns, the layout AutoCAD and the reference library produce.

Usage
-----
    >>> reader = TagReader(io.StringIO("  5\\n1A\\n  0\\nEOF\\n"))
    >>> reader.next()
    Token(code=5, value='1A')
    >>> reader.next()
    Token(code=0, value='EOF')
    >>> reader.next() is None
    True

Copyright (c) 2026 dxfkit Contributors
"""

from typing import Iterator, NamedTuple, Optional, TextIO
import logging

from dxfkit.errors import MalformedStreamError, SourceLocation
from dxfkit.codec.codes import TERMINATOR, format_code

logger = logging.getLogger(__name__)


class Token(NamedTuple):
    """One (group code, raw value) pair."""
    code: int
    value: str

    @property
    def is_terminator(self) -> bool:
        return self.code == TERMINATOR


def _strip_eol(line: str) -> str:
    """Remove the line terminator ("\\n" or "\\r\\n") only."""
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


class TagReader:
    """
    Pulls successive tokens from a text stream.

    Attributes:
        filename: Name used in error locations
        line_number: Number of the last line read (1-indexed)
    """

    def __init__(self, stream: TextIO, filename: str = "<input>"):
        self.stream = stream
        self.filename = filename
        self.line_number = 0
        self._pushed: Optional[Token] = None

    def location(self) -> SourceLocation:
        """Location of the last line read."""
        return SourceLocation(self.filename, self.line_number)

    def _readline(self) -> Optional[str]:
        line = self.stream.readline()
        if line == "":
            return None
        self.line_number += 1
        return _strip_eol(line)

    def next(self) -> Optional[Token]:
        """
        Read the next token.

        Returns:
            The token, or None at a clean end of stream

        Raises:
            MalformedStreamError: If the code line is not an integer, the
                stream ends before the value line of a non-terminator, or a
                blank code line is followed by more pairs
        """
        if self._pushed is not None:
            token, self._pushed = self._pushed, None
            return token

        code_line = self._readline()
        if code_line is None:
            return None
        if code_line.strip() == "":
            # Blank lines are tolerated only after the last pair
            blank = self.location()
            while code_line is not None and code_line.strip() == "":
                code_line = self._readline()
            if code_line is None:
                return None
            raise MalformedStreamError(
                "blank line where a group code is expected",
                location=blank,
                hint="the stream is out of step; check the value on the line before",
            )

        try:
            code = int(code_line.strip())
        except ValueError:
            raise MalformedStreamError(
                f"group code expected, found {code_line.strip()!r}",
                location=self.location(),
                hint="the stream is out of step or not a DXF text file",
            ) from None

        value = self._readline()
        if value is None:
            if code == TERMINATOR:
                # A fragment may end on its terminator code
                return Token(code, "")
            raise MalformedStreamError(
                f"stream ends before the value of group code {code}",
                location=self.location(),
            )
        return Token(code, value)

    def push_back(self, token: Token) -> None:
        """
        Return one token to the stream.

        Only one token of lookahead is supported.

        Raises:
            RuntimeError: If a token is already pushed back
        """
        if self._pushed is not None:
            raise RuntimeError("only one token can be pushed back")
        self._pushed = token

    def peek(self) -> Optional[Token]:
        """Return the next token without consuming it."""
        token = self.next()
        if token is not None:
            self.push_back(token)
        return token

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        token = self.next()
        if token is None:
            raise StopIteration
        return token


class TagWriter:
    """
    Writes tokens to a text stream.

    Attributes:
        line_number: Number of lines written so far
    """

    def __init__(self, stream: TextIO):
        self.stream = stream
        self.line_number = 0

    def write(self, code: int, value: str) -> None:
        """Write one (code, value) pair."""
        self.stream.write(f"{format_code(code)}\n{value}\n")
        self.line_number += 2

    def write_token(self, token: Token) -> None:
        self.write(token.code, token.value)

    def write_tokens(self, tokens) -> None:
        for token in tokens:
            self.write_token(token)
