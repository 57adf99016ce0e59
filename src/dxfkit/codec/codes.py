"""
Group Code Ranges
=================

Every group code belongs to a range that fixes the textual type of its
value. Field tables are checked against this table when they are built,
so a schema cannot, for instance, declare a real under a string code.

    Range       Value type
    -----       ----------
    0-9         string (0 is the record terminator / keyword)
    10-39       point coordinates and measurements (real)
    40-59       real
    60-79       16-bit integer
    90-99       32-bit integer
    100, 102    string (subclass marker, application group)
    105         handle
    160-169     64-bit integer
    170-179     16-bit integer
    210-239     direction vector components (real)
    270-289     8-bit integer (state / flags)
    290-299     boolean flag (0 or 1)
    300-309     arbitrary text
    310-319     binary chunks (hex string)
    320-369     handles / object references (hex)
    370-389     16-bit integer
    390-399     handle
    420-429     32-bit integer (true color)
    430-439     string
    440-449     32-bit integer
    999         comment
"""

from enum import Enum
from typing import Optional


TERMINATOR = 0
SUBCLASS_MARKER = 100
APPLICATION_GROUP = 102
COMMENT = 999


class CodeType(Enum):
    """Textual type of a group code's value."""
    STRING = "string"
    REAL = "real"
    INTEGER = "integer"
    HANDLE = "handle"
    BINARY = "binary"
    COMMENT = "comment"


_RANGES: list[tuple[int, int, CodeType]] = [
    (0, 9, CodeType.STRING),
    (10, 59, CodeType.REAL),
    (60, 79, CodeType.INTEGER),
    (90, 99, CodeType.INTEGER),
    (100, 100, CodeType.STRING),
    (102, 102, CodeType.STRING),
    (105, 105, CodeType.HANDLE),
    (160, 179, CodeType.INTEGER),
    (210, 239, CodeType.REAL),
    (270, 289, CodeType.INTEGER),
    (290, 299, CodeType.INTEGER),
    (300, 309, CodeType.STRING),
    (310, 319, CodeType.BINARY),
    (320, 369, CodeType.HANDLE),
    (370, 389, CodeType.INTEGER),
    (390, 399, CodeType.HANDLE),
    (420, 429, CodeType.INTEGER),
    (430, 439, CodeType.STRING),
    (440, 449, CodeType.INTEGER),
    (999, 999, CodeType.COMMENT),
]


def code_type(code: int) -> Optional[CodeType]:
    """
    Return the value type for a group code.

    Args:
        code: The group code

    Returns:
        The CodeType, or None for codes outside every known range
    """
    for low, high, kind in _RANGES:
        if low <= code <= high:
            return kind
    return None


def is_handle_code(code: int) -> bool:
    """Check if a code carries a hexadecimal handle (including code 5)."""
    return code == 5 or code_type(code) is CodeType.HANDLE


def format_code(code: int) -> str:
    """Format a code the way it is written to the stream ("  0", " 10", "310")."""
    return f"{code:>3}"
