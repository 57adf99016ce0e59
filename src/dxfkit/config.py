"""
dxfkit Configuration
====================

Codec settings with defaults that match the output AutoCAD writes.
Configuration can come from:
- Default values (defined here)
- Environment variables (CodecConfig.from_env)
- Command-line options (the dxfkit CLI overrides individual fields)

Environment variables (all optional):
    DXFKIT_REVISION        Revision assumed when a file has no $ACADVER
    DXFKIT_STRICT          "1"/"true" turns every advisory into an error
    DXFKIT_CHUNK_WIDTH     Width of binary (310) continuation lines
    DXFKIT_MAX_ADVISORIES  Stop after this many advisories
    DXFKIT_ENCODING        Text encoding of pre-R2007 files (default: $DWGCODEPAGE)
    DXFKIT_REAL_FORMAT     printf-style format for real values (default: shortest exact)
"""

from dataclasses import dataclass
from typing import Optional
import codecs
import logging
import os

from dxfkit.codec.revision import Revision

logger = logging.getLogger(__name__)


@dataclass
class CodecConfig:
    """
    Settings shared by the record codec and the drawing reader/writer.

    Attributes:
        default_revision: Revision used when a stream does not declare one
        real_format: printf-style format for real values. None writes "%f"
            when six decimals hold the value exactly and the shortest
            round-tripping form otherwise
        binary_chunk_width: Line width of binary continuation payloads
        text_chunk_width: Line width of text continuation payloads
        strict: Raise on the first advisory instead of collecting it
        max_advisories: Stop after this many advisories (None = no limit)
        encoding: Text encoding of pre-R2007 files (None = from $DWGCODEPAGE)
    """

    default_revision: Revision = Revision.R12
    real_format: Optional[str] = None
    binary_chunk_width: int = 254
    text_chunk_width: int = 255
    strict: bool = False
    max_advisories: Optional[int] = None
    encoding: Optional[str] = None

    @classmethod
    def from_env(cls) -> "CodecConfig":
        """
        Create a CodecConfig from environment variables.

        Invalid values are logged and ignored.
        """
        config = cls()

        if revision := os.environ.get("DXFKIT_REVISION"):
            try:
                config.default_revision = Revision.parse(revision)
            except ValueError:
                logger.warning(f"Ignoring DXFKIT_REVISION={revision!r}: unknown revision")

        if strict := os.environ.get("DXFKIT_STRICT"):
            config.strict = strict.strip().lower() in ("1", "true", "yes", "on")

        if width := os.environ.get("DXFKIT_CHUNK_WIDTH"):
            try:
                value = int(width)
                if value < 1:
                    raise ValueError(width)
                config.binary_chunk_width = value
            except ValueError:
                logger.warning(f"Ignoring DXFKIT_CHUNK_WIDTH={width!r}: not a positive integer")

        if limit := os.environ.get("DXFKIT_MAX_ADVISORIES"):
            try:
                config.max_advisories = int(limit)
            except ValueError:
                logger.warning(f"Ignoring DXFKIT_MAX_ADVISORIES={limit!r}: not an integer")

        if encoding := os.environ.get("DXFKIT_ENCODING"):
            try:
                config.encoding = codecs.lookup(encoding).name
            except LookupError:
                logger.warning(f"Ignoring DXFKIT_ENCODING={encoding!r}: unknown encoding")

        if real_format := os.environ.get("DXFKIT_REAL_FORMAT"):
            try:
                real_format % 1.0
                config.real_format = real_format
            except (TypeError, ValueError):
                logger.warning(f"Ignoring DXFKIT_REAL_FORMAT={real_format!r}: not a real format")

        return config

    def format_real(self, value: float) -> str:
        """
        Format a real value for output.

        Without an explicit real_format, values that "%f" would round (more
        than six decimals) are written with repr(), so reading them back
        gives the same float.
        """
        if self.real_format is not None:
            return self.real_format % value
        text = "%f" % value
        if float(text) == value:
            return text
        return repr(float(value))
