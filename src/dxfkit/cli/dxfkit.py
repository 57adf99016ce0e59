"""
dxfkit - DXF Inspection and Conversion Command-Line Interface
=============================================================

This module implements the `dxfkit` command. It reads DXF files through
the record codec and reports, checks or rewrites them.

Commands
--------
- **info**: Show the revision and record counts of a file
- **check**: Decode a file and list every advisory
- **rewrite**: Decode a file and write it again, optionally at another revision
- **split**: Show how a payload is split into continuation lines

Usage Examples
--------------
Show what a file contains:
    $ dxfkit info part.dxf

Fail a build on any defect:
    $ dxfkit check --strict part.dxf

Convert to AutoCAD 2000 format:
    $ dxfkit rewrite part.dxf -o part_2000.dxf --revision R2000

Environment variables (DXFKIT_REVISION, DXFKIT_STRICT, DXFKIT_CHUNK_WIDTH,
DXFKIT_MAX_ADVISORIES, DXFKIT_ENCODING, DXFKIT_REAL_FORMAT) provide defaults;
see dxfkit.config.

Copyright (c) 2026 dxfkit Contributors
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from dxfkit import __version__
from dxfkit.codec import Revision, split as split_payload
from dxfkit.config import CodecConfig
from dxfkit.document import Drawing
from dxfkit.errors import AdvisoryCollector
from dxfkit.cli.errors import ExitCode, handle_cli_exception

logger = logging.getLogger(__name__)


# =============================================================================
# CLI Context and Utilities
# =============================================================================

class Context:
    """
    Shared context for CLI commands.

    Stores the verbosity and the codec configuration read from the
    environment.
    """

    def __init__(self) -> None:
        self.verbose: bool = False
        self.config: CodecConfig = CodecConfig()

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.INFO
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


class RevisionChoice(click.ParamType):
    """
    Click parameter type for revision selection.

    Accepts R12, R2000, 2000, AC1015, ... (case-insensitive)
    """
    name = "revision"

    def convert(self, value: str, param: Optional[click.Parameter],
                ctx: Optional[click.Context]) -> Revision:
        """Convert string to Revision."""
        if isinstance(value, Revision):
            return value
        try:
            return Revision.parse(value)
        except ValueError:
            self.fail(
                f"Invalid revision '{value}'. "
                f"Examples: R12, R14, R2000, R2007, AC1015",
                param, ctx
            )


REVISION = RevisionChoice()


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable debug output",
)
@click.version_option(__version__, "--version", "-V", prog_name="dxfkit")
@pass_context
def main(ctx: Context, verbose: bool) -> None:
    """
    DXF record codec toolkit.

    Inspect, check and rewrite DXF drawing files.

    \b
    Commands:
      info      Show revision and record counts
      check     List every advisory of a file
      rewrite   Re-encode a file, optionally at another revision
      split     Show continuation-line splitting of a payload

    \b
    Examples:
      dxfkit info part.dxf
      dxfkit check --strict part.dxf
      dxfkit rewrite part.dxf -o out.dxf --revision R2000
    """
    ctx.verbose = verbose
    ctx.config = CodecConfig.from_env()
    ctx.setup_logging()


# =============================================================================
# Info Command
# =============================================================================

@main.command("info")
@click.argument(
    "dxf_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@pass_context
def cmd_info(ctx: Context, dxf_file: Path) -> None:
    """
    Show the revision and record counts of a DXF file.

    \b
    Example:
      dxfkit info part.dxf
    """
    try:
        drawing = Drawing.from_file(dxf_file, config=ctx.config)

        click.echo(f"File: {dxf_file}")
        click.echo(f"Revision: {drawing.revision.name} ({drawing.revision.get_description()})")
        click.echo(f"Header variables: {len(drawing.header)}")
        click.echo(f"Records: {len(drawing)}")
        for record_type, count in sorted(drawing.counts().items()):
            click.echo(f"  {record_type:<20} {count:>6}")
        click.echo(f"Advisories: {len(drawing.advisories)}")

        drawing.release()

    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


# =============================================================================
# Check Command
# =============================================================================

@main.command("check")
@click.argument(
    "dxf_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--strict",
    is_flag=True,
    help="Exit with status 1 if any advisory is found",
)
@pass_context
def cmd_check(ctx: Context, dxf_file: Path, strict: bool) -> None:
    """
    Decode a DXF file and list every advisory.

    Advisories are recoverable defects: unknown group codes, fields not
    expected at the file's revision, repaired values and record types
    without a schema.

    \b
    Example:
      dxfkit check --strict part.dxf
    """
    try:
        # Collect everything; --strict only changes the exit status
        advisories = AdvisoryCollector(max_advisories=ctx.config.max_advisories)
        drawing = Drawing.from_file(dxf_file, config=ctx.config, advisories=advisories)
        drawing.release()

        click.echo(advisories.report())
        if strict and advisories.has_advisories():
            sys.exit(ExitCode.FORMAT_ERROR)

    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


# =============================================================================
# Rewrite Command
# =============================================================================

@main.command("rewrite")
@click.argument(
    "dxf_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output DXF file path (required)",
)
@click.option(
    "-r", "--revision",
    type=REVISION,
    default=None,
    help="Target revision (default: the input file's revision)",
)
@pass_context
def cmd_rewrite(
    ctx: Context,
    dxf_file: Path,
    output: Path,
    revision: Optional[Revision],
) -> None:
    """
    Decode a DXF file and write it again.

    Fields are written in schema order with default values suppressed;
    fields and record types the target revision cannot carry are dropped.

    \b
    Examples:
      dxfkit rewrite part.dxf -o clean.dxf
      dxfkit rewrite part.dxf -o part_r12.dxf --revision R12
    """
    try:
        drawing = Drawing.from_file(dxf_file, config=ctx.config)
        target = revision if revision is not None else drawing.revision

        if ctx.verbose:
            click.echo(f"Read {dxf_file} ({drawing.revision.name}, {len(drawing)} records)")

        drawing.save(output, revision=target)
        click.echo(f"Wrote {output} ({len(drawing)} records, {target.name})")
        if drawing.advisories.has_advisories():
            click.echo(f"{len(drawing.advisories)} advisories (see 'dxfkit check')", err=True)

        drawing.release()

    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


# =============================================================================
# Split Command
# =============================================================================

@main.command("split")
@click.argument("text")
@click.option(
    "-w", "--width",
    type=click.IntRange(min=1),
    default=255,
    help="Maximum line width (default: 255)",
)
@pass_context
def cmd_split(ctx: Context, text: str, width: int) -> None:
    """
    Show how TEXT is split into continuation lines.

    Prints one chunk per line, prefixed with its order index.

    \b
    Example:
      dxfkit split "some long payload" --width 4
    """
    try:
        chunks = split_payload(text, width)
        for index, chunk in enumerate(chunks):
            click.echo(f"{index:>4}: {chunk}")
        if ctx.verbose:
            click.echo(f"{len(chunks)} chunks of at most {width} characters")

    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


if __name__ == "__main__":
    main()
