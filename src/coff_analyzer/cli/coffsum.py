"""
coffsum - COFF Analyzer Command-Line Interface
==============================================

This module implements the command-line interface for inspecting target
COFF object files, checksumming their flash image and exporting them as
Motorola S-records.

Commands
--------
- **info**: Show header information
- **list**: List sections with address, size and memory page
- **checksum**: CRC-32 and word-sum of the flash image for chosen sections
- **export**: Write chosen sections to an S19 file

Usage Examples
--------------
Show file information:
    $ coffsum info firmware.out

List sections:
    $ coffsum list firmware.out

Checksum the flash image built from two sections:
    $ coffsum checksum firmware.out .text .cinit

Export flashable sections to S19:
    $ coffsum export -o firmware.s19 firmware.out .text .cinit
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click

from coff_analyzer import __version__
from coff_analyzer.analyzer import (
    compute_checksums,
    decode_file,
    describe_file,
    export_motorola,
    list_sections,
    validate_section_names,
)
from coff_analyzer.cli.errors import handle_cli_exception
from coff_analyzer.config import get_default_config, LINE_ENDINGS


# =============================================================================
# CLI Context
# =============================================================================

class Context:
    """
    Shared context for CLI commands.

    Stores common options like verbosity.
    """

    def __init__(self) -> None:
        self.verbose: bool = False

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.INFO
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )


pass_context = click.make_pass_decorator(Context, ensure=True)

COFF_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.version_option(__version__, "--version", "-V", prog_name="coffsum")
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (debug logging)",
)
@pass_context
def main(ctx: Context, verbose: bool) -> None:
    """
    COFF analyzer for flash targets.

    Inspect COFF object files, checksum the flash image built from
    chosen sections, and export sections as Motorola S-records.

    \b
    Commands:
      info      Show header information
      list      List sections
      checksum  CRC-32 and word-sum of the flash image
      export    Write sections to an S19 file

    \b
    Examples:
      coffsum info firmware.out
      coffsum checksum firmware.out .text .cinit
      coffsum export -o firmware.s19 firmware.out .text
    """
    ctx.verbose = verbose
    ctx.setup_logging()


# =============================================================================
# Info Command
# =============================================================================

@main.command("info")
@click.argument("coff_file", type=COFF_FILE)
@pass_context
def cmd_info(ctx: Context, coff_file: Path) -> None:
    """
    Show header information for a COFF file.

    \b
    Example:
      coffsum info firmware.out
    """
    try:
        coff = decode_file(coff_file)
        info = coff.get_info()

        click.echo(f"COFF Information: {coff_file}")
        click.echo("=" * 40)
        click.echo(f"Version:     {info['version']}")
        click.echo(f"Target ID:   {info['target_id']}")
        click.echo(f"Flags:       {info['flags']}")
        click.echo(f"Sections:    {info['section_count']}")
        click.echo(f"Flash size:  {info['flash_size']} bytes")
        click.echo(f"Entry point: 0x{info['entry_point_address']:04X}")
        click.echo()
        click.echo(describe_file(coff))

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose)


# =============================================================================
# List Command
# =============================================================================

@main.command("list")
@click.argument("coff_file", type=COFF_FILE)
@pass_context
def cmd_list(ctx: Context, coff_file: Path) -> None:
    """
    List the sections of a COFF file.

    \b
    Output format:
      Name       Address       Size  Page
      .text      8000          1024     0
    """
    try:
        coff = decode_file(coff_file)

        click.echo(f"{'Name':<10} {'Address':<8} {'Size':>10} {'Page':>5}")
        click.echo("-" * 36)
        for row in list_sections(coff):
            click.echo(
                f"{row.name:<10} {row.physical_address:<8X} "
                f"{row.size:>10} {row.memory_page:>5}"
            )

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose)


# =============================================================================
# Checksum Command
# =============================================================================

@main.command("checksum")
@click.argument("coff_file", type=COFF_FILE)
@click.argument("sections", nargs=-1)
@pass_context
def cmd_checksum(ctx: Context, coff_file: Path, sections: tuple[str, ...]) -> None:
    """
    Checksum the flash image built from SECTIONS.

    SECTIONS are placed in the order given; later sections overwrite
    earlier ones where they overlap. With no SECTIONS, every section is
    used.

    \b
    Example:
      coffsum checksum firmware.out .text .cinit
    """
    try:
        coff = decode_file(coff_file)
        names = list(sections) or coff.section_names()
        validate_section_names(coff, names)

        result = compute_checksums(coff, names)
        click.echo(result.format())

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose, error_type="Checksum")


# =============================================================================
# Export Command
# =============================================================================

@main.command("export")
@click.argument("coff_file", type=COFF_FILE)
@click.argument("sections", nargs=-1, required=True)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output S19 file path (required)",
)
@click.option(
    "--line-ending",
    type=click.Choice(sorted(LINE_ENDINGS)),
    default=None,
    help="Line terminator (default: crlf, or COFF_ANALYZER_LINE_ENDING)",
)
@pass_context
def cmd_export(
    ctx: Context,
    coff_file: Path,
    sections: tuple[str, ...],
    output: Path,
    line_ending: Optional[str],
) -> None:
    """
    Export SECTIONS of a 0x00C1 COFF file as Motorola S-records.

    Sections outside memory page 0 are skipped with a warning.

    \b
    Example:
      coffsum export -o firmware.s19 firmware.out .text .cinit
    """
    try:
        coff = decode_file(coff_file)
        validate_section_names(coff, sections)

        config = get_default_config()
        if line_ending:
            config = replace(config, line_terminator=LINE_ENDINGS[line_ending])

        result = export_motorola(coff, sections, output, config)

        for warning in result.warnings:
            click.echo(f"Warning: {warning}", err=True)
        click.echo(
            f"Created {result.output_path} ({len(result.sections)} sections, "
            f"{result.record_count} records, {result.bytes_written} bytes)"
        )

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose, error_type="Export")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
