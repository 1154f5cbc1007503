"""
sicasm - SIC/XE Assembler Command-Line Interface
=================================================

Usage Examples
--------------
Assemble and print the listing:
    $ sicasm prog.asm

Write listing and symbol files:
    $ sicasm prog.asm -l prog.lst -s prog.sym

Decimal START operand and a default program name:
    $ sicasm --start-radix 10 --name DEMO prog.asm

Verbose mode (debug logging of every pass decision):
    $ sicasm -v prog.asm

Defaults for --name, --start-radix and --start-label come from the
SICXE_PROGRAM_NAME, SICXE_START_RADIX and SICXE_DEFINE_START_LABEL
environment variables when set.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from sicxe_asm import __version__
from sicxe_asm.assembler import Assembler
from sicxe_asm.cli.errors import ExitCode, handle_cli_exception
from sicxe_asm.config import AssemblerConfig


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the listing to a file instead of stdout",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "-n", "--name",
    default=None,
    help="Program name used when START has no label (default: NONAME)",
)
@click.option(
    "--start-radix",
    type=click.Choice(["10", "16"]),
    default=None,
    help="Radix of the START operand. Default: 16",
)
@click.option(
    "--start-label/--no-start-label",
    default=None,
    help="Define the START label as a symbol. Default: disabled",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="sicasm")
def main(
    input_file: Path,
    listing: Optional[Path],
    symbols: Optional[Path],
    name: Optional[str],
    start_radix: Optional[str],
    start_label: Optional[bool],
    verbose: bool,
) -> None:
    """
    Assemble SIC/XE source code.

    INPUT_FILE is the assembly source file to assemble.

    The listing (addresses, formats, addressing modes, object code and
    errors) goes to stdout unless -l is given. Diagnostics go to stderr,
    and the exit code is 1 when any were reported.

    \b
    Examples:
        sicasm prog.asm                  # Print listing
        sicasm prog.asm -l prog.lst      # Write listing file
        sicasm prog.asm -s prog.sym      # Also write symbol file
    """
    setup_logging(verbose)

    config = AssemblerConfig.from_env()
    if name is not None:
        config.default_program_name = name
    if start_radix is not None:
        config.start_radix = int(start_radix)
    if start_label is not None:
        config.define_start_label = start_label

    asm = Assembler(config=config, verbose=verbose)

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        asm.assemble_file(input_file)

        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")
        else:
            click.echo(asm.get_listing(), nl=False)

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            metadata = asm.get_metadata()
            click.echo(
                f"Assembly complete: {metadata.program_length} bytes "
                f"at {metadata.start_address:04X}"
            )
            click.echo(f"Defined {len(asm.get_symbols())} symbols")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")

    if asm.has_errors():
        click.echo(asm.get_error_report(), err=True)
        sys.exit(ExitCode.BUILD_ERROR)
    if asm.get_warnings():
        click.echo(asm.get_error_report(), err=True)


if __name__ == "__main__":
    main()
