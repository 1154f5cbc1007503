"""
SIC/XE Assembler - Main Interface
=================================

This module provides the Assembler class, the primary interface for
assembling SIC/XE source. It runs the source reader, Pass 1 and Pass 2
in order and merges their diagnostics.

Example Usage
-------------
>>> from sicxe_asm.assembler import Assembler
>>>
>>> asm = Assembler()
>>> lines = asm.assemble_string('''
... PROG    START   1000
... FIRST   LDA     #5
...         STA     RESULT
... RESULT  RESW    1
...         END     FIRST
... ''')
>>> [line.object_code for line in lines if line.object_code]
['010005', '0F2000']
>>> asm.get_symbols()
{'FIRST': 4096, 'RESULT': 4102}

Command-Line Usage
------------------
    $ sicasm prog.asm -l prog.lst -s prog.sym
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Optional

from sicxe_asm.assembler.pass1 import Pass1Engine, Pass1Result
from sicxe_asm.assembler.pass2 import Pass2Engine, Pass2Result
from sicxe_asm.assembler.source import read_source
from sicxe_asm.assembler.statements import (
    IntermediateLine,
    ObjectCodeLine,
    ParsedStatement,
    ProgramMetadata,
)
from sicxe_asm.config import AssemblerConfig
from sicxe_asm.errors import Diagnostic, format_report, merge_diagnostics

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main SIC/XE assembler class.

    One instance assembles one program at a time; calling an assemble
    method again discards the previous results. Separate instances share
    no state and may be used from separate threads.

    Attributes:
        config: Layout options (program name default, START radix, ...)
    """

    def __init__(self, config: Optional[AssemblerConfig] = None, verbose: bool = False):
        """
        Initialize the assembler.

        Args:
            config: Layout options, defaults to AssemblerConfig()
            verbose: If True, log progress at INFO level
        """
        self.config = config or AssemblerConfig()
        self._verbose = verbose
        self._pass1: Optional[Pass1Result] = None
        self._pass2: Optional[Pass2Result] = None
        self._diagnostics: list[Diagnostic] = []

    # =========================================================================
    # Assembly
    # =========================================================================

    def assemble_statements(self, statements: Iterable[ParsedStatement],
                            filename: Optional[str] = None) -> list[ObjectCodeLine]:
        """
        Assemble statements produced by any front end.

        Args:
            statements: Parsed statements in source order
            filename: Name used in error locations (default from config)

        Returns:
            One ObjectCodeLine per intermediate line
        """
        config = self.config
        if filename is not None:
            config = replace(config, source_name=filename)

        self._pass1 = Pass1Engine(config).run(statements)
        self._pass2 = Pass2Engine(config).run(self._pass1)
        self._diagnostics = merge_diagnostics(self._pass1.diagnostics, self._pass2.diagnostics)

        if self._verbose:
            logger.info(
                f"Assembled {self._pass1.metadata.name}: "
                f"{self._pass1.metadata.program_length} bytes, "
                f"{len(self._diagnostics)} diagnostics"
            )
        return list(self._pass2.lines)

    def assemble_string(self, source: str, filename: str = "<input>") -> list[ObjectCodeLine]:
        """
        Assemble source code from a string.

        Args:
            source: SIC/XE source text
            filename: Name used in error locations

        Returns:
            One ObjectCodeLine per intermediate line
        """
        statements = read_source(source)
        if self._verbose:
            logger.info(f"Read {len(statements)} lines from {filename}")
        return self.assemble_statements(statements, filename)

    def assemble_file(self, filepath: str | Path) -> list[ObjectCodeLine]:
        """
        Assemble source code from a file.

        Args:
            filepath: Path to the source file

        Returns:
            One ObjectCodeLine per intermediate line

        Raises:
            FileNotFoundError: If the source file is not found
        """
        filepath = Path(filepath)
        source = filepath.read_text()
        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Results
    # =========================================================================

    def _require_pass1(self) -> Pass1Result:
        if self._pass1 is None:
            raise RuntimeError("nothing has been assembled yet")
        return self._pass1

    def get_symbols(self) -> dict[str, int]:
        """
        Get the symbol table.

        Returns:
            Dictionary mapping symbol names (as first written) to addresses
        """
        return dict(self._require_pass1().symbols.items())

    def get_intermediate(self) -> list[IntermediateLine]:
        """Intermediate lines produced by Pass 1."""
        return list(self._require_pass1().lines)

    def get_object_code(self) -> list[ObjectCodeLine]:
        """Object code lines produced by Pass 2."""
        self._require_pass1()
        return list(self._pass2.lines)

    def get_metadata(self) -> ProgramMetadata:
        """Program name, start address, length and base value."""
        return self._require_pass1().metadata

    def get_diagnostics(self) -> list[Diagnostic]:
        """All diagnostics, deduplicated and ordered by (line, column)."""
        return list(self._diagnostics)

    def get_warnings(self) -> list[str]:
        return list(self._pass1.warnings) if self._pass1 else []

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            Listing with addresses, fields, format, mode, object code and
            errors, followed by the symbol table
        """
        metadata = self.get_metadata()
        out = [
            "SIC/XE Assembler Listing",
            "=" * 100,
            f"Program: {metadata.name}   Start: {metadata.start_address:04X}   "
            f"Length: {metadata.program_length:04X}",
        ]
        if metadata.base_value is not None:
            out.append(f"Base: {metadata.base_value:04X}")
        out.append("")
        out.append(
            f"{'#':>4}  {'LOC':6}{'LABEL':10}{'OP':10}{'OPERAND':16}"
            f"{'FMT':4}{'MODE':11}{'OBJECT':10}ERRORS"
        )
        out.append("-" * 100)

        for code in self.get_object_code():
            line = code.line
            if line.address is None:
                out.append(f"{line.listing_number:>4}  . {line.comment}".rstrip())
                continue
            loc = f"{line.address:04X}"
            fmt = str(int(line.format)) if line.format else "-"
            out.append(
                f"{line.listing_number:>4}  {loc:6}{line.label:10}{line.operation:10}"
                f"{line.operand:16}{fmt:4}{str(line.mode):11}{code.object_code:10}"
                f"{code.combined_error}".rstrip()
            )

        out.append("")
        out.append("Symbol Table")
        out.append("-" * 30)
        for name, value in sorted(self.get_symbols().items()):
            out.append(f"{name:20s} = {value:04X}")
        return "\n".join(out) + "\n"

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write the assembly listing file.

        Args:
            filepath: Output file path
        """
        Path(filepath).write_text(self.get_listing())

        if self._verbose:
            logger.info(f"Wrote listing to {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write the symbol table file.

        Format: name address (one per line, address in hex)
        """
        with open(filepath, "w") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by sicasm\n")
            for name, value in sorted(self.get_symbols().items()):
                f.write(f"{name} {value:04X}\n")

        if self._verbose:
            logger.info(f"Wrote symbols to {filepath}")

    # =========================================================================
    # Error Handling
    # =========================================================================

    def has_errors(self) -> bool:
        """
        Check if assembly produced errors.

        Returns:
            True if any diagnostic was reported
        """
        return len(self._diagnostics) > 0

    def get_error_report(self) -> str:
        """
        Get formatted error report.

        Returns:
            One line per diagnostic, warnings, and a summary line
        """
        return format_report(self._diagnostics, self.get_warnings())


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>",
             config: Optional[AssemblerConfig] = None) -> Assembler:
    """
    Convenience function to assemble source code.

    Args:
        source: SIC/XE source text
        filename: Virtual filename for errors
        config: Layout options

    Returns:
        The Assembler holding the results
    """
    asm = Assembler(config=config)
    asm.assemble_string(source, filename)
    return asm


def assemble_file(filepath: str | Path, config: Optional[AssemblerConfig] = None) -> Assembler:
    """
    Convenience function to assemble a file.

    Args:
        filepath: Path to source file
        config: Layout options

    Returns:
        The Assembler holding the results
    """
    asm = Assembler(config=config)
    asm.assemble_file(filepath)
    return asm
