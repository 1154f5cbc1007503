"""
sicxe-asm - Two-Pass Assembler for the SIC/XE Architecture
===========================================================

This package provides the code-generation core of a SIC/XE assembler:
location counter assignment, symbol table construction, addressing-mode
classification and object code synthesis for all four instruction
formats, with every problem collected as a diagnostic instead of
stopping the run.

Main Components
---------------
- **assembler**: Pass 1, Pass 2, operation table, source reader
- **errors**: Exception hierarchy and diagnostic records
- **config**: Layout options with environment overrides
- **cli**: The `sicasm` command-line tool

Quick Start
-----------
    >>> from sicxe_asm import Assembler
    >>> asm = Assembler()
    >>> lines = asm.assemble_file("prog.asm")
    >>> asm.write_listing("prog.lst")

Or from the command line:
    $ sicasm prog.asm -l prog.lst -s prog.sym
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from sicxe_asm.assembler import Assembler
from sicxe_asm.config import AssemblerConfig
from sicxe_asm.errors import (
    SicxeError,
    SourceLocation,
    ErrorKind,
    AssemblerError,
    DuplicateSymbolError,
    UndefinedSymbolError,
    UnknownInstructionError,
    FormatError,
    RegisterError,
    DisplacementRangeError,
    ImmediateRangeError,
    BaseNotDefinedError,
    DirectiveError,
    PassOrderError,
    Diagnostic,
    DiagnosticCollector,
)

__all__ = [
    "__version__",
    "Assembler",
    "AssemblerConfig",
    "SicxeError",
    "SourceLocation",
    "ErrorKind",
    "AssemblerError",
    "DuplicateSymbolError",
    "UndefinedSymbolError",
    "UnknownInstructionError",
    "FormatError",
    "RegisterError",
    "DisplacementRangeError",
    "ImmediateRangeError",
    "BaseNotDefinedError",
    "DirectiveError",
    "PassOrderError",
    "Diagnostic",
    "DiagnosticCollector",
]
