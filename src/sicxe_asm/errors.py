"""
SIC/XE Assembler Error Hierarchy
================================

This module defines the exception hierarchy and the diagnostic records used
by the assembler. All exceptions inherit from SicxeError, allowing callers
to catch every assembler-related error with a single except clause.

Exception Hierarchy
-------------------
SicxeError (base)
├── AssemblerError (per-line problems, always recoverable)
│   ├── DuplicateSymbolError - label defined more than once
│   ├── UndefinedSymbolError - reference to an undefined symbol
│   ├── UnknownInstructionError - mnemonic not in the catalog
│   ├── FormatError - illegal format/operand combination
│   ├── RegisterError - invalid register name or register operand
│   ├── DisplacementRangeError - neither PC- nor BASE-relative fits
│   ├── ImmediateRangeError - immediate literal too big for format 3
│   ├── BaseNotDefinedError - BASE-relative needed but no BASE in effect
│   └── DirectiveError - misuse of START/END/BYTE/WORD/EQU/...
└── PassOrderError - Pass 2 run before Pass 1 completed

Design Philosophy
-----------------
The passes never abort on a bad line. Line-level helpers raise an
AssemblerError subclass, and the pass loop catches it, turns it into a
Diagnostic record and moves on. Only PassOrderError escapes the core.

Error messages follow this format:
    filename:line:column: error: description
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class SicxeError(Exception):
    """
    Base exception for all SIC/XE assembler errors.

    Example:
        try:
            asm.assemble_file("prog.asm")
        except SicxeError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


class ErrorKind(Enum):
    """Category of a diagnostic."""
    LEXICAL = auto()
    SYNTACTIC = auto()
    SEMANTIC = auto()

    def __str__(self) -> str:
        return {
            ErrorKind.LEXICAL: "lexical",
            ErrorKind.SYNTACTIC: "syntactic",
            ErrorKind.SEMANTIC: "semantic",
        }[self]


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(SicxeError):
    """
    Base exception for per-line assembler errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        kind: Diagnostic category, semantic unless stated otherwise
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        kind: ErrorKind = ErrorKind.SEMANTIC,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.kind = kind
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location and hint.

        Example output:
            prog.asm:4:0: error: symbol 'RESULT' is not defined
            hint: define the label or check its spelling
        """
        if self.location:
            text = f"{self.location}: error: {self.message}"
        else:
            text = f"error: {self.message}"
        if self.hint:
            text += f"\nhint: {self.hint}"
        return text


class DuplicateSymbolError(AssemblerError):
    """
    Label defined more than once.

    The first definition stays in the symbol table. The hint names the
    line of that first definition when it is known.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        original_line: Optional[int] = None,
    ):
        self.symbol = symbol
        self.original_line = original_line

        hint = None
        if original_line is not None:
            hint = f"'{symbol}' was first defined on line {original_line}"

        super().__init__(
            f"duplicate symbol '{symbol}'",
            location=location,
            hint=hint,
        )


class UndefinedSymbolError(AssemblerError):
    """Reference to a symbol that is neither a label nor a register."""

    def __init__(self, symbol: str, location: Optional[SourceLocation] = None):
        self.symbol = symbol
        super().__init__(f"symbol '{symbol}' is not defined", location=location)


class UnknownInstructionError(AssemblerError):
    """Operation field is neither an instruction nor a directive."""

    def __init__(self, mnemonic: str, location: Optional[SourceLocation] = None):
        self.mnemonic = mnemonic
        super().__init__(f"unknown instruction '{mnemonic}'", location=location)


class FormatError(AssemblerError):
    """
    Illegal format/operand combination.

    Examples:
        +FIX        ; '+' is only valid on format 3 instructions
        FIX 5       ; format 1 instructions take no operand
    """
    pass


class RegisterError(AssemblerError):
    """Invalid register name or wrong number of register operands."""
    pass


class DisplacementRangeError(AssemblerError):
    """
    Target cannot be reached PC-relative or BASE-relative.

    PC-relative reaches -2048..2047 from the next instruction, and
    BASE-relative reaches 0..4095 above the base register value.
    """

    def __init__(
        self,
        target: int,
        pc_disp: int,
        base_disp: int,
        location: Optional[SourceLocation] = None,
    ):
        self.target = target
        self.pc_disp = pc_disp
        self.base_disp = base_disp
        super().__init__(
            f"displacement out of range for target {target:04X}H "
            f"(PC-relative {pc_disp}, BASE-relative {base_disp})",
            location=location,
            hint="use format 4 (+) or move BASE closer to the target",
        )


class ImmediateRangeError(AssemblerError):
    """Immediate literal does not fit the 12-bit format 3 field."""

    def __init__(self, value: int, location: Optional[SourceLocation] = None):
        self.value = value
        super().__init__(
            f"immediate value {value} out of range 0..4095",
            location=location,
            hint="use format 4 (+) for larger immediate values",
        )


class BaseNotDefinedError(AssemblerError):
    """PC-relative failed and no BASE directive is in effect."""

    def __init__(self, pc_disp: int, location: Optional[SourceLocation] = None):
        self.pc_disp = pc_disp
        super().__init__(
            f"PC-relative displacement {pc_disp} out of range and BASE not defined",
            location=location,
            hint="add a BASE directive or use format 4 (+)",
        )


class DirectiveError(AssemblerError):
    """
    Error in an assembler directive.

    Examples:
        - START after the program already began
        - BYTE with a malformed X'..' constant
        - EQU without a label
    """
    pass


class PassOrderError(SicxeError):
    """Pass 2 was requested before Pass 1 reached END or end of input."""
    pass


# =============================================================================
# Diagnostic Records
# =============================================================================

@dataclass(frozen=True)
class Diagnostic:
    """
    One reported problem.

    Diagnostics are plain records, independent of the exception that
    produced them, so they can be sorted, merged and compared.
    """
    line: int
    column: int
    message: str
    kind: ErrorKind = ErrorKind.SEMANTIC

    @classmethod
    def from_error(cls, error: AssemblerError, line: int) -> "Diagnostic":
        """Build a diagnostic from a caught AssemblerError."""
        column = error.location.column if error.location else 0
        return cls(line, column, error.message, error.kind)

    def __str__(self) -> str:
        return f"line {self.line}:{self.column}: {self.kind} error: {self.message}"


def merge_diagnostics(*groups: Iterable[Diagnostic]) -> list[Diagnostic]:
    """
    Combine diagnostic lists from several stages.

    Duplicates by (line, message) are removed, keeping the first seen,
    and the result is ordered by (line, column).
    """
    seen: set[tuple[int, str]] = set()
    merged: list[Diagnostic] = []
    for group in groups:
        for diag in group:
            key = (diag.line, diag.message)
            if key in seen:
                continue
            seen.add(key)
            merged.append(diag)
    merged.sort(key=lambda d: (d.line, d.column))
    return merged


# =============================================================================
# Diagnostic Collection
# =============================================================================

class DiagnosticCollector:
    """
    Collects diagnostics for batch reporting.

    Each pass owns one collector. Errors are recorded as Diagnostic
    records in the order they are found; warnings are free-form strings.

    Example:
        collector = DiagnosticCollector()
        try:
            encode(line)
        except AssemblerError as e:
            collector.add(e, line.source_line)
        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self):
        self.diagnostics: list[Diagnostic] = []
        self.warnings: list[str] = []

    def add(self, error: AssemblerError, line: int) -> Diagnostic:
        """Record a caught error against a source line and return the record."""
        diag = Diagnostic.from_error(error, line)
        self.diagnostics.append(diag)
        return diag

    def add_diagnostic(self, diag: Diagnostic) -> None:
        """Record a ready-made diagnostic (e.g. forwarded from the front end)."""
        self.diagnostics.append(diag)

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.diagnostics) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.diagnostics)

    def warning_count(self) -> int:
        """Return the number of collected warnings."""
        return len(self.warnings)

    def report(self) -> str:
        """
        Format all errors and warnings for display.

        Returns:
            Formatted string with all errors and warnings
        """
        return format_report(self.diagnostics, self.warnings)

    def clear(self) -> None:
        """Clear all collected errors and warnings."""
        self.diagnostics.clear()
        self.warnings.clear()


def format_report(diagnostics: list[Diagnostic], warnings: list[str]) -> str:
    """Render diagnostics and warnings with a closing summary line."""
    lines = [str(diag) for diag in diagnostics]

    if warnings:
        lines.append("Warnings:")
        for warning in warnings:
            lines.append(f"  {warning}")

    error_word = "error" if len(diagnostics) == 1 else "errors"
    warning_word = "warning" if len(warnings) == 1 else "warnings"
    lines.append(f"{len(diagnostics)} {error_word}, {len(warnings)} {warning_word}")
    return "\n".join(lines)
