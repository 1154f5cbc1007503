"""
Assembler Data Model
====================

Records that flow between the front end and the two passes:

    ParsedStatement  -> Pass 1 -> IntermediateLine + ProgramMetadata
    IntermediateLine -> Pass 2 -> ObjectCodeLine

ParsedStatement, IntermediateLine and ObjectCodeLine are immutable once
built. ProgramMetadata is filled in by Pass 1 and then only read.
"""

from dataclasses import dataclass
from typing import Optional

from sicxe_asm.assembler.opcodes import AddressingMode, InstructionFormat, is_extended
from sicxe_asm.errors import Diagnostic


# Separator used when one line collects several error messages
ERROR_SEPARATOR = "; "


def join_errors(*messages: str) -> str:
    """Join non-empty error messages with the standard separator."""
    return ERROR_SEPARATOR.join(m for m in messages if m)


# =============================================================================
# Front-End Input
# =============================================================================

@dataclass(frozen=True)
class ParsedStatement:
    """
    One physical source line as delivered by the front end.

    Attributes:
        line_number: Source line number (1-indexed)
        label: Label field, if present
        operation: Operation field, may carry a leading '+'
        operand: Operand text, if present
        comment: Comment text, if present
        source_text: The raw line, used to recover fields after a
            front-end error
        diagnostics: Problems the front end found on this line
    """
    line_number: int
    label: Optional[str] = None
    operation: Optional[str] = None
    operand: Optional[str] = None
    comment: Optional[str] = None
    source_text: str = ""
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def has_errors(self) -> bool:
        """True when the front end reported a problem on this line."""
        return len(self.diagnostics) > 0

    @property
    def is_blank(self) -> bool:
        """True for a line with no fields at all."""
        return not (self.label or self.operation or self.operand) and self.comment is None

    @property
    def is_comment_only(self) -> bool:
        """True for a line holding only a comment."""
        return self.comment is not None and not (self.label or self.operation or self.operand)

    @property
    def extended(self) -> bool:
        """True when the operation carries the format-4 '+' marker."""
        return bool(self.operation) and is_extended(self.operation)

    @property
    def mnemonic(self) -> str:
        """Upper-case operation without the '+' marker."""
        if not self.operation:
            return ""
        return self.operation.lstrip("+").upper()


# =============================================================================
# Pass 1 Output
# =============================================================================

@dataclass(frozen=True)
class IntermediateLine:
    """
    A statement annotated with its address and layout by Pass 1.

    Attributes:
        listing_number: Sequential number in the intermediate file
        source_line: Line number in the source
        address: Location counter value, None for comment-only lines
        label, operation, operand, comment: Fields as written
        format: Instruction format (NONE for directives)
        mode: Addressing mode (NONE outside format 3/4)
        increment: Bytes this line adds to the location counter
        value: Semantic value (resolved BASE or EQU value), if any
        error: Pass 1 error text, empty when the line is clean
    """
    listing_number: int
    source_line: int
    address: Optional[int]
    label: str = ""
    operation: str = ""
    operand: str = ""
    comment: str = ""
    format: InstructionFormat = InstructionFormat.NONE
    mode: AddressingMode = AddressingMode.NONE
    increment: int = 0
    value: Optional[int] = None
    error: str = ""

    @property
    def mnemonic(self) -> str:
        """Upper-case operation without the '+' marker."""
        return self.operation.lstrip("+").upper()

    @property
    def extended(self) -> bool:
        return is_extended(self.operation)


@dataclass
class ProgramMetadata:
    """
    Program-wide facts collected by Pass 1.

    program_length stays 0 until END is processed.
    """
    name: str = "NONAME"
    start_address: int = 0
    final_counter: int = 0
    program_length: int = 0
    base_value: Optional[int] = None
    base_operand: Optional[str] = None
    entry_operand: Optional[str] = None
    entry_point: Optional[int] = None
    ended: bool = False


# =============================================================================
# Pass 2 Output
# =============================================================================

@dataclass(frozen=True)
class ObjectCodeLine:
    """
    Object code for one intermediate line.

    Attributes:
        line: The intermediate line this code belongs to
        object_code: Hex string, empty when the line produces no code
        error: Pass 2 error text, or the Pass 1 error passed through
    """
    line: IntermediateLine
    object_code: str = ""
    error: str = ""

    @property
    def combined_error(self) -> str:
        """Pass 1 and Pass 2 errors for display, without repeats."""
        if self.error == self.line.error:
            return self.error
        return join_errors(self.line.error, self.error)
