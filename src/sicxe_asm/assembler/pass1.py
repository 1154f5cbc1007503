"""
Pass 1 - Address Assignment
===========================

Pass 1 walks the parsed statements once and:

- assigns an address to every statement (the location counter)
- builds the symbol table
- classifies each instruction by format and addressing mode
- records which lines reference which symbols
- reports problems without stopping

Gating Errors
-------------
Some errors make a line's layout meaningless. Such a line is listed with
its error, but its label is not defined and the location counter does
not move:

- front-end (lexical/syntactic) errors
- '+' on a format 1/2 instruction or on a directive
- an operand on a format 1 instruction
- START after the program began, or any statement after END
- a malformed RESB/RESW count or EQU

A duplicate label is not gating: the first definition is kept and the
counter still advances, so later addresses stay where the programmer
expects them.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, Optional

from sicxe_asm.assembler.numbers import (
    is_char_constant,
    is_hex_constant,
    byte_length,
    is_number,
    parse_number,
    try_parse_number,
)
from sicxe_asm.assembler.opcodes import (
    AddressingMode,
    Classification,
    InstructionFormat,
    ZERO_SIZE_DIRECTIVES,
    classify,
    get_opcode_info,
    is_directive,
    is_register,
)
from sicxe_asm.assembler.source import fallback_fields
from sicxe_asm.assembler.statements import (
    IntermediateLine,
    ParsedStatement,
    ProgramMetadata,
    join_errors,
)
from sicxe_asm.assembler.symbols import SymbolTable
from sicxe_asm.config import AssemblerConfig
from sicxe_asm.errors import (
    AssemblerError,
    Diagnostic,
    DiagnosticCollector,
    DirectiveError,
    DuplicateSymbolError,
    FormatError,
    SourceLocation,
    UndefinedSymbolError,
    UnknownInstructionError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Pass 1 State
# =============================================================================

class Pass1Phase(Enum):
    """Where Pass 1 is in the program."""
    NOT_STARTED = auto()  # No START or statement seen yet
    RUNNING = auto()      # Counter active
    ENDED = auto()        # END processed


@dataclass
class Pass1State:
    """Mutable state carried from one statement to the next."""
    phase: Pass1Phase = Pass1Phase.NOT_STARTED
    location_counter: int = 0
    metadata: ProgramMetadata = field(default_factory=ProgramMetadata)


@dataclass
class Pass1Result:
    """
    Everything Pass 2 needs.

    Attributes:
        symbols: Finished symbol table
        lines: Intermediate lines in listing order
        metadata: Program name, start, length, base
        diagnostics: Errors in the order found (front-end ones included)
        warnings: Non-error remarks (e.g. missing END)
        complete: True once the whole input has been processed
    """
    symbols: SymbolTable
    lines: list[IntermediateLine]
    metadata: ProgramMetadata
    diagnostics: list[Diagnostic]
    warnings: list[str]
    complete: bool = False


# =============================================================================
# Pass 1 Engine
# =============================================================================

class Pass1Engine:
    """
    Location counter assignment and symbol table construction.

    Example:
        engine = Pass1Engine()
        result = engine.run(read_source(text))
        result.symbols.lookup("FIRST")
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        self._config = config or AssemblerConfig()
        self._filename = self._config.source_name
        self._state = Pass1State(metadata=ProgramMetadata(name=self._config.default_program_name))
        self._symbols = SymbolTable()
        self._lines: list[IntermediateLine] = []
        self._errors = DiagnosticCollector()
        self._finished = False

    @property
    def state(self) -> Pass1State:
        return self._state

    def run(self, statements: Iterable[ParsedStatement]) -> Pass1Result:
        """
        Process every statement and finish the pass.

        Args:
            statements: Parsed statements in source order

        Returns:
            Pass1Result with the symbol table, intermediate lines and metadata
        """
        for stmt in statements:
            self.process(stmt)
        return self.finish()

    def process(self, stmt: ParsedStatement) -> None:
        """Process a single statement."""
        if stmt.has_errors:
            self._process_front_end_error(stmt)
            return

        if stmt.is_blank:
            return

        if stmt.is_comment_only:
            self._emit(stmt, address=None, comment=stmt.comment or "")
            return

        loc = SourceLocation(self._filename, stmt.line_number)
        mnemonic = stmt.mnemonic
        operand = (stmt.operand or "").strip()

        if self._state.phase == Pass1Phase.ENDED:
            self._reject(stmt, DirectiveError("statement after END is ignored", location=loc))
            return

        if mnemonic == "START":
            self._process_start(stmt, operand, loc)
            return

        if self._state.phase == Pass1Phase.NOT_STARTED:
            self._state.phase = Pass1Phase.RUNNING
            self._state.location_counter = 0
            self._state.metadata.start_address = 0
            logger.debug(f"line {stmt.line_number}: no START, counter begins at 0")

        value: Optional[int] = None
        if mnemonic == "BASE":
            value = self._symbols.lookup(operand) if operand else None
            self._state.metadata.base_value = value
            self._state.metadata.base_operand = operand or None
            logger.debug(f"line {stmt.line_number}: BASE {operand} -> {value}")

        classification = classify(mnemonic, stmt.extended, operand)

        try:
            self._check_gating(stmt, mnemonic, operand, loc)
            if mnemonic == "EQU":
                value = self._resolve_equ(operand, loc)
        except AssemblerError as e:
            self._reject(stmt, e, classification)
            return

        address = self._state.location_counter
        errors: list[str] = []

        if stmt.label:
            label_value = value if mnemonic == "EQU" else address
            existing = self._symbols.get(stmt.label)
            if self._symbols.define(stmt.label, label_value, stmt.line_number,
                                    is_constant=(mnemonic == "EQU")):
                logger.debug(f"line {stmt.line_number}: {stmt.label} = {label_value:04X}")
            else:
                dup = DuplicateSymbolError(stmt.label, loc, existing.line if existing else None)
                self._errors.add(dup, stmt.line_number)
                errors.append(dup.message)

        increment = self._increment(stmt, mnemonic, operand, classification, loc)

        self._track_references(operand, stmt.line_number)

        self._emit(
            stmt,
            address=address,
            classification=classification,
            increment=increment,
            value=value,
            error=join_errors(*errors),
        )

        if mnemonic == "END":
            self._process_end(operand)
            return

        self._state.location_counter += increment

    def finish(self) -> Pass1Result:
        """
        Close the pass and return its result.

        Without END, the final counter is recorded but the program length
        stays unfinalized and a warning is added.
        """
        if not self._finished:
            metadata = self._state.metadata
            if self._state.phase != Pass1Phase.ENDED:
                metadata.final_counter = self._state.location_counter
                message = "no END directive; program length not finalized"
                self._errors.add_warning(message)
                logger.warning(message)
            self._finished = True
            logger.info(
                f"Pass 1 complete: {len(self._lines)} lines, {len(self._symbols)} symbols, "
                f"{self._errors.error_count()} errors"
            )

        return Pass1Result(
            symbols=self._symbols,
            lines=list(self._lines),
            metadata=self._state.metadata,
            diagnostics=list(self._errors.diagnostics),
            warnings=list(self._errors.warnings),
            complete=self._finished,
        )

    # =========================================================================
    # Statement Kinds
    # =========================================================================

    def _process_front_end_error(self, stmt: ParsedStatement) -> None:
        """List a line the front end rejected, using fallback fields."""
        label, operation, operand = fallback_fields(stmt.source_text)
        for diag in stmt.diagnostics:
            self._errors.add_diagnostic(diag)
        self._lines.append(IntermediateLine(
            listing_number=len(self._lines) + 1,
            source_line=stmt.line_number,
            address=self._state.location_counter,
            label=label,
            operation=operation,
            operand=operand,
            comment=stmt.comment or "",
            error=join_errors(*(d.message for d in stmt.diagnostics)),
        ))

    def _process_start(self, stmt: ParsedStatement, operand: str, loc: SourceLocation) -> None:
        if stmt.extended:
            self._reject(stmt, FormatError("'+' prefix not allowed on directive 'START'", location=loc))
            return

        if self._state.phase != Pass1Phase.NOT_STARTED:
            self._reject(stmt, DirectiveError(
                "START must be the first statement of the program",
                location=loc,
            ))
            return

        metadata = self._state.metadata
        metadata.name = stmt.label or self._config.default_program_name
        metadata.start_address = parse_number(operand, self._config.start_radix)
        self._state.location_counter = metadata.start_address
        self._state.phase = Pass1Phase.RUNNING
        logger.debug(f"START {metadata.name} at {metadata.start_address:04X}")

        if stmt.label and self._config.define_start_label:
            self._symbols.define(stmt.label, metadata.start_address, stmt.line_number)

        self._emit(stmt, address=metadata.start_address)

    def _process_end(self, operand: str) -> None:
        state = self._state
        metadata = state.metadata
        metadata.final_counter = state.location_counter
        metadata.program_length = state.location_counter - metadata.start_address
        metadata.entry_operand = operand or None
        if operand:
            metadata.entry_point = self._symbols.lookup(operand)
        metadata.ended = True
        state.phase = Pass1Phase.ENDED
        logger.debug(f"END: length {metadata.program_length:04X}")

        for name, line in self._symbols.undefined_references():
            if is_register(name):
                continue
            error = UndefinedSymbolError(name, SourceLocation(self._filename, line))
            self._errors.add(error, line)

    # =========================================================================
    # Checks
    # =========================================================================

    def _check_gating(self, stmt: ParsedStatement, mnemonic: str, operand: str,
                      loc: SourceLocation) -> None:
        """Raise for errors that suppress symbol definition and counter advance."""
        info = get_opcode_info(mnemonic) if mnemonic else None

        if stmt.extended:
            if is_directive(mnemonic):
                raise FormatError(f"'+' prefix not allowed on directive '{mnemonic}'", location=loc)
            if info and info.format != InstructionFormat.FORMAT3:
                raise FormatError(
                    f"'+' prefix not allowed on format {int(info.format)} instruction '{mnemonic}'",
                    location=loc,
                    hint="only format 3 instructions have a format 4 form",
                )

        if info and info.format == InstructionFormat.FORMAT1 and operand:
            raise FormatError(f"format 1 instruction '{mnemonic}' takes no operand", location=loc)

        if mnemonic in ("RESB", "RESW"):
            count = try_parse_number(operand)
            if count is None or count < 0:
                raise DirectiveError(
                    f"{mnemonic} requires a non-negative count, got '{operand}'",
                    location=loc,
                )

        if mnemonic == "EQU" and not stmt.label:
            raise DirectiveError("EQU requires a label", location=loc)

    def _resolve_equ(self, operand: str, loc: SourceLocation) -> int:
        """Value of an EQU operand: a number, '*' or an already defined symbol."""
        if operand == "*":
            return self._state.location_counter
        value = try_parse_number(operand)
        if value is None and operand:
            value = self._symbols.lookup(operand)
        if value is None:
            raise DirectiveError(
                f"cannot resolve EQU operand '{operand}'",
                location=loc,
                hint="EQU accepts a number, '*' or a symbol defined earlier",
            )
        return value

    def _increment(self, stmt: ParsedStatement, mnemonic: str, operand: str,
                   classification: Classification, loc: SourceLocation) -> int:
        """Bytes this statement adds to the location counter."""
        if not mnemonic:
            return 0
        if mnemonic == "BYTE":
            return byte_length(operand)
        if mnemonic == "WORD":
            return 3
        if mnemonic == "RESB":
            return parse_number(operand)
        if mnemonic == "RESW":
            return 3 * parse_number(operand)
        if mnemonic in ZERO_SIZE_DIRECTIVES:
            return 0
        if classification.format != InstructionFormat.NONE:
            return classification.size

        # Pass 2 reports the same message; the facade merges the two
        self._errors.add(UnknownInstructionError(mnemonic, loc), stmt.line_number)
        return 3

    def _track_references(self, operand: str, line: int) -> None:
        """Record every symbolic token of an operand."""
        if not operand:
            return
        # A quoted constant may itself contain commas
        text = operand.strip().lstrip("#@=").strip()
        if is_char_constant(text) or is_hex_constant(text):
            return
        for token in operand.split(","):
            name = token.strip().lstrip("#@=").strip()
            if not name or name == "*" or is_number(name):
                continue
            self._symbols.add_reference(name, line)

    # =========================================================================
    # Output
    # =========================================================================

    def _reject(self, stmt: ParsedStatement, error: AssemblerError,
                classification: Optional[Classification] = None) -> None:
        """List a gated line: error recorded, no symbol, no counter advance."""
        self._errors.add(error, stmt.line_number)
        logger.debug(f"line {stmt.line_number}: {error.message}")
        self._emit(
            stmt,
            address=self._state.location_counter,
            classification=classification,
            error=error.message,
        )

    def _emit(self, stmt: ParsedStatement, address: Optional[int],
              classification: Optional[Classification] = None,
              increment: int = 0, value: Optional[int] = None,
              error: str = "", comment: Optional[str] = None) -> None:
        fmt = classification.format if classification else InstructionFormat.NONE
        mode = classification.mode if classification else AddressingMode.NONE
        line = IntermediateLine(
            listing_number=len(self._lines) + 1,
            source_line=stmt.line_number,
            address=address,
            label=stmt.label or "",
            operation=stmt.operation or "",
            operand=(stmt.operand or "").strip(),
            comment=comment if comment is not None else (stmt.comment or ""),
            format=fmt,
            increment=increment,
            value=value,
            mode=mode,
            error=error,
        )
        self._lines.append(line)
