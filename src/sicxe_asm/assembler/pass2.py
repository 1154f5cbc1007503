"""
Pass 2 - Object Code Generation
===============================

Pass 2 turns each intermediate line into a hex object code string. It
needs the finished symbol table from Pass 1, since operands may refer to
labels defined further down.

Encodings
---------
Format 1:   opcode                                      2 hex digits
Format 2:   opcode | r1 | r2                            4 hex digits
Format 3:   opcode+n+i | x b p e | disp (12 bits)       6 hex digits
Format 4:   opcode+n+i | x b p e | address (20 bits)    8 hex digits
BYTE:       C'..' as ASCII hex, X'..' verbatim
WORD:       24-bit two's complement                     6 hex digits

Format 3 Displacement
---------------------
1. PC-relative: disp = target - (address + size), valid -2048..2047, p=1
2. BASE-relative: disp = target - base, valid 0..4095, b=1
3. Otherwise the line is an error.

A line that fails gets a placeholder of '?' characters as wide as its
object code would have been. Errors never stop the scan.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from sicxe_asm.assembler.numbers import (
    constant_body,
    is_char_constant,
    is_hex_constant,
    is_valid_hex,
    try_parse_number,
)
from sicxe_asm.assembler.opcodes import (
    REGISTERS,
    SHIFT_INSTRUCTIONS,
    SINGLE_REGISTER_INSTRUCTIONS,
    AddressingMode,
    InstructionFormat,
    OpcodeInfo,
    get_opcode_info,
    get_register_number,
    is_directive,
)
from sicxe_asm.assembler.pass1 import Pass1Result
from sicxe_asm.assembler.statements import IntermediateLine, ObjectCodeLine
from sicxe_asm.assembler.symbols import SymbolTable
from sicxe_asm.config import AssemblerConfig
from sicxe_asm.errors import (
    AssemblerError,
    BaseNotDefinedError,
    Diagnostic,
    DiagnosticCollector,
    DirectiveError,
    DisplacementRangeError,
    FormatError,
    ImmediateRangeError,
    PassOrderError,
    RegisterError,
    SourceLocation,
    UndefinedSymbolError,
    UnknownInstructionError,
)

logger = logging.getLogger(__name__)


# Displacement ranges
PC_REL_MIN = -2048
PC_REL_MAX = 2047
BASE_REL_MAX = 4095
IMMEDIATE_MAX = 4095

_SYMBOL_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


@dataclass
class Pass2Result:
    """
    Object code for the whole program.

    Attributes:
        lines: One ObjectCodeLine per intermediate line, same order
        diagnostics: Pass 2 errors in the order found
        base_value: BASE register value in effect after the last line
    """
    lines: list[ObjectCodeLine]
    diagnostics: list[Diagnostic]
    base_value: Optional[int] = None


# =============================================================================
# Pass 2 Engine
# =============================================================================

class Pass2Engine:
    """
    Object code synthesis from a completed Pass 1.

    Example:
        pass1 = Pass1Engine().run(statements)
        pass2 = Pass2Engine().run(pass1)
        for line in pass2.lines:
            print(line.object_code)
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        self._config = config or AssemblerConfig()
        self._filename = self._config.source_name
        self._errors = DiagnosticCollector()
        self._symbols = SymbolTable()
        self._base: Optional[int] = None

    def run(self, pass1: Pass1Result) -> Pass2Result:
        """
        Generate object code for every intermediate line.

        Args:
            pass1: Result of a finished Pass 1

        Returns:
            Pass2Result with one ObjectCodeLine per intermediate line

        Raises:
            PassOrderError: If Pass 1 has not finished
        """
        if not pass1.complete:
            raise PassOrderError("Pass 2 requires a completed Pass 1")

        self._errors.clear()
        self._symbols = pass1.symbols
        self._base = pass1.metadata.base_value

        output = [self._generate_line(line) for line in pass1.lines]

        logger.info(
            f"Pass 2 complete: {sum(1 for o in output if o.object_code and not o.error)} "
            f"lines with code, {self._errors.error_count()} errors"
        )
        return Pass2Result(output, list(self._errors.diagnostics), self._base)

    def _generate_line(self, line: IntermediateLine) -> ObjectCodeLine:
        """Object code for one line, with errors converted to a placeholder."""
        if line.error:
            return ObjectCodeLine(line, "", line.error)
        if line.address is None or not line.operation:
            return ObjectCodeLine(line, "", "")

        try:
            code = self._encode(line)
        except AssemblerError as e:
            self._errors.add(e, line.source_line)
            logger.debug(f"line {line.source_line}: {e.message}")
            placeholder = self._config.placeholder_char * (int(line.format) * 2)
            return ObjectCodeLine(line, placeholder, e.message)

        logger.debug(f"line {line.source_line}: {line.operation} {line.operand} -> {code}")
        return ObjectCodeLine(line, code, "")

    def _location(self, line: IntermediateLine) -> SourceLocation:
        return SourceLocation(self._filename, line.source_line)

    def _encode(self, line: IntermediateLine) -> str:
        mnemonic = line.mnemonic

        if is_directive(mnemonic):
            return self._encode_directive(line, mnemonic)

        info = get_opcode_info(mnemonic)
        if info is None:
            raise UnknownInstructionError(mnemonic, self._location(line))

        if line.format == InstructionFormat.FORMAT1:
            return f"{info.opcode:02X}"
        if line.format == InstructionFormat.FORMAT2:
            return self._encode_format2(line, info)
        if line.format == InstructionFormat.FORMAT3:
            return self._encode_format3(line, info)
        if line.format == InstructionFormat.FORMAT4:
            return self._encode_format4(line, info)
        return ""

    # =========================================================================
    # Directives
    # =========================================================================

    def _encode_directive(self, line: IntermediateLine, mnemonic: str) -> str:
        operand = line.operand
        if mnemonic == "BYTE":
            return self._encode_byte(operand, line)
        if mnemonic == "WORD":
            return self._encode_word(operand, line)
        if mnemonic == "BASE":
            value = self._resolve(operand) if operand else None
            if value is not None:
                self._base = value
                logger.debug(f"line {line.source_line}: BASE now {value:04X}")
            else:
                logger.debug(f"line {line.source_line}: BASE operand '{operand}' unresolved")
        elif mnemonic == "NOBASE":
            self._base = None
        return ""

    def _encode_byte(self, operand: str, line: IntermediateLine) -> str:
        loc = self._location(line)
        if not operand:
            raise DirectiveError("BYTE requires an operand", location=loc)

        if is_char_constant(operand):
            return "".join(f"{ord(ch):02X}" for ch in constant_body(operand))

        if is_hex_constant(operand):
            digits = constant_body(operand)
            if not is_valid_hex(digits):
                raise DirectiveError(f"invalid hex constant for BYTE: '{operand}'", location=loc)
            return digits.upper()

        value = try_parse_number(operand)
        if value is not None:
            if not 0 <= value <= 0xFF:
                raise DirectiveError(f"BYTE value {value} out of range 0..255", location=loc)
            return f"{value:02X}"

        raise DirectiveError(f"invalid operand for BYTE: '{operand}'", location=loc)

    def _encode_word(self, operand: str, line: IntermediateLine) -> str:
        loc = self._location(line)
        value = try_parse_number(operand)
        if value is None and _SYMBOL_RE.match(operand):
            value = self._symbols.lookup(operand)
            if value is None:
                raise UndefinedSymbolError(operand, loc)
        if value is None:
            raise DirectiveError(f"invalid operand for WORD: '{operand}'", location=loc)
        return f"{value & 0xFFFFFF:06X}"

    # =========================================================================
    # Format 2
    # =========================================================================

    def _register(self, name: str, line: IntermediateLine) -> int:
        number = get_register_number(name)
        if number is None:
            raise RegisterError(
                f"invalid register '{name}'",
                location=self._location(line),
                hint=f"valid registers: {', '.join(REGISTERS)}",
            )
        return number

    def _encode_format2(self, line: IntermediateLine, info: OpcodeInfo) -> str:
        mnemonic = line.mnemonic
        loc = self._location(line)
        parts = [p.strip() for p in line.operand.split(",")] if line.operand else []

        if mnemonic == "SVC":
            number = try_parse_number(parts[0]) if parts else None
            if number is None or not 0 <= number <= 15:
                raise FormatError("SVC requires an interrupt number 0..15", location=loc)
            r1, r2 = number, 0

        elif mnemonic in SINGLE_REGISTER_INSTRUCTIONS:
            if len(parts) != 1 or not parts[0]:
                raise RegisterError(f"'{mnemonic}' requires one register operand", location=loc)
            r1, r2 = self._register(parts[0], line), 0

        elif mnemonic in SHIFT_INSTRUCTIONS:
            if len(parts) != 2:
                raise FormatError(f"'{mnemonic}' requires a register and a shift count", location=loc)
            r1 = self._register(parts[0], line)
            count = try_parse_number(parts[1])
            if count is None or not 1 <= count <= 16:
                raise FormatError(f"shift count must be 1..16, got '{parts[1]}'", location=loc)
            r2 = count - 1

        else:
            if len(parts) != 2:
                raise RegisterError(f"'{mnemonic}' requires two register operands", location=loc)
            r1 = self._register(parts[0], line)
            r2 = self._register(parts[1], line)

        return f"{(info.opcode << 8) | (r1 << 4) | r2:04X}"

    # =========================================================================
    # Format 3 / 4
    # =========================================================================

    def _resolve(self, operand: str) -> Optional[int]:
        """Numeric literal or symbol value, None when neither."""
        value = try_parse_number(operand)
        if value is None:
            value = self._symbols.lookup(operand)
        return value

    def _target(self, line: IntermediateLine) -> tuple[str, Optional[int], int, int, int]:
        """
        Split a format 3/4 operand into its addressing flags and value.

        Returns:
            (bare operand, numeric value or None, n, i, x)
        """
        operand = line.operand.strip()
        if not operand:
            raise FormatError(f"missing operand for '{line.mnemonic}'", location=self._location(line))

        n, i, x = line.mode.nix
        if line.mode in (AddressingMode.IMMEDIATE, AddressingMode.INDIRECT):
            bare = operand[1:].strip()
        elif line.mode == AddressingMode.INDEXED:
            bare = operand.split(",")[0].strip()
        else:
            bare = operand
        return bare, try_parse_number(bare), n, i, x

    def _symbol_address(self, name: str, line: IntermediateLine) -> int:
        address = self._symbols.lookup(name)
        if address is None:
            raise UndefinedSymbolError(name, self._location(line))
        return address

    def _encode_format3(self, line: IntermediateLine, info: OpcodeInfo) -> str:
        if line.mnemonic == "RSUB":
            return f"{((info.opcode & 0xFC) | 0x03) << 16:06X}"

        bare, number, n, i, x = self._target(line)
        first_byte = (info.opcode & 0xFC) | (n << 1) | i

        if number is not None and line.mode == AddressingMode.IMMEDIATE:
            if not 0 <= number <= IMMEDIATE_MAX:
                raise ImmediateRangeError(number, self._location(line))
            return f"{(first_byte << 16) | (x << 15) | number:06X}"

        target = number if number is not None else self._symbol_address(bare, line)

        pc = line.address + line.increment
        pc_disp = target - pc
        if PC_REL_MIN <= pc_disp <= PC_REL_MAX:
            b, p, disp = 0, 1, pc_disp
        elif self._base is None:
            raise BaseNotDefinedError(pc_disp, self._location(line))
        else:
            base_disp = target - self._base
            if not 0 <= base_disp <= BASE_REL_MAX:
                raise DisplacementRangeError(target, pc_disp, base_disp, self._location(line))
            b, p, disp = 1, 0, base_disp

        logger.debug(
            f"line {line.source_line}: target {target:04X} "
            f"{'PC' if p else 'BASE'}-relative disp {disp}"
        )
        flags = (x << 3) | (b << 2) | (p << 1)
        return f"{(first_byte << 16) | (flags << 12) | (disp & 0xFFF):06X}"

    def _encode_format4(self, line: IntermediateLine, info: OpcodeInfo) -> str:
        if line.mnemonic == "RSUB":
            return f"{(((info.opcode & 0xFC) | 0x03) << 24) | (1 << 20):08X}"

        bare, number, n, i, x = self._target(line)
        target = number if number is not None else self._symbol_address(bare, line)

        first_byte = (info.opcode & 0xFC) | (n << 1) | i
        flags = (x << 3) | 1
        return f"{(first_byte << 24) | (flags << 20) | (target & 0xFFFFF):08X}"
