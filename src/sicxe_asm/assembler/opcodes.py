"""
SIC/XE Instruction Set Definition
=================================

This module defines the SIC/XE operation table, the assembler directives,
the register names, and the classifier that decides instruction format and
addressing mode for a statement.

Instruction Formats
-------------------
1. **Format 1**: opcode only, 1 byte (e.g. FIX -> C4)
2. **Format 2**: opcode + two 4-bit register fields, 2 bytes
   (e.g. CLEAR X -> B410)
3. **Format 3**: 6-bit opcode, flags n i x b p e, 12-bit displacement,
   3 bytes (e.g. LDA #5 -> 010005)
4. **Format 4**: format 3 written with a leading '+'; e=1 and a 20-bit
   address, 4 bytes (e.g. +JSUB RDREC -> 4B101036)

Addressing Modes (format 3/4 only)
----------------------------------
- **IMMEDIATE**: #value        n=0 i=1
- **INDIRECT**:  @value        n=1 i=0
- **INDEXED**:   value,X       n=1 i=1 x=1
- **SIMPLE**:    value         n=1 i=1

All lookups are case-insensitive and report "not found" with None or
False rather than raising.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import Optional


# =============================================================================
# Format and Addressing Mode Enumerations
# =============================================================================

class InstructionFormat(IntEnum):
    """
    Instruction format of a statement.

    NONE covers directives, unknown mnemonics and comment lines, none of
    which have a machine format.
    """
    NONE = 0
    FORMAT1 = 1
    FORMAT2 = 2
    FORMAT3 = 3
    FORMAT4 = 4


class AddressingMode(Enum):
    """SIC/XE addressing modes for format 3/4 instructions."""
    NONE = auto()       # Not a format 3/4 instruction, or no operand
    IMMEDIATE = auto()  # #value
    INDIRECT = auto()   # @value
    INDEXED = auto()    # value,X
    SIMPLE = auto()     # value

    def __str__(self) -> str:
        """Return human-readable name for listings."""
        return {
            AddressingMode.NONE: "none",
            AddressingMode.IMMEDIATE: "immediate",
            AddressingMode.INDIRECT: "indirect",
            AddressingMode.INDEXED: "indexed",
            AddressingMode.SIMPLE: "simple",
        }[self]

    @property
    def nix(self) -> tuple[int, int, int]:
        """The (n, i, x) flag bits this mode encodes as."""
        return {
            AddressingMode.IMMEDIATE: (0, 1, 0),
            AddressingMode.INDIRECT: (1, 0, 0),
            AddressingMode.INDEXED: (1, 1, 1),
        }.get(self, (1, 1, 0))


# =============================================================================
# Operation Table
# =============================================================================

@dataclass(frozen=True)
class OpcodeInfo:
    """
    Catalog entry for one instruction mnemonic.

    Attributes:
        opcode: Opcode byte
        format: Base format (1, 2 or 3; format 4 is format 3 with '+')
    """
    opcode: int
    format: InstructionFormat

    def __repr__(self) -> str:
        return f"OpcodeInfo(opcode={self.opcode:02X}H, format={int(self.format)})"


_F1 = InstructionFormat.FORMAT1
_F2 = InstructionFormat.FORMAT2
_F3 = InstructionFormat.FORMAT3

OPCODE_TABLE: dict[str, OpcodeInfo] = {
    # =========================================================================
    # FORMAT 1 (opcode only)
    # =========================================================================
    "FIX": OpcodeInfo(0xC4, _F1),
    "FLOAT": OpcodeInfo(0xC0, _F1),
    "HIO": OpcodeInfo(0xF4, _F1),
    "NORM": OpcodeInfo(0xC8, _F1),
    "SIO": OpcodeInfo(0xF0, _F1),
    "TIO": OpcodeInfo(0xF8, _F1),

    # =========================================================================
    # FORMAT 2 (register operands)
    # =========================================================================
    "ADDR": OpcodeInfo(0x90, _F2),
    "CLEAR": OpcodeInfo(0xB4, _F2),
    "COMPR": OpcodeInfo(0xA0, _F2),
    "DIVR": OpcodeInfo(0x9C, _F2),
    "MULR": OpcodeInfo(0x98, _F2),
    "RMO": OpcodeInfo(0xAC, _F2),
    "SHIFTL": OpcodeInfo(0xA4, _F2),
    "SHIFTR": OpcodeInfo(0xA8, _F2),
    "SUBR": OpcodeInfo(0x94, _F2),
    "SVC": OpcodeInfo(0xB0, _F2),
    "TIXR": OpcodeInfo(0xB8, _F2),

    # =========================================================================
    # FORMAT 3/4 (memory reference)
    # =========================================================================
    "ADD": OpcodeInfo(0x18, _F3),
    "ADDF": OpcodeInfo(0x58, _F3),
    "AND": OpcodeInfo(0x40, _F3),
    "COMP": OpcodeInfo(0x28, _F3),
    "COMPF": OpcodeInfo(0x88, _F3),
    "DIV": OpcodeInfo(0x24, _F3),
    "DIVF": OpcodeInfo(0x64, _F3),
    "J": OpcodeInfo(0x3C, _F3),
    "JEQ": OpcodeInfo(0x30, _F3),
    "JGT": OpcodeInfo(0x34, _F3),
    "JLT": OpcodeInfo(0x38, _F3),
    "JSUB": OpcodeInfo(0x48, _F3),
    "LDA": OpcodeInfo(0x00, _F3),
    "LDB": OpcodeInfo(0x68, _F3),
    "LDCH": OpcodeInfo(0x50, _F3),
    "LDF": OpcodeInfo(0x70, _F3),
    "LDL": OpcodeInfo(0x08, _F3),
    "LDS": OpcodeInfo(0x6C, _F3),
    "LDT": OpcodeInfo(0x74, _F3),
    "LDX": OpcodeInfo(0x04, _F3),
    "LPS": OpcodeInfo(0xD0, _F3),
    "MUL": OpcodeInfo(0x20, _F3),
    "MULF": OpcodeInfo(0x60, _F3),
    "OR": OpcodeInfo(0x44, _F3),
    "RD": OpcodeInfo(0xD8, _F3),
    "RSUB": OpcodeInfo(0x4C, _F3),
    "SSK": OpcodeInfo(0xEC, _F3),
    "STA": OpcodeInfo(0x0C, _F3),
    "STB": OpcodeInfo(0x78, _F3),
    "STCH": OpcodeInfo(0x54, _F3),
    "STF": OpcodeInfo(0x80, _F3),
    "STI": OpcodeInfo(0xD4, _F3),
    "STL": OpcodeInfo(0x14, _F3),
    "STS": OpcodeInfo(0x7C, _F3),
    "STSW": OpcodeInfo(0xE8, _F3),
    "STT": OpcodeInfo(0x84, _F3),
    "STX": OpcodeInfo(0x10, _F3),
    "SUB": OpcodeInfo(0x1C, _F3),
    "SUBF": OpcodeInfo(0x5C, _F3),
    "TD": OpcodeInfo(0xE0, _F3),
    "TIX": OpcodeInfo(0x2C, _F3),
    "WD": OpcodeInfo(0xDC, _F3),
}


# =============================================================================
# Directives and Registers
# =============================================================================

DIRECTIVES: frozenset[str] = frozenset({
    "START", "END", "BYTE", "WORD", "RESB", "RESW",
    "BASE", "NOBASE", "LTORG", "EQU",
})

# Directives that reserve no storage
ZERO_SIZE_DIRECTIVES: frozenset[str] = frozenset({
    "START", "END", "BASE", "NOBASE", "LTORG", "EQU",
})

REGISTERS: dict[str, int] = {
    "A": 0,
    "X": 1,
    "L": 2,
    "B": 3,
    "S": 4,
    "T": 5,
    "F": 6,
    "PC": 8,
    "CP": 8,    # alternate spelling of PC
    "SW": 9,
}

# Format 2 instructions with a single register operand
SINGLE_REGISTER_INSTRUCTIONS: frozenset[str] = frozenset({"CLEAR", "TIXR"})

# Format 2 instructions with a register and a shift count
SHIFT_INSTRUCTIONS: frozenset[str] = frozenset({"SHIFTL", "SHIFTR"})

# Operand-less mnemonics whose trailing text the source reader treats as a
# comment. Format 1 is left out so a stray operand is still reported.
NO_OPERAND_MNEMONICS: frozenset[str] = frozenset({"RSUB", "NOBASE", "LTORG"})


# =============================================================================
# Lookup Functions
# =============================================================================

def get_opcode_info(mnemonic: str) -> Optional[OpcodeInfo]:
    """
    Look up an instruction by mnemonic.

    Args:
        mnemonic: Instruction mnemonic, with or without a '+' prefix

    Returns:
        OpcodeInfo if the mnemonic is an instruction, None otherwise
    """
    return OPCODE_TABLE.get(strip_extended(mnemonic).upper())


def is_instruction(mnemonic: str) -> bool:
    """Check whether a mnemonic is a known machine instruction."""
    return get_opcode_info(mnemonic) is not None


def is_directive(mnemonic: str) -> bool:
    """Check whether a mnemonic is an assembler directive."""
    return strip_extended(mnemonic).upper() in DIRECTIVES


def get_register_number(name: str) -> Optional[int]:
    """Return the register number for a register name, or None."""
    return REGISTERS.get(name.strip().upper())


def is_register(name: str) -> bool:
    """Check whether a name is a register name."""
    return get_register_number(name) is not None


def is_extended(mnemonic: str) -> bool:
    """Check whether a mnemonic carries the format-4 '+' marker."""
    return mnemonic.startswith("+")


def strip_extended(mnemonic: str) -> str:
    """Remove the format-4 '+' marker, if present."""
    return mnemonic[1:] if mnemonic.startswith("+") else mnemonic


# =============================================================================
# Format / Addressing Mode Classification
# =============================================================================

@dataclass(frozen=True)
class Classification:
    """Result of classifying one statement."""
    format: InstructionFormat
    mode: AddressingMode

    @property
    def size(self) -> int:
        """Instruction size in bytes (0 for non-instructions)."""
        return int(self.format)


def classify_mode(operand: Optional[str]) -> AddressingMode:
    """
    Decide the addressing mode of a format 3/4 operand.

    Args:
        operand: Operand text as written (prefixes included)

    Returns:
        The addressing mode, NONE for an empty operand
    """
    if not operand or not operand.strip():
        return AddressingMode.NONE
    text = operand.strip()
    if text.startswith("#"):
        return AddressingMode.IMMEDIATE
    if text.startswith("@"):
        return AddressingMode.INDIRECT
    parts = [p.strip() for p in text.split(",")]
    if len(parts) >= 2 and parts[-1].upper() == "X":
        return AddressingMode.INDEXED
    return AddressingMode.SIMPLE


def classify(mnemonic: Optional[str], extended: bool, operand: Optional[str]) -> Classification:
    """
    Classify a statement by format and addressing mode.

    Format 4 is only returned for a '+' on a format 3 mnemonic; a '+' on
    anything else keeps the base format and is rejected by Pass 1.

    Args:
        mnemonic: Operation mnemonic without the '+' marker
        extended: True when the statement carried a '+' marker
        operand: Operand text as written

    Returns:
        Classification(format, mode)
    """
    info = get_opcode_info(mnemonic) if mnemonic else None
    if info is None:
        return Classification(InstructionFormat.NONE, AddressingMode.NONE)

    if info.format != InstructionFormat.FORMAT3:
        return Classification(info.format, AddressingMode.NONE)

    fmt = InstructionFormat.FORMAT4 if extended else InstructionFormat.FORMAT3
    mode = classify_mode(operand)
    # RSUB has no operand but encodes as simple addressing (n=i=1)
    if mode == AddressingMode.NONE and strip_extended(mnemonic).upper() == "RSUB":
        mode = AddressingMode.SIMPLE
    return Classification(fmt, mode)
