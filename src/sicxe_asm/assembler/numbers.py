"""
Numeric Literal Parsing
=======================

Turns operand text into integers and byte counts. Both passes use these
helpers, so an operand is always read the same way.

Supported Formats
-----------------
- Decimal:          4096, -12
- Hex with suffix:  0FFFH, 1000h   (must start with a decimal digit)
- Hex with prefix:  0x1F
- Hex constant:     X'1F'

A leading '#', '@' or '=' prefix is ignored. Anything else is not a
number; the caller decides whether it is a symbol.
"""

import re
from typing import Optional


# Characters that mark an addressing mode or literal, not part of the value
OPERAND_PREFIXES = "#@="

_DECIMAL_RE = re.compile(r"^[+-]?\d+$")
_HEX_DIGITS_RE = re.compile(r"^[0-9A-Fa-f]+$")
_HEX_SUFFIX_RE = re.compile(r"^(\d[0-9A-Fa-f]*)[Hh]$")


# =============================================================================
# Integer Parsing
# =============================================================================

def try_parse_number(text: Optional[str], default_radix: int = 10) -> Optional[int]:
    """
    Parse operand text as an integer.

    Args:
        text: Operand text, prefixes allowed
        default_radix: Radix for bare digit strings (10, or 16 for START)

    Returns:
        The value, or None if the text is not a number
    """
    if text is None:
        return None
    value = text.strip().lstrip(OPERAND_PREFIXES).strip()
    if not value:
        return None

    match = _HEX_SUFFIX_RE.match(value)
    if match:
        return int(match.group(1), 16)

    if value[:2].lower() == "0x":
        digits = value[2:]
        return int(digits, 16) if _HEX_DIGITS_RE.match(digits) else None

    if value[:2].upper() == "X'" and value.endswith("'") and len(value) > 3:
        digits = value[2:-1]
        return int(digits, 16) if _HEX_DIGITS_RE.match(digits) else None

    if default_radix == 16:
        return int(value, 16) if _HEX_DIGITS_RE.match(value) else None

    if _DECIMAL_RE.match(value):
        return int(value)

    return None


def parse_number(text: Optional[str], default_radix: int = 10) -> int:
    """Parse operand text as an integer, yielding 0 when it is not a number."""
    value = try_parse_number(text, default_radix)
    return 0 if value is None else value


def is_number(text: Optional[str]) -> bool:
    """Check whether operand text is a numeric literal."""
    return try_parse_number(text) is not None


# =============================================================================
# Byte Constants
# =============================================================================

def is_char_constant(text: str) -> bool:
    """Check for a C'...' constant."""
    text = text.strip()
    return len(text) >= 3 and text[:2].upper() == "C'" and text.endswith("'")


def is_hex_constant(text: str) -> bool:
    """Check for an X'...' constant (digits are not validated)."""
    text = text.strip()
    return len(text) >= 3 and text[:2].upper() == "X'" and text.endswith("'")


def constant_body(text: str) -> str:
    """Return the text between the quotes of a C'..' or X'..' constant."""
    text = text.strip()
    return text[2:-1]


def byte_length(operand: Optional[str]) -> int:
    """
    Number of bytes a BYTE directive reserves for its operand.

    C'text' reserves one byte per character, X'hex' one byte per two
    digits (rounded up). Any other operand, including an empty one,
    reserves a single byte.
    """
    if not operand:
        return 1
    if is_char_constant(operand):
        return len(constant_body(operand))
    if is_hex_constant(operand):
        return (len(constant_body(operand)) + 1) // 2
    return 1


def is_valid_hex(digits: str) -> bool:
    """Check that a string is made of hexadecimal digits only."""
    return bool(_HEX_DIGITS_RE.match(digits))
