"""
Assembler Configuration
=======================

Settings that change how a program is laid out, independent of the
source text. Defaults match the classic SIC/XE conventions.

Environment variables (all optional):
    SICXE_PROGRAM_NAME: Program name used when START has no label
    SICXE_START_RADIX: Radix of the START operand (10 or 16)
    SICXE_DEFINE_START_LABEL: Insert the START label as a symbol (1/true/yes)

Usage:
    from sicxe_asm.config import AssemblerConfig

    config = AssemblerConfig.from_env()
    asm = Assembler(config=config)
"""

import os
from dataclasses import dataclass


@dataclass
class AssemblerConfig:
    """
    Layout options for one assembly run.

    Attributes:
        default_program_name: Name used when START has no label
        start_radix: Radix used to read the START operand
        define_start_label: Whether the START label becomes a symbol
        placeholder_char: Fill character for the object code of a failed line
        source_name: Name shown in error locations for string input
    """
    default_program_name: str = "NONAME"
    start_radix: int = 16
    define_start_label: bool = False
    placeholder_char: str = "?"
    source_name: str = "<input>"

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create an AssemblerConfig from SICXE_* environment variables.

        Invalid values are ignored and leave the default in place.
        """
        config = cls()

        if name := os.environ.get("SICXE_PROGRAM_NAME"):
            config.default_program_name = name

        if radix := os.environ.get("SICXE_START_RADIX"):
            if radix in ("10", "16"):
                config.start_radix = int(radix)

        if flag := os.environ.get("SICXE_DEFINE_START_LABEL"):
            config.define_start_label = flag.strip().lower() in ("1", "true", "yes")

        return config
