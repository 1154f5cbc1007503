"""
SIC/XE Two-Pass Assembler
=========================

This package turns SIC/XE assembly source into a symbol table, an
address-annotated intermediate listing and per-line object code.

Main Components
---------------
- **Assembler**: Facade that runs the whole pipeline
- **read_source**: Splits source text into ParsedStatement records
- **Pass1Engine**: Location counter, symbol table, format classification
- **Pass2Engine**: Object code synthesis and displacement resolution
- **opcodes**: Operation table, directives, registers, classifier
- **numbers**: Numeric literal parsing shared by both passes

Assembly Process
----------------
1. **Reading**: one ParsedStatement per physical line, with front-end
   diagnostics for malformed lines
2. **Pass 1**: addresses, symbols, formats, addressing modes,
   undefined-symbol check at END
3. **Pass 2**: object code for formats 1-4, BYTE and WORD; PC-relative
   first, BASE-relative second

Neither pass stops on an error. Every problem becomes a Diagnostic and
the offending line gets a '?' placeholder instead of object code.

Example Usage
-------------
>>> from sicxe_asm.assembler import Assembler
>>> asm = Assembler()
>>> lines = asm.assemble_string("COPY START 0\\nFIRST FIX\\n     END FIRST\\n")
>>> lines[1].object_code
'C4'
"""

from sicxe_asm.assembler.assembler import Assembler, assemble, assemble_file
from sicxe_asm.assembler.opcodes import (
    AddressingMode,
    Classification,
    InstructionFormat,
    OpcodeInfo,
    classify,
    get_opcode_info,
    get_register_number,
)
from sicxe_asm.assembler.numbers import byte_length, parse_number, try_parse_number
from sicxe_asm.assembler.pass1 import Pass1Engine, Pass1Phase, Pass1Result, Pass1State
from sicxe_asm.assembler.pass2 import Pass2Engine, Pass2Result
from sicxe_asm.assembler.source import fallback_fields, parse_line, read_source
from sicxe_asm.assembler.statements import (
    IntermediateLine,
    ObjectCodeLine,
    ParsedStatement,
    ProgramMetadata,
)
from sicxe_asm.assembler.symbols import Symbol, SymbolTable

__all__ = [
    "Assembler",
    "assemble",
    "assemble_file",
    "AddressingMode",
    "Classification",
    "InstructionFormat",
    "OpcodeInfo",
    "classify",
    "get_opcode_info",
    "get_register_number",
    "byte_length",
    "parse_number",
    "try_parse_number",
    "Pass1Engine",
    "Pass1Phase",
    "Pass1Result",
    "Pass1State",
    "Pass2Engine",
    "Pass2Result",
    "fallback_fields",
    "parse_line",
    "read_source",
    "IntermediateLine",
    "ObjectCodeLine",
    "ParsedStatement",
    "ProgramMetadata",
    "Symbol",
    "SymbolTable",
]
