"""
SIC/XE Assembler Command-Line Interface
=======================================

- **sicasm**: assemble a SIC/XE source file, print or write the listing
  and symbol table, report diagnostics

The tool is a Click application with help text and exit codes shared
through cli.errors.
"""

__all__ = ["sicasm"]
