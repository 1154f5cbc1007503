"""
Symbol Table
============

Case-insensitive mapping from label to address, built by Pass 1 and read
by Pass 2. A name is defined at most once; a second definition is
refused and the first entry is kept.

The table also records which source lines reference each name, so Pass 1
can report every undefined reference when it reaches END.
"""

from dataclasses import dataclass
from typing import Iterator, Optional


@dataclass(frozen=True)
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Symbol name as first written
        value: Address (or EQU value)
        line: Source line of the definition
        is_constant: True for EQU-defined symbols
    """
    name: str
    value: int
    line: int
    is_constant: bool = False


class SymbolTable:
    """
    Case-insensitive symbol table with reference tracking.

    Example:
        table = SymbolTable()
        table.define("FIRST", 0x1000, line=2)
        table.lookup("first")   # -> 0x1000
    """

    def __init__(self):
        self._symbols: dict[str, Symbol] = {}
        self._references: dict[str, list[int]] = {}
        self._reference_names: dict[str, str] = {}

    @staticmethod
    def _key(name: str) -> str:
        return name.strip().upper()

    # -------------------------------------------------------------------------
    # Definitions
    # -------------------------------------------------------------------------

    def define(self, name: str, value: int, line: int, is_constant: bool = False) -> bool:
        """
        Insert a symbol unless the name is already defined.

        Returns:
            True if inserted, False if the name was already present
        """
        key = self._key(name)
        if key in self._symbols:
            return False
        self._symbols[key] = Symbol(name.strip(), value, line, is_constant)
        return True

    def get(self, name: str) -> Optional[Symbol]:
        """Return the Symbol entry for a name, or None."""
        return self._symbols.get(self._key(name))

    def lookup(self, name: str) -> Optional[int]:
        """Return the value of a symbol, or None if it is not defined."""
        symbol = self.get(name)
        return symbol.value if symbol else None

    def __contains__(self, name: str) -> bool:
        return self._key(name) in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols.values())

    def items(self) -> list[tuple[str, int]]:
        """(name, value) pairs in definition order."""
        return [(sym.name, sym.value) for sym in self._symbols.values()]

    def as_dict(self) -> dict[str, int]:
        """Plain dict copy keyed by upper-case name."""
        return {key: sym.value for key, sym in self._symbols.items()}

    # -------------------------------------------------------------------------
    # References
    # -------------------------------------------------------------------------

    def add_reference(self, name: str, line: int) -> None:
        """Record that a source line references a name."""
        key = self._key(name)
        self._reference_names.setdefault(key, name.strip())
        lines = self._references.setdefault(key, [])
        if line not in lines:
            lines.append(line)

    def references(self, name: str) -> list[int]:
        """Source lines that reference a name."""
        return list(self._references.get(self._key(name), []))

    def undefined_references(self) -> list[tuple[str, int]]:
        """
        (name, line) pairs for every referenced name that is not defined.

        Ordered by line, then by first appearance of the name.
        """
        missing = [
            (self._reference_names[key], line)
            for key, lines in self._references.items()
            if key not in self._symbols
            for line in lines
        ]
        missing.sort(key=lambda item: item[1])
        return missing
