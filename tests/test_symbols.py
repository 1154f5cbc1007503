# =============================================================================
# test_symbols.py - Symbol Table Tests
# =============================================================================
# Tests for case-insensitive definition, lookup and reference tracking.
# =============================================================================

from sicxe_asm.assembler.symbols import SymbolTable


class TestSymbolTable:
    """Test symbol definition and lookup."""

    def test_define_and_lookup(self):
        """Defined symbols are found in any case."""
        table = SymbolTable()
        assert table.define("First", 0x1000, line=2)
        assert table.lookup("FIRST") == 0x1000
        assert "first" in table
        assert table.get("first").name == "First"

    def test_redefinition_refused(self):
        """The first definition is kept."""
        table = SymbolTable()
        table.define("LOOP", 3, line=1)
        assert not table.define("loop", 9, line=5)
        assert table.lookup("LOOP") == 3
        assert table.get("LOOP").line == 1

    def test_missing_symbol(self):
        """Unknown names look up as None."""
        assert SymbolTable().lookup("NOPE") is None

    def test_items_in_definition_order(self):
        """items() keeps the order symbols were defined."""
        table = SymbolTable()
        table.define("B", 2, line=1)
        table.define("A", 1, line=2)
        assert table.items() == [("B", 2), ("A", 1)]
        assert table.as_dict() == {"B": 2, "A": 1}
        assert len(table) == 2


class TestReferences:
    """Test reference tracking."""

    def test_references_recorded_once_per_line(self):
        """A line is recorded once even if it repeats the name."""
        table = SymbolTable()
        table.add_reference("BUF", 4)
        table.add_reference("buf", 4)
        table.add_reference("BUF", 9)
        assert table.references("BUF") == [4, 9]

    def test_undefined_references(self):
        """Only names missing from the table are reported, by line."""
        table = SymbolTable()
        table.add_reference("LATE", 7)
        table.add_reference("GONE", 3)
        table.add_reference("HERE", 1)
        table.define("HERE", 0, line=5)
        assert table.undefined_references() == [("GONE", 3), ("LATE", 7)]
