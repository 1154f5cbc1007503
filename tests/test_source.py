# =============================================================================
# test_source.py - Source Reader Tests
# =============================================================================
# Tests for splitting source lines into label / operation / operand /
# comment fields, and for the fallback splitter used on rejected lines.
#
# Test coverage includes:
#   - Column-1 label rule
#   - Comment delimiters (., ;, //)
#   - Quoted constants containing spaces
#   - Lexical and syntactic front-end diagnostics
# =============================================================================

from sicxe_asm.assembler.source import fallback_fields, parse_line, read_source
from sicxe_asm.errors import ErrorKind


# =============================================================================
# Field Splitting Tests
# =============================================================================

class TestParseLine:
    """Test splitting of well-formed lines."""

    def test_label_operation_operand(self):
        """A column-1 token is the label."""
        stmt = parse_line("FIRST   LDA     #5", 2)
        assert stmt.line_number == 2
        assert stmt.label == "FIRST"
        assert stmt.operation == "LDA"
        assert stmt.operand == "#5"
        assert not stmt.has_errors

    def test_indented_line_has_no_label(self):
        """Leading whitespace means no label."""
        stmt = parse_line("        STA     RESULT", 3)
        assert stmt.label is None
        assert stmt.operation == "STA"
        assert stmt.operand == "RESULT"

    def test_spaced_index_operand(self):
        """'BUFFER, X' is rejoined into one operand."""
        stmt = parse_line("        LDCH    BUFFER, X", 1)
        assert stmt.operand == "BUFFER,X"

    def test_quoted_constant_with_spaces(self):
        """Spaces inside C'..' stay in the operand."""
        stmt = parse_line("MSG     BYTE    C'E O F'", 1)
        assert stmt.label == "MSG"
        assert stmt.operand == "C'E O F'"

    def test_format4_marker(self):
        """'+' stays on the operation and sets extended."""
        stmt = parse_line("        +JSUB   RDREC", 1)
        assert stmt.operation == "+JSUB"
        assert stmt.extended
        assert stmt.mnemonic == "JSUB"

    def test_lone_mnemonic_in_column_one(self):
        """A mnemonic alone in column 1 is the operation."""
        stmt = parse_line("RSUB", 1)
        assert stmt.label is None
        assert stmt.operation == "RSUB"

    def test_format1_keeps_operand(self):
        """A stray operand on a format 1 instruction is kept for Pass 1."""
        stmt = parse_line("        FIX     5", 1)
        assert stmt.operand == "5"


# =============================================================================
# Comment Tests
# =============================================================================

class TestComments:
    """Test comment recognition."""

    def test_full_line_comment(self):
        """A line starting with '.' is a comment line."""
        stmt = parse_line(". whole line comment", 1)
        assert stmt.is_comment_only
        assert stmt.comment == "whole line comment"

    def test_bare_dot_is_comment_line(self):
        """A lone '.' is an empty comment line, not a blank line."""
        stmt = parse_line(".", 1)
        assert stmt.is_comment_only
        assert not stmt.is_blank

    def test_semicolon_comment(self):
        """';' starts a trailing comment."""
        stmt = parse_line("        LDA     ALPHA   ; load it", 1)
        assert stmt.operand == "ALPHA"
        assert stmt.comment == "load it"

    def test_dot_comment_after_operand(self):
        """'.' after whitespace starts a trailing comment."""
        stmt = parse_line("        LDA     ALPHA   . load it", 1)
        assert stmt.operand == "ALPHA"
        assert stmt.comment == "load it"

    def test_double_slash_comment(self):
        """'//' starts a trailing comment."""
        stmt = parse_line("        LDA     ALPHA   // load it", 1)
        assert stmt.comment == "load it"

    def test_semicolon_inside_quotes(self):
        """Comment markers inside quotes are data."""
        stmt = parse_line("SEP     BYTE    C';'", 1)
        assert stmt.operand == "C';'"
        assert stmt.comment is None

    def test_rsub_trailing_text_is_comment(self):
        """RSUB takes no operand, so trailing words are a comment."""
        stmt = parse_line("        RSUB    return to caller", 1)
        assert stmt.operand is None
        assert stmt.comment == "return to caller"

    def test_blank_line(self):
        """Whitespace-only lines are blank."""
        assert parse_line("    ", 4).is_blank


# =============================================================================
# Front-End Diagnostic Tests
# =============================================================================

class TestDiagnostics:
    """Test front-end error detection."""

    def test_unterminated_quote_is_lexical(self):
        """An open quote is a lexical error."""
        stmt = parse_line("EOF     BYTE    C'EOF", 5)
        assert stmt.has_errors
        diag = stmt.diagnostics[0]
        assert diag.kind == ErrorKind.LEXICAL
        assert diag.line == 5
        assert "unterminated" in diag.message

    def test_bad_label_is_syntactic(self):
        """Labels must start with a letter."""
        stmt = parse_line("1ABC    LDA     #5", 1)
        assert stmt.diagnostics[0].kind == ErrorKind.SYNTACTIC
        assert stmt.diagnostics[0].column == 1
        assert "invalid label" in stmt.diagnostics[0].message

    def test_bad_operation_is_syntactic(self):
        """Operations must be alphabetic."""
        stmt = parse_line("        LD*A    #5", 1)
        assert stmt.diagnostics[0].kind == ErrorKind.SYNTACTIC
        assert stmt.diagnostics[0].column == 9

    def test_label_without_operation(self):
        """A label alone is missing its operation."""
        stmt = parse_line("ALONE", 1)
        assert stmt.label == "ALONE"
        assert stmt.diagnostics[0].message == "missing operation"


# =============================================================================
# Whole Source and Fallback Tests
# =============================================================================

class TestReadSource:
    """Test multi-line reading and the fallback splitter."""

    def test_one_statement_per_line(self):
        """Blank lines are kept so numbering stays aligned."""
        statements = read_source("A   LDA #1\n\n    RSUB\n")
        assert [s.line_number for s in statements] == [1, 2, 3]
        assert statements[1].is_blank

    def test_fallback_with_label(self):
        """Fallback splits on whitespace and drops comments."""
        assert fallback_fields("1ABC  LDA  #5 . note") == ("1ABC", "LDA", "#5")

    def test_fallback_without_label(self):
        """Leading whitespace leaves the label empty."""
        assert fallback_fields("   BYTE C'AB") == ("", "BYTE", "C'AB")

    def test_fallback_semicolon(self):
        """';' comments are dropped by the fallback splitter."""
        assert fallback_fields("X  LD*A  ALPHA ; c") == ("X", "LD*A", "ALPHA")

    def test_fallback_empty(self):
        """An empty line gives empty fields."""
        assert fallback_fields("") == ("", "", "")
