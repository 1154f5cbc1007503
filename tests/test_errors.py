# =============================================================================
# test_errors.py - Error Hierarchy, Diagnostics and Configuration Tests
# =============================================================================
# Tests for exception formatting, diagnostic records, the collector,
# report rendering, and AssemblerConfig environment overrides.
# =============================================================================

import pytest

from sicxe_asm.config import AssemblerConfig
from sicxe_asm.errors import (
    AssemblerError,
    BaseNotDefinedError,
    Diagnostic,
    DiagnosticCollector,
    DisplacementRangeError,
    DuplicateSymbolError,
    ErrorKind,
    PassOrderError,
    SicxeError,
    SourceLocation,
    UndefinedSymbolError,
    format_report,
    merge_diagnostics,
)


# =============================================================================
# Exception Tests
# =============================================================================

class TestExceptions:
    """Test exception messages and hierarchy."""

    def test_location_in_message(self):
        """str() includes file, line and column."""
        error = UndefinedSymbolError("BUF", SourceLocation("prog.asm", 4, 9))
        assert str(error) == "prog.asm:4:9: error: symbol 'BUF' is not defined"
        assert error.message == "symbol 'BUF' is not defined"
        assert error.symbol == "BUF"

    def test_without_location(self):
        """Errors without a location start with 'error:'."""
        assert str(AssemblerError("bad")) == "error: bad"

    def test_hint_appended(self):
        """Hints follow on their own line."""
        error = DuplicateSymbolError("LOOP", SourceLocation("p.asm", 7), original_line=3)
        assert str(error).splitlines() == [
            "p.asm:7:0: error: duplicate symbol 'LOOP'",
            "hint: 'LOOP' was first defined on line 3",
        ]

    def test_displacement_message(self):
        """Range errors name both displacements."""
        error = DisplacementRangeError(0x1003, 4096, 4096)
        assert error.message == (
            "displacement out of range for target 1003H "
            "(PC-relative 4096, BASE-relative 4096)"
        )

    def test_base_not_defined_message(self):
        """The BASE error includes the failed PC displacement."""
        assert BaseNotDefinedError(2048).message == (
            "PC-relative displacement 2048 out of range and BASE not defined"
        )

    def test_hierarchy(self):
        """All errors share the SicxeError base."""
        assert issubclass(AssemblerError, SicxeError)
        assert issubclass(PassOrderError, SicxeError)
        assert not issubclass(PassOrderError, AssemblerError)

    def test_default_kind(self):
        """Assembler errors are semantic unless stated otherwise."""
        assert AssemblerError("x").kind == ErrorKind.SEMANTIC
        assert str(ErrorKind.LEXICAL) == "lexical"


# =============================================================================
# Diagnostic Tests
# =============================================================================

class TestDiagnostics:
    """Test diagnostic records and merging."""

    def test_from_error(self):
        """A diagnostic copies message, kind and column."""
        error = AssemblerError("bad", SourceLocation("p", 2, 5), kind=ErrorKind.SYNTACTIC)
        diag = Diagnostic.from_error(error, 2)
        assert diag == Diagnostic(2, 5, "bad", ErrorKind.SYNTACTIC)
        assert str(diag) == "line 2:5: syntactic error: bad"

    def test_merge_removes_duplicates(self):
        """Same line and message appear once."""
        first = [Diagnostic(3, 0, "symbol 'X' is not defined")]
        second = [Diagnostic(3, 0, "symbol 'X' is not defined")]
        assert merge_diagnostics(first, second) == first

    def test_merge_keeps_same_message_on_other_lines(self):
        """The same message on different lines is kept."""
        merged = merge_diagnostics([Diagnostic(3, 0, "m")], [Diagnostic(4, 0, "m")])
        assert len(merged) == 2

    def test_merge_orders_by_line_and_column(self):
        """The result is sorted by (line, column)."""
        merged = merge_diagnostics(
            [Diagnostic(5, 0, "c"), Diagnostic(2, 9, "b")],
            [Diagnostic(2, 1, "a")],
        )
        assert [d.message for d in merged] == ["a", "b", "c"]


class TestDiagnosticCollector:
    """Test the per-pass collector."""

    def test_collects_errors_and_warnings(self):
        """Errors and warnings are counted separately."""
        collector = DiagnosticCollector()
        diag = collector.add(AssemblerError("bad"), 7)
        collector.add_warning("careful")
        assert diag.line == 7
        assert collector.has_errors()
        assert collector.error_count() == 1
        assert collector.warning_count() == 1

    def test_report(self):
        """The report ends with a pluralized summary."""
        collector = DiagnosticCollector()
        collector.add(AssemblerError("one"), 1)
        collector.add(AssemblerError("two"), 2)
        report = collector.report()
        assert report.splitlines() == [
            "line 1:0: semantic error: one",
            "line 2:0: semantic error: two",
            "2 errors, 0 warnings",
        ]

    def test_clear(self):
        """clear() empties the collector."""
        collector = DiagnosticCollector()
        collector.add(AssemblerError("bad"), 1)
        collector.add_warning("w")
        collector.clear()
        assert not collector.has_errors()
        assert collector.warning_count() == 0

    def test_empty_report(self):
        """An empty report is just the summary."""
        assert format_report([], []) == "0 errors, 0 warnings"


# =============================================================================
# Configuration Tests
# =============================================================================

class TestAssemblerConfig:
    """Test configuration defaults and environment overrides."""

    def test_defaults(self):
        """Defaults follow the classic conventions."""
        config = AssemblerConfig()
        assert config.default_program_name == "NONAME"
        assert config.start_radix == 16
        assert not config.define_start_label
        assert config.placeholder_char == "?"

    def test_from_env(self, monkeypatch):
        """SICXE_* variables override the defaults."""
        monkeypatch.setenv("SICXE_PROGRAM_NAME", "DEMO")
        monkeypatch.setenv("SICXE_START_RADIX", "10")
        monkeypatch.setenv("SICXE_DEFINE_START_LABEL", "yes")
        config = AssemblerConfig.from_env()
        assert config.default_program_name == "DEMO"
        assert config.start_radix == 10
        assert config.define_start_label

    @pytest.mark.parametrize("radix", ["8", "hex", ""])
    def test_invalid_radix_ignored(self, monkeypatch, radix):
        """Unsupported radix values keep the default."""
        monkeypatch.delenv("SICXE_PROGRAM_NAME", raising=False)
        monkeypatch.setenv("SICXE_START_RADIX", radix)
        assert AssemblerConfig.from_env().start_radix == 16

    def test_false_flag(self, monkeypatch):
        """Anything but 1/true/yes disables the START label."""
        monkeypatch.setenv("SICXE_DEFINE_START_LABEL", "no")
        assert not AssemblerConfig.from_env().define_start_label
