"""
Source Reader
=============

A small front end that splits SIC/XE source text into ParsedStatement
records, one per physical line. It is deliberately simple: fixed field
order (label, operation, operand, comment), no expressions, no macros.

Line Layout
-----------
    LABEL   OPERATION   OPERAND     comment text
            OPERATION   OPERAND     . comment

- A label exists only when the line starts in column 1.
- Comments start with '.', ';' or '//' outside quotes. A '.' only counts
  when it opens the line or follows whitespace.
- Operands may contain quoted constants with spaces: C'HELLO WORLD'.
- For RSUB, NOBASE and LTORG, which never take an operand, any
  text after the operation is a comment.

Problems found here are attached to the statement as front-end
diagnostics: an unterminated quote is lexical, a malformed label or
operation field is syntactic. Pass 1 then recovers the fields of such
lines with fallback_fields().
"""

import re
from typing import Optional

from sicxe_asm.assembler.opcodes import (
    NO_OPERAND_MNEMONICS,
    is_directive,
    is_instruction,
)
from sicxe_asm.assembler.statements import ParsedStatement
from sicxe_asm.errors import Diagnostic, ErrorKind


_LABEL_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
_OPERATION_RE = re.compile(r"^\+?[A-Za-z]+$")


# =============================================================================
# Low-Level Scanning
# =============================================================================

def _find_comment(text: str) -> tuple[int, Optional[int]]:
    """
    Locate the start of a trailing comment.

    Returns:
        (comment_start, open_quote_column). comment_start is len(text)
        when there is no comment; open_quote_column is the 1-indexed
        column of an unterminated quote, or None.
    """
    in_quote = False
    quote_col = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "'":
            in_quote = not in_quote
            quote_col = i + 1
        elif not in_quote:
            if ch == ";":
                return i, None
            if ch == "/" and text[i:i + 2] == "//":
                return i, None
            if ch == "." and (i == 0 or text[i - 1].isspace()):
                return i, None
        i += 1
    return len(text), (quote_col if in_quote else None)


def _split_fields(code: str) -> list[tuple[str, int]]:
    """
    Split the code part of a line on whitespace outside quotes.

    Returns:
        (token, 1-indexed column) pairs
    """
    tokens: list[tuple[str, int]] = []
    current = ""
    start = 0
    in_quote = False
    for i, ch in enumerate(code):
        if ch == "'":
            in_quote = not in_quote
        if ch.isspace() and not in_quote:
            if current:
                tokens.append((current, start + 1))
                current = ""
            continue
        if not current:
            start = i
        current += ch
    if current:
        tokens.append((current, start + 1))
    return tokens


def _is_mnemonic(token: str) -> bool:
    return is_instruction(token) or is_directive(token)


def _join_operand(tokens: list[tuple[str, int]]) -> tuple[str, list[str]]:
    """
    Rebuild an operand written with spaces around commas ("BUF, X").

    Returns:
        (operand, leftover tokens treated as comment)
    """
    operand = tokens[0][0]
    rest = tokens[1:]
    while rest and (operand.endswith(",") or rest[0][0].startswith(",")):
        operand += rest[0][0]
        rest = rest[1:]
    return operand, [tok for tok, _ in rest]


# =============================================================================
# Public API
# =============================================================================

def parse_line(raw: str, line_number: int) -> ParsedStatement:
    """
    Split one physical line into a ParsedStatement.

    Args:
        raw: Line text without the newline
        line_number: 1-indexed source line number

    Returns:
        The statement, with front-end diagnostics when the line is malformed
    """
    text = raw.rstrip("\r\n")
    if not text.strip():
        return ParsedStatement(line_number, source_text=text)

    comment_at, open_quote = _find_comment(text)
    comment = text[comment_at:].lstrip(".;/").strip() if comment_at < len(text) else None
    code = text[:comment_at]

    if open_quote is not None:
        diag = Diagnostic(line_number, open_quote, "unterminated quoted constant", ErrorKind.LEXICAL)
        return ParsedStatement(line_number, comment=comment, source_text=text, diagnostics=(diag,))

    tokens = _split_fields(code)
    if not tokens:
        return ParsedStatement(line_number, comment=comment, source_text=text)

    label: Optional[str] = None
    label_col = 0
    if not code[0].isspace():
        # Column 1 holds a label unless a lone mnemonic sits there
        lone_mnemonic = _is_mnemonic(tokens[0][0]) and (
            len(tokens) == 1 or not _is_mnemonic(tokens[1][0])
        )
        if not lone_mnemonic:
            label, label_col = tokens[0]
            tokens = tokens[1:]

    diagnostics: list[Diagnostic] = []
    if label is not None and not _LABEL_RE.match(label):
        diagnostics.append(
            Diagnostic(line_number, label_col, f"invalid label '{label}'", ErrorKind.SYNTACTIC)
        )

    operation: Optional[str] = None
    operand: Optional[str] = None
    if not tokens:
        diagnostics.append(
            Diagnostic(line_number, label_col, "missing operation", ErrorKind.SYNTACTIC)
        )
    else:
        operation, op_col = tokens[0]
        tokens = tokens[1:]
        if not _OPERATION_RE.match(operation):
            diagnostics.append(
                Diagnostic(line_number, op_col, f"invalid operation '{operation}'", ErrorKind.SYNTACTIC)
            )

        extra: list[str] = []
        if tokens:
            if operation.lstrip("+").upper() in NO_OPERAND_MNEMONICS:
                extra = [tok for tok, _ in tokens]
            else:
                operand, extra = _join_operand(tokens)
        if extra:
            comment = " ".join(extra + ([comment] if comment else []))

    return ParsedStatement(
        line_number,
        label=label,
        operation=operation,
        operand=operand,
        comment=comment,
        source_text=text,
        diagnostics=tuple(diagnostics),
    )


def read_source(text: str) -> list[ParsedStatement]:
    """
    Split source text into statements, one per physical line.

    Blank and comment lines are included so line numbers stay aligned.
    """
    return [parse_line(raw, number) for number, raw in enumerate(text.splitlines(), start=1)]


def fallback_fields(raw_text: str) -> tuple[str, str, str]:
    """
    Recover label, operation and operand from a line the front end rejected.

    Comment text is dropped and the remainder is split on whitespace. A
    line that starts with whitespace has no label.

    Returns:
        (label, operation, operand), empty strings for missing fields
    """
    text = raw_text
    for marker in ("//", ";"):
        pos = text.find(marker)
        if pos >= 0:
            text = text[:pos]
    dot = re.search(r"(^|\s)\.", text)
    if dot:
        text = text[:dot.start()]

    parts = text.split()
    if not parts:
        return "", "", ""
    if text[:1].isspace():
        parts = [""] + parts
    parts += [""] * (3 - len(parts))
    return parts[0], parts[1], " ".join(parts[2:]).strip()
