"""
Exceptions and diagnostics for pylox.

Error code ranges:
- E0xx: Lexical errors
- E1xx: Syntax errors
- E2xx: Runtime errors
- E3xx: Unsupported constructs
"""

from dataclasses import dataclass, field
from typing import Optional, List
from .tokens import Token, TokenType


@dataclass
class Diagnostic:
    """A single diagnostic message anchored to a source line."""
    code: str                       # E001, E101, etc.
    message: str                    # Human-readable message
    line: int                       # 1-indexed source line
    column: int = 1
    where: str = ""                 # " at 'x'", " at end" or ""
    source_line: Optional[str] = None   # The actual line of source code
    hints: List[str] = field(default_factory=list)

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        parts = [f"[line {self.line}] Error{self.where}: {self.message}"]

        if not show_source:
            return parts[0]

        # Source line with caret
        if self.source_line is not None:
            parts.append(f"{self.line:>5} | {self.source_line}")
            parts.append(f"      | {' ' * (self.column - 1)}^")

        for hint in self.hints:
            parts.append(f"      = hint: {hint}")

        return "\n".join(parts)


class LoxError(Exception):
    """Base exception for pylox errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    @property
    def code(self) -> str:
        return self.diagnostic.code

    @property
    def line(self) -> int:
        return self.diagnostic.line

    def __str__(self) -> str:
        return self.diagnostic.format(show_source=False)


class ScanError(LoxError):
    """Lexical error (E0xx)."""
    pass


class ParseError(LoxError):
    """Syntax error (E1xx)."""
    pass


class LoxRuntimeError(LoxError):
    """Error raised while evaluating a statement (E2xx)."""

    def __init__(self, diagnostic: Diagnostic, token: Optional[Token] = None):
        super().__init__(diagnostic)
        self.token = token


class LoxTypeError(LoxRuntimeError):
    """An operator received operands of the wrong kind (E201)."""
    pass


class UndefinedVariableError(LoxRuntimeError):
    """A variable was read or assigned before being declared (E202)."""

    def __init__(self, diagnostic: Diagnostic, token: Optional[Token] = None):
        super().__init__(diagnostic, token)
        self.name = token.lexeme if token is not None else None


class NotImplementedConstructError(LoxError):
    """A reserved construct was reached by the interpreter (E301)."""

    def __init__(self, diagnostic: Diagnostic, construct: str):
        super().__init__(diagnostic)
        self.construct = construct


def token_location(token: Token) -> str:
    """Describe where a token sits, for the diagnostic header."""
    if token.type == TokenType.EOF:
        return " at end"
    return f" at '{token.lexeme}'"


# --- Lexical error codes ---

def error_unexpected_character(token: Token, source_line: str = None) -> ScanError:
    """E001: Unexpected character."""
    diag = Diagnostic(
        code="E001",
        message="Unexpected character.",
        line=token.line,
        column=token.column,
        source_line=source_line,
    )
    return ScanError(diag)


def error_unterminated_string(token: Token, source_line: str = None) -> ScanError:
    """E002: Unterminated string literal."""
    diag = Diagnostic(
        code="E002",
        message="Unterminated string.",
        line=token.line,
        column=token.column,
        source_line=source_line,
        hints=["string literals must be closed with a matching '\"'"],
    )
    return ScanError(diag)


LEXICAL_ERROR_FACTORIES = {
    TokenType.UNEXPECTED_CHARACTER: error_unexpected_character,
    TokenType.UNTERMINATED_STRING: error_unterminated_string,
}


def error_from_token(token: Token, source_line: str = None) -> ScanError:
    """Build the ScanError carried by an error-kind token."""
    return LEXICAL_ERROR_FACTORIES[token.type](token, source_line)


# --- Syntax error codes ---

def error_unexpected_token(token: Token, message: str, source_line: str = None) -> ParseError:
    """E101: A required token is missing."""
    diag = Diagnostic(
        code="E101",
        message=message,
        line=token.line,
        column=token.column,
        where=token_location(token),
        source_line=source_line,
    )
    return ParseError(diag)


def error_expect_expression(token: Token, source_line: str = None) -> ParseError:
    """E102: No primary expression matches the current token."""
    diag = Diagnostic(
        code="E102",
        message="Expect expression.",
        line=token.line,
        column=token.column,
        where=token_location(token),
        source_line=source_line,
    )
    return ParseError(diag)


def error_invalid_assignment_target(token: Token, source_line: str = None) -> ParseError:
    """E103: Left-hand side of '=' cannot be assigned to."""
    diag = Diagnostic(
        code="E103",
        message="Invalid assignment target.",
        line=token.line,
        column=token.column,
        where=token_location(token),
        source_line=source_line,
    )
    return ParseError(diag)


def error_nested_too_deeply(token: Token, source_line: str = None) -> ParseError:
    """E104: Nesting exceeds what the parser can descend into."""
    diag = Diagnostic(
        code="E104",
        message="Expression nested too deeply.",
        line=token.line,
        column=token.column,
        where=token_location(token),
        source_line=source_line,
    )
    return ParseError(diag)


# --- Runtime error codes ---

def error_operand_type(token: Token, message: str) -> LoxTypeError:
    """E201: Operand kind not accepted by the operator."""
    diag = Diagnostic(
        code="E201",
        message=message,
        line=token.line,
        column=token.column,
    )
    return LoxTypeError(diag, token)


def error_undefined_variable(token: Token) -> UndefinedVariableError:
    """E202: Undefined variable."""
    diag = Diagnostic(
        code="E202",
        message=f"Undefined variable '{token.lexeme}'.",
        line=token.line,
        column=token.column,
    )
    return UndefinedVariableError(diag, token)


def error_evaluation_too_deep(line: int) -> LoxRuntimeError:
    """E203: Nesting exceeds what the interpreter can evaluate."""
    diag = Diagnostic(
        code="E203",
        message="Expression nested too deeply.",
        line=line,
    )
    return LoxRuntimeError(diag)


# --- Unsupported construct codes ---

def error_not_implemented(construct: str, line: int) -> NotImplementedConstructError:
    """E301: Construct is parsed but cannot be evaluated yet."""
    diag = Diagnostic(
        code="E301",
        message=f"Not implemented: {construct}.",
        line=line,
    )
    return NotImplementedConstructError(diag, construct)


class DiagnosticCollector:
    """Collects diagnostics during scanning and parsing."""

    def __init__(self, max_errors: int = 20):
        self.diagnostics: List[Diagnostic] = []
        self.max_errors = max_errors

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic."""
        self.diagnostics.append(diagnostic)

    def add_error(self, error: LoxError) -> None:
        """Add an error exception as a diagnostic."""
        self.add(error.diagnostic)

    @property
    def error_count(self) -> int:
        return len(self.diagnostics)

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    @property
    def should_stop(self) -> bool:
        """Check if we've hit the max error limit."""
        return self.error_count >= self.max_errors

    def format_all(self, show_source: bool = True) -> str:
        """Format all diagnostics for display."""
        parts = [d.format(show_source) for d in self.diagnostics]
        if self.has_errors:
            parts.append(f"{self.error_count} error(s)")
        return "\n".join(parts)
