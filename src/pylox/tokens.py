"""
Token types for the pylox scanner.

Token type categories follow the error code ranges used in diagnostics:
- E0xx: Lexical errors (carried as error tokens)
- E1xx: Syntax errors
- E2xx: Runtime errors
- E3xx: Unsupported constructs
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any


class TokenType(Enum):
    """All token types recognized by the scanner."""

    # --- Single-character tokens ---
    LEFT_PAREN = auto()         # (
    RIGHT_PAREN = auto()        # )
    LEFT_BRACE = auto()         # {
    RIGHT_BRACE = auto()        # }
    COMMA = auto()              # ,
    DOT = auto()                # .
    MINUS = auto()              # -
    PLUS = auto()               # +
    SEMICOLON = auto()          # ;
    SLASH = auto()              # /
    STAR = auto()               # *

    # --- One or two character tokens ---
    BANG = auto()               # !
    BANG_EQUAL = auto()         # !=
    EQUAL = auto()              # =
    EQUAL_EQUAL = auto()        # ==
    GREATER = auto()            # >
    GREATER_EQUAL = auto()      # >=
    LESS = auto()               # <
    LESS_EQUAL = auto()         # <=

    # --- Literals ---
    IDENTIFIER = auto()         # user-defined names
    STRING = auto()             # "hello"
    NUMBER = auto()             # 42, 3.14

    # --- Keywords ---
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FOR = auto()
    FUN = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()

    # --- Special ---
    EOF = auto()                # end of input

    # --- Lexical errors ---
    UNEXPECTED_CHARACTER = auto()
    UNTERMINATED_STRING = auto()

    @property
    def is_error(self) -> bool:
        """True for the token types that carry a lexical error."""
        return self in LEXICAL_ERRORS


@dataclass(frozen=True)
class Token:
    """A single token from the scanner."""
    type: TokenType
    lexeme: str             # The original source text
    line: int               # 1-indexed line number
    value: Any = None       # Decoded literal (float for numbers, text for strings)
    column: int = 1         # 1-indexed column, for diagnostics only

    def __str__(self) -> str:
        if self.type in (TokenType.NUMBER, TokenType.STRING, TokenType.IDENTIFIER):
            return f"{self.type.name}({self.value!r})"
        if self.type.is_error:
            return f"{self.type.name}({self.lexeme!r})"
        return self.type.name


# Keyword mapping - maps source text to token type
KEYWORDS: dict[str, TokenType] = {
    "and": TokenType.AND,
    "class": TokenType.CLASS,
    "else": TokenType.ELSE,
    "false": TokenType.FALSE,
    "for": TokenType.FOR,
    "fun": TokenType.FUN,
    "if": TokenType.IF,
    "nil": TokenType.NIL,
    "or": TokenType.OR,
    "print": TokenType.PRINT,
    "return": TokenType.RETURN,
    "super": TokenType.SUPER,
    "this": TokenType.THIS,
    "true": TokenType.TRUE,
    "var": TokenType.VAR,
    "while": TokenType.WHILE,
}


# Token types the scanner emits for malformed input
LEXICAL_ERRORS: frozenset = frozenset({
    TokenType.UNEXPECTED_CHARACTER,
    TokenType.UNTERMINATED_STRING,
})


# Tokens that begin a declaration or statement (parser synchronization points)
STATEMENT_STARTS: frozenset = frozenset({
    TokenType.CLASS,
    TokenType.FUN,
    TokenType.VAR,
    TokenType.FOR,
    TokenType.IF,
    TokenType.WHILE,
    TokenType.PRINT,
    TokenType.RETURN,
})


def is_keyword(text: str) -> bool:
    """Check if a piece of source text is a reserved word."""
    return text in KEYWORDS
