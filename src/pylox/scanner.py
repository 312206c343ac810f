"""
Scanner for pylox.

Converts source text into a flat list of tokens for the parser in a single
forward pass. Supports:
- Single-line comments (//)
- String literals spanning multiple lines (no escape sequences)
- Number literals with an optional fractional part
- Identifiers and the reserved keywords
- One or two character operators with one character of lookahead

Malformed input never raises: an unexpected character or an unterminated
string becomes an error token in the stream and scanning carries on, so the
parser can surface the diagnostic in the statement where it occurs.
"""

import logging
from typing import List, Optional, Iterator

from .tokens import Token, TokenType, KEYWORDS
from .errors import DiagnosticCollector, error_from_token

logger = logging.getLogger(__name__)


SINGLE_CHAR_TOKENS = {
    '(': TokenType.LEFT_PAREN,
    ')': TokenType.RIGHT_PAREN,
    '{': TokenType.LEFT_BRACE,
    '}': TokenType.RIGHT_BRACE,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
    '-': TokenType.MINUS,
    '+': TokenType.PLUS,
    ';': TokenType.SEMICOLON,
    '/': TokenType.SLASH,
    '*': TokenType.STAR,
}

# First character -> (single form, form when followed by '=')
ONE_OR_TWO_CHAR_TOKENS = {
    '!': (TokenType.BANG, TokenType.BANG_EQUAL),
    '=': (TokenType.EQUAL, TokenType.EQUAL_EQUAL),
    '<': (TokenType.LESS, TokenType.LESS_EQUAL),
    '>': (TokenType.GREATER, TokenType.GREATER_EQUAL),
}


def _is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


def _is_alpha(ch: str) -> bool:
    return ('a' <= ch <= 'z') or ('A' <= ch <= 'Z') or ch == '_'


def _is_alphanumeric(ch: str) -> bool:
    return _is_alpha(ch) or _is_digit(ch)


class Scanner:
    """
    Single-pass tokenizer.

    Usage:
        scanner = Scanner(source_code)
        tokens = scanner.scan_tokens()

    Or for streaming:
        for token in Scanner(source_code):
            process(token)

    Lexical errors are recorded in `diagnostics` as they are found, in
    addition to being emitted as error tokens.
    """

    def __init__(self, source: str):
        self.source = source
        self.start = 0          # Offset of the token being scanned
        self.pos = 0            # Current position in source
        self.line = 1           # Current line (1-indexed)
        self.line_start = 0     # Position of current line start
        self.start_line = 1
        self.start_column = 1
        self._lines: Optional[List[str]] = None
        self.diagnostics = DiagnosticCollector()

    @property
    def lines(self) -> List[str]:
        """Lazy-load line list for error reporting."""
        if self._lines is None:
            self._lines = self.source.splitlines()
        return self._lines

    def get_source_line(self, line_num: int) -> Optional[str]:
        """Get a specific line of source (1-indexed)."""
        if 1 <= line_num <= len(self.lines):
            return self.lines[line_num - 1]
        return None

    def _peek(self, offset: int = 0) -> str:
        """Look at character at current position + offset without consuming."""
        idx = self.pos + offset
        if idx >= len(self.source):
            return '\0'
        return self.source[idx]

    def _advance(self) -> str:
        """Consume and return current character."""
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.line_start = self.pos
        return ch

    def _match(self, expected: str) -> bool:
        """Consume character if it matches expected."""
        if not self._is_at_end() and self._peek() == expected:
            self._advance()
            return True
        return False

    def _is_at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _skip_whitespace(self) -> None:
        """Skip blanks, newlines and // comments."""
        while not self._is_at_end():
            ch = self._peek()
            if ch in ' \r\t\n':
                self._advance()
            elif ch == '/' and self._peek(1) == '/':
                while not self._is_at_end() and self._peek() != '\n':
                    self._advance()
            else:
                return

    def _make_token(self, token_type: TokenType, value=None) -> Token:
        """Create a token spanning from the recorded start to the current position."""
        lexeme = self.source[self.start:self.pos]
        return Token(token_type, lexeme, self.start_line, value, self.start_column)

    def _error_token(self, token_type: TokenType) -> Token:
        """Create an error token and record its diagnostic."""
        token = self._make_token(token_type)
        error = error_from_token(token, self.get_source_line(token.line))
        self.diagnostics.add_error(error)
        logger.debug("lexical error %s on line %d", token_type.name, token.line)
        return token

    def _scan_string(self) -> Token:
        """Scan a string literal; the opening quote is already consumed."""
        while not self._is_at_end() and self._peek() != '"':
            self._advance()

        if self._is_at_end():
            return self._error_token(TokenType.UNTERMINATED_STRING)

        self._advance()  # consume closing quote
        value = self.source[self.start + 1:self.pos - 1]
        return self._make_token(TokenType.STRING, value)

    def _scan_number(self) -> Token:
        """Scan a number literal; the first digit is already consumed."""
        while _is_digit(self._peek()):
            self._advance()

        # A '.' only belongs to the number when a digit follows it
        if self._peek() == '.' and _is_digit(self._peek(1)):
            self._advance()  # consume '.'
            while _is_digit(self._peek()):
                self._advance()

        lexeme = self.source[self.start:self.pos]
        return self._make_token(TokenType.NUMBER, float(lexeme))

    def _scan_identifier_or_keyword(self) -> Token:
        """Scan an identifier or keyword; the first character is already consumed."""
        while _is_alphanumeric(self._peek()):
            self._advance()

        lexeme = self.source[self.start:self.pos]
        token_type = KEYWORDS.get(lexeme)
        if token_type is not None:
            return self._make_token(token_type)
        return self._make_token(TokenType.IDENTIFIER, lexeme)

    def scan_token(self) -> Token:
        """Scan the next token, returning EOF once the source is exhausted."""
        self._skip_whitespace()
        self.start = self.pos
        self.start_line = self.line
        self.start_column = self.pos - self.line_start + 1

        if self._is_at_end():
            return self._make_token(TokenType.EOF)

        ch = self._advance()

        if _is_alpha(ch):
            return self._scan_identifier_or_keyword()
        if _is_digit(ch):
            return self._scan_number()
        if ch == '"':
            return self._scan_string()

        if ch in SINGLE_CHAR_TOKENS:
            return self._make_token(SINGLE_CHAR_TOKENS[ch])

        if ch in ONE_OR_TWO_CHAR_TOKENS:
            single, double = ONE_OR_TWO_CHAR_TOKENS[ch]
            return self._make_token(double if self._match('=') else single)

        return self._error_token(TokenType.UNEXPECTED_CHARACTER)

    def scan_tokens(self) -> List[Token]:
        """Scan the entire source, returning a list ending in exactly one EOF."""
        tokens = list(self)
        logger.debug("scanned %d token(s) over %d line(s)", len(tokens), self.line)
        return tokens

    def __iter__(self) -> Iterator[Token]:
        """Iterate over tokens."""
        while True:
            token = self.scan_token()
            yield token
            if token.type == TokenType.EOF:
                break


def scan(source: str) -> List[Token]:
    """
    Convenience function to scan source code.

    Args:
        source: The source code to scan

    Returns:
        List of tokens terminated by a single EOF token. Lexical errors
        appear in the list as UNEXPECTED_CHARACTER / UNTERMINATED_STRING
        tokens; this function never raises for malformed input.
    """
    return Scanner(source).scan_tokens()
