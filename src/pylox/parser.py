"""
Recursive descent parser for pylox.

Converts a token list into a list of statements. A syntax error inside one
declaration is recorded and the parser resynchronizes at the next statement
boundary, so a single mistake does not hide errors later in the script.
"""

import logging
from typing import List, Optional, Tuple

from .tokens import Token, TokenType, STATEMENT_STARTS
from .ast import (
    # Expressions
    Expr, Literal, Grouping, Unary, Binary, Logical, Variable, Assign,
    Call, Get, Set, Super, This,
    # Statements
    Stmt, Expression, Print, Var, Block, If, While, Function, Class, Return,
)
from .errors import (
    LoxError,
    DiagnosticCollector,
    error_from_token,
    error_unexpected_token,
    error_expect_expression,
    error_invalid_assignment_target,
    error_nested_too_deeply,
)
from .runtime.values import number_val, string_val, TRUE, FALSE, NIL

logger = logging.getLogger(__name__)

MAX_ARGUMENTS = 255


class Parser:
    """
    Recursive descent parser.

    Usage:
        parser = Parser(tokens)
        statements, had_error = parser.parse()

    Binary operators are parsed by precedence climbing over the table below;
    every level is left-associative. Assignment sits below all of them and
    is right-associative.

        Lowest:  or
                 and
                 == !=
                 > >= < <=
                 + -
        Highest: * /
                 unary (! -)
    """

    # Operator precedence levels (higher = tighter binding)
    PRECEDENCE = {
        TokenType.OR: 1,
        TokenType.AND: 2,
        TokenType.EQUAL_EQUAL: 3,
        TokenType.BANG_EQUAL: 3,
        TokenType.GREATER: 4,
        TokenType.GREATER_EQUAL: 4,
        TokenType.LESS: 4,
        TokenType.LESS_EQUAL: 4,
        TokenType.PLUS: 5,
        TokenType.MINUS: 5,
        TokenType.STAR: 6,
        TokenType.SLASH: 6,
    }

    LOGICAL_OPERATORS = {TokenType.AND, TokenType.OR}

    def __init__(self, tokens: List[Token], source: Optional[str] = None,
                 max_errors: int = 20):
        if not tokens or tokens[-1].type != TokenType.EOF:
            line = tokens[-1].line if tokens else 1
            tokens = list(tokens) + [Token(TokenType.EOF, "", line)]
        self.tokens = tokens
        self.source_lines = source.splitlines() if source else []
        self.pos = 0
        self.diagnostics = DiagnosticCollector(max_errors)

    @property
    def had_error(self) -> bool:
        return self.diagnostics.has_errors

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        """Get current token; reading past the end keeps yielding EOF."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[self.pos]

    def _previous(self) -> Token:
        return self.tokens[max(0, self.pos - 1)]

    def _is_at_end(self) -> bool:
        return self._current().type == TokenType.EOF

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token is of given type."""
        return self._current().type == token_type

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._current()
        if not self._is_at_end():
            self.pos += 1
        return token

    def _match(self, *token_types: TokenType) -> Optional[Token]:
        """Consume token if it matches any of the given types."""
        if self._current().type in token_types:
            return self._advance()
        return None

    def _consume(self, token_type: TokenType, message: str) -> Token:
        """Consume token of expected type, or raise error."""
        if self._check(token_type):
            return self._advance()
        raise self._error(self._current(), message)

    # =========================================================================
    # Error Handling
    # =========================================================================

    def _source_line(self, line: int) -> Optional[str]:
        if 1 <= line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    def _error(self, token: Token, message: str) -> LoxError:
        """Build the error for `token`. Error tokens report their lexical error."""
        if token.type.is_error:
            return error_from_token(token, self._source_line(token.line))
        return error_unexpected_token(token, message, self._source_line(token.line))

    def _report(self, error: LoxError) -> None:
        """Record an error without unwinding."""
        if not self.diagnostics.should_stop:
            self.diagnostics.add_error(error)

    def _synchronize(self, start: int) -> None:
        """
        Discard tokens until the next statement boundary.

        Skips the offending token, then stops just past a ';' or just before
        a token that starts a statement. The offending token itself is kept
        when it starts a statement and the failed declaration already consumed
        something, so `print 1 var x = 2;` still parses the declaration.
        """
        if self.pos == start or self._current().type not in STATEMENT_STARTS:
            self._advance()
        while not self._is_at_end():
            if self._previous().type == TokenType.SEMICOLON and self.pos > start:
                return
            if self._current().type in STATEMENT_STARTS:
                return
            self._advance()

    # =========================================================================
    # Declaration Parsing
    # =========================================================================

    def _parse_declaration(self) -> Optional[Stmt]:
        """Parse one declaration, recovering from syntax errors."""
        start = self.pos
        try:
            if self._match(TokenType.CLASS):
                return self._parse_class_declaration()
            if self._match(TokenType.FUN):
                return self._parse_function("function")
            if self._match(TokenType.VAR):
                return self._parse_var_declaration()
            return self._parse_statement()
        except RecursionError:
            token = self._current()
            self._recover(error_nested_too_deeply(token, self._source_line(token.line)), start)
        except LoxError as e:
            self._recover(e, start)
        return None

    def _recover(self, error: LoxError, start: int) -> None:
        """Record a declaration's error and skip to the next statement."""
        self._report(error)
        self._synchronize(start)
        logger.debug("resynchronized at line %d after: %s", self._current().line, error.diagnostic.message)

    def _parse_var_declaration(self) -> Var:
        """var name (= initializer)? ;"""
        name = self._consume(TokenType.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self._match(TokenType.EQUAL):
            initializer = self._parse_expression()

        self._consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return Var(name=name, initializer=initializer)

    def _parse_function(self, kind: str) -> Function:
        """Parse name(params) { body }. The leading keyword is already consumed."""
        name = self._consume(TokenType.IDENTIFIER, f"Expect {kind} name.")
        self._consume(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")

        params: List[Token] = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self._report(self._error(self._current(), f"Can't have more than {MAX_ARGUMENTS} parameters."))
                params.append(self._consume(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self._match(TokenType.COMMA):
                    break
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")

        self._consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        body = self._parse_block()
        return Function(name=name, params=params, body=body)

    def _parse_class_declaration(self) -> Class:
        """class Name (< Superclass)? { methods }"""
        name = self._consume(TokenType.IDENTIFIER, "Expect class name.")

        superclass = None
        if self._match(TokenType.LESS):
            superclass = Variable(name=self._consume(TokenType.IDENTIFIER, "Expect superclass name."))

        self._consume(TokenType.LEFT_BRACE, "Expect '{' before class body.")
        methods = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            methods.append(self._parse_function("method"))
        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after class body.")

        return Class(name=name, superclass=superclass, methods=methods)

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> Stmt:
        """Parse a statement."""
        if self._match(TokenType.PRINT):
            return self._parse_print_statement()
        if self._match(TokenType.LEFT_BRACE):
            return Block(statements=self._parse_block())
        if self._match(TokenType.IF):
            return self._parse_if_statement()
        if self._match(TokenType.WHILE):
            return self._parse_while_statement()
        if self._match(TokenType.FOR):
            return self._parse_for_statement()
        if self._check(TokenType.RETURN):
            return self._parse_return_statement()
        return self._parse_expression_statement()

    def _parse_print_statement(self) -> Print:
        value = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return Print(expression=value)

    def _parse_expression_statement(self) -> Expression:
        expr = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return Expression(expression=expr)

    def _parse_block(self) -> List[Stmt]:
        """Parse declarations up to the closing brace; '{' is already consumed."""
        statements = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            stmt = self._parse_declaration()
            if stmt is not None:
                statements.append(stmt)
        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def _parse_if_statement(self) -> If:
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self._parse_expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self._parse_statement()
        else_branch = None
        if self._match(TokenType.ELSE):
            else_branch = self._parse_statement()

        return If(condition=condition, then_branch=then_branch, else_branch=else_branch)

    def _parse_while_statement(self) -> While:
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self._parse_expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        return While(condition=condition, body=self._parse_statement())

    def _parse_for_statement(self) -> Stmt:
        """Parse a for loop and desugar it into a block holding a while loop."""
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self._match(TokenType.SEMICOLON):
            initializer = None
        elif self._match(TokenType.VAR):
            initializer = self._parse_var_declaration()
        else:
            initializer = self._parse_expression_statement()

        condition = None
        if not self._check(TokenType.SEMICOLON):
            condition = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self._check(TokenType.RIGHT_PAREN):
            increment = self._parse_expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self._parse_statement()

        if increment is not None:
            body = Block(statements=[body, Expression(expression=increment)])
        if condition is None:
            condition = Literal(value=TRUE)
        body = While(condition=condition, body=body)
        if initializer is not None:
            body = Block(statements=[initializer, body])
        return body

    def _parse_return_statement(self) -> Return:
        keyword = self._advance()  # consume 'return'
        value = None
        if not self._check(TokenType.SEMICOLON):
            value = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return Return(keyword=keyword, value=value)

    # =========================================================================
    # Expression Parsing (Precedence Climbing)
    # =========================================================================

    def _parse_expression(self) -> Expr:
        return self._parse_assignment()

    def _parse_assignment(self) -> Expr:
        """Parse an assignment (right-associative, lowest precedence)."""
        expr = self._parse_binary_expr(0)

        equals = self._match(TokenType.EQUAL)
        if equals is None:
            return expr

        value = self._parse_assignment()
        if isinstance(expr, Variable):
            return Assign(name=expr.name, value=value)
        if isinstance(expr, Get):
            return Set(object=expr.object, name=expr.name, value=value)

        # Report but keep going: the parser is not confused, only the target is wrong
        self._report(error_invalid_assignment_target(equals, self._source_line(equals.line)))
        return expr

    def _parse_binary_expr(self, min_precedence: int) -> Expr:
        """Parse binary and logical expressions with precedence climbing."""
        left = self._parse_unary_expr()

        while True:
            op_token = self._current()
            precedence = self.PRECEDENCE.get(op_token.type)

            if precedence is None or precedence < min_precedence:
                break

            self._advance()  # consume operator

            # All levels are left-associative
            right = self._parse_binary_expr(precedence + 1)

            if op_token.type in self.LOGICAL_OPERATORS:
                left = Logical(left=left, operator=op_token, right=right)
            else:
                left = Binary(left=left, operator=op_token, right=right)

        return left

    def _parse_unary_expr(self) -> Expr:
        """Parse unary expressions (! -)."""
        op = self._match(TokenType.BANG, TokenType.MINUS)
        if op is not None:
            return Unary(operator=op, right=self._parse_unary_expr())
        return self._parse_call_expr()

    def _parse_call_expr(self) -> Expr:
        """Parse postfix calls and property access."""
        expr = self._parse_primary_expr()

        while True:
            if self._match(TokenType.LEFT_PAREN):
                expr = self._finish_call(expr)
            elif self._match(TokenType.DOT):
                name = self._consume(TokenType.IDENTIFIER, "Expect property name after '.'.")
                expr = Get(object=expr, name=name)
            else:
                break

        return expr

    def _finish_call(self, callee: Expr) -> Call:
        arguments: List[Expr] = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self._report(self._error(self._current(), f"Can't have more than {MAX_ARGUMENTS} arguments."))
                arguments.append(self._parse_expression())
                if not self._match(TokenType.COMMA):
                    break
        paren = self._consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return Call(callee=callee, paren=paren, arguments=arguments)

    def _parse_primary_expr(self) -> Expr:
        """Parse primary expressions (literals, identifiers, grouped, etc.)."""
        token = self._current()

        if self._match(TokenType.FALSE):
            return Literal(value=FALSE)
        if self._match(TokenType.TRUE):
            return Literal(value=TRUE)
        if self._match(TokenType.NIL):
            return Literal(value=NIL)

        if self._match(TokenType.NUMBER):
            return Literal(value=number_val(token.value))
        if self._match(TokenType.STRING):
            return Literal(value=string_val(token.value))

        if self._match(TokenType.IDENTIFIER):
            return Variable(name=token)

        if self._match(TokenType.THIS):
            return This(keyword=token)
        if self._match(TokenType.SUPER):
            self._consume(TokenType.DOT, "Expect '.' after 'super'.")
            method = self._consume(TokenType.IDENTIFIER, "Expect superclass method name.")
            return Super(keyword=token, method=method)

        if self._match(TokenType.LEFT_PAREN):
            expr = self._parse_expression()
            self._consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expression=expr)

        if token.type.is_error:
            raise self._error(token, "")
        raise error_expect_expression(token, self._source_line(token.line))

    # =========================================================================
    # Entry Point
    # =========================================================================

    def parse(self) -> Tuple[List[Stmt], bool]:
        """
        Parse every declaration in the token list.

        Returns:
            (statements, had_error). The statements are best-effort: when
            had_error is True the list is incomplete and must not be run.
        """
        statements: List[Stmt] = []
        while not self._is_at_end():
            stmt = self._parse_declaration()
            if stmt is not None:
                statements.append(stmt)
        logger.debug("parsed %d statement(s), %d error(s)", len(statements), self.diagnostics.error_count)
        return statements, self.had_error


def parse(tokens: List[Token], source: Optional[str] = None) -> Tuple[List[Stmt], bool]:
    """
    Convenience function to parse tokens into statements.

    Args:
        tokens: List of tokens from the scanner
        source: Optional original source, used to quote lines in diagnostics

    Returns:
        (statements, had_error)
    """
    parser = Parser(tokens, source)
    return parser.parse()
