"""
Tree-walking interpreter for pylox.

Evaluates statements one at a time against an explicit Environment. Runtime
errors are reported on the interpreter's error stream and handed back to the
caller; nothing is recorded in global state.
"""

import logging
import math
import sys
from dataclasses import dataclass, field, fields
from typing import List, Optional, TextIO

from .values import (
    Value, number_val, string_val, bool_val, NIL,
    is_equal, stringify,
)
from .environment import Environment

from ..ast import (
    AstNode,
    Stmt, Expression, Print, Var,
    Expr, Literal, Grouping, Unary, Binary, Logical, Variable, Assign,
)
from ..errors import (
    Diagnostic,
    LoxError,
    LoxRuntimeError,
    NotImplementedConstructError,
    error_operand_type,
    error_not_implemented,
    error_evaluation_too_deep,
)
from ..tokens import Token, TokenType

logger = logging.getLogger(__name__)


def _node_line(node: AstNode) -> int:
    """Find the source line of the first token inside a node, or 0."""
    pending = [node]
    while pending:
        item = pending.pop()
        if isinstance(item, Token):
            return item.line
        if isinstance(item, AstNode):
            children = []
            for f in fields(item):
                child = getattr(item, f.name)
                children.extend(child if isinstance(child, list) else [child])
            pending.extend(reversed(children))
    return 0


def _divide(left: float, right: float) -> float:
    """IEEE-754 division: x/0 is a signed infinity and 0/0 is NaN."""
    try:
        return left / right
    except ZeroDivisionError:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)


class Interpreter:
    """
    Tree-walking interpreter.

    Evaluates AST nodes by dispatching to type-specific methods.

    Usage:
        interpreter = Interpreter()
        environment = Environment()
        for stmt in statements:
            interpreter.interpret(stmt, environment)
    """

    def __init__(self, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        """
        Initialize the interpreter.

        Args:
            out: Stream for `print` output (defaults to the current sys.stdout)
            err: Stream for runtime error reports (defaults to the current sys.stderr)
        """
        self._out = out
        self._err = err

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err if self._err is not None else sys.stderr

    def interpret(self, stmt: Stmt, environment: Environment) -> Optional[LoxError]:
        """
        Execute one statement.

        A runtime failure is printed to the error stream and returned rather
        than raised, so the caller decides whether to carry on with the next
        statement.

        Returns:
            None on success, otherwise the LoxRuntimeError or
            NotImplementedConstructError that stopped the statement.
        """
        try:
            self.execute(stmt, environment)
        except RecursionError:
            error = error_evaluation_too_deep(_node_line(stmt))
        except (LoxRuntimeError, NotImplementedConstructError) as e:
            error = e
        else:
            return None
        logger.debug("runtime error %s on line %d", error.code, error.line)
        print(error.diagnostic.format(show_source=False), file=self.err)
        return error

    # =========================================================================
    # Statements
    # =========================================================================

    def execute(self, stmt: Stmt, environment: Environment) -> None:
        """Execute a statement, raising on runtime errors."""
        if isinstance(stmt, Print):
            value = self.evaluate(stmt.expression, environment)
            print(stringify(value), file=self.out)
        elif isinstance(stmt, Var):
            value = NIL
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer, environment)
            environment.define(stmt.name.lexeme, value)
        elif isinstance(stmt, Expression):
            self.evaluate(stmt.expression, environment)
        else:
            raise error_not_implemented(f"{type(stmt).__name__.lower()} statement", _node_line(stmt))

    # =========================================================================
    # Expressions
    # =========================================================================

    def evaluate(self, expr: Expr, environment: Environment) -> Value:
        """Evaluate an expression to produce a Value."""
        if isinstance(expr, Literal):
            return expr.value
        elif isinstance(expr, Grouping):
            return self.evaluate(expr.expression, environment)
        elif isinstance(expr, Variable):
            return environment.get(expr.name)
        elif isinstance(expr, Assign):
            value = self.evaluate(expr.value, environment)
            return environment.assign(expr.name, value)
        elif isinstance(expr, Unary):
            return self._eval_unary(expr, environment)
        elif isinstance(expr, Binary):
            return self._eval_binary(expr, environment)
        elif isinstance(expr, Logical):
            return self._eval_logical(expr, environment)
        else:
            raise error_not_implemented(f"{type(expr).__name__.lower()} expression", _node_line(expr))

    def _eval_unary(self, expr: Unary, environment: Environment) -> Value:
        right = self.evaluate(expr.right, environment)

        if expr.operator.type == TokenType.BANG:
            return bool_val(not right.is_truthy())

        # MINUS
        if not right.is_number:
            raise error_operand_type(expr.operator, "Not a valid operand.")
        return number_val(-right.data)

    def _eval_binary(self, expr: Binary, environment: Environment) -> Value:
        """Evaluate a binary operation; the left operand is evaluated first."""
        left = self.evaluate(expr.left, environment)
        right = self.evaluate(expr.right, environment)
        op = expr.operator.type

        if op == TokenType.EQUAL_EQUAL:
            return bool_val(is_equal(left, right))
        if op == TokenType.BANG_EQUAL:
            return bool_val(not is_equal(left, right))

        if op == TokenType.PLUS:
            if left.is_number and right.is_number:
                return number_val(left.data + right.data)
            if left.is_string and right.is_string:
                return string_val(left.data + right.data)
            raise error_operand_type(expr.operator, "Operands must be two numbers or two strings.")

        if not (left.is_number and right.is_number):
            raise error_operand_type(expr.operator, "Operands must be numbers.")

        a, b = left.data, right.data
        if op == TokenType.MINUS:
            return number_val(a - b)
        elif op == TokenType.STAR:
            return number_val(a * b)
        elif op == TokenType.SLASH:
            return number_val(_divide(a, b))
        elif op == TokenType.GREATER:
            return bool_val(a > b)
        elif op == TokenType.GREATER_EQUAL:
            return bool_val(a >= b)
        elif op == TokenType.LESS:
            return bool_val(a < b)
        elif op == TokenType.LESS_EQUAL:
            return bool_val(a <= b)

        raise error_not_implemented(f"operator '{expr.operator.lexeme}'", expr.operator.line)

    def _eval_logical(self, expr: Logical, environment: Environment) -> Value:
        """Short-circuit: the right operand is skipped when the left decides."""
        left = self.evaluate(expr.left, environment)

        if expr.operator.type == TokenType.OR:
            if left.is_truthy():
                return left
        elif not left.is_truthy():
            return left

        return self.evaluate(expr.right, environment)


@dataclass
class RunResult:
    """Outcome of running one piece of source text."""
    success: bool
    had_parse_error: bool = False
    diagnostics: List[Diagnostic] = field(default_factory=list)
    runtime_errors: List[LoxError] = field(default_factory=list)
    statements_executed: int = 0

    @property
    def had_runtime_error(self) -> bool:
        return bool(self.runtime_errors)


def run(
    source: str,
    environment: Optional[Environment] = None,
    interpreter: Optional[Interpreter] = None,
    show_source: bool = True,
    max_errors: int = 20,
) -> RunResult:
    """
    Scan, parse and execute source text.

    If parsing reports any error the run is aborted before a single statement
    executes. Otherwise every statement runs in source order; a runtime error
    is reported and the next statement still runs.

    Pass the same `environment` to successive calls to keep bindings between
    them (as a REPL does). A fresh Environment is used when none is given.

        result = run('var x = 1; print x + 2;')
        assert result.success
    """
    # Imported here: the parser itself depends on this package's values
    from ..scanner import Scanner
    from ..parser import Parser

    interpreter = interpreter or Interpreter()
    environment = environment if environment is not None else Environment()

    tokens = Scanner(source).scan_tokens()
    parser = Parser(tokens, source, max_errors)
    statements, had_error = parser.parse()

    if had_error:
        print(parser.diagnostics.format_all(show_source), file=interpreter.err)
        return RunResult(
            success=False,
            had_parse_error=True,
            diagnostics=parser.diagnostics.diagnostics,
        )

    result = RunResult(success=True)
    for stmt in statements:
        error = interpreter.interpret(stmt, environment)
        result.statements_executed += 1
        if error is not None:
            result.runtime_errors.append(error)
            result.success = False

    logger.debug("ran %d statement(s), %d runtime error(s)",
                 result.statements_executed, len(result.runtime_errors))
    return result
