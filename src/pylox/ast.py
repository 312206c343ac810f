"""
Abstract Syntax Tree (AST) node definitions for pylox.

The AST is a plain owned tree: every node holds its children directly and
no node is shared, so the grammar cannot produce cycles.

The node set covers the full grammar. The interpreter evaluates Literal,
Grouping, Unary, Binary, Logical, Variable and Assign expressions and
Expression, Print and Var statements; the remaining nodes are built by the
parser but reported as not implemented when executed.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Any
from abc import ABC

from .tokens import Token


# =============================================================================
# Base Classes
# =============================================================================

@dataclass
class AstNode(ABC):
    """Base class for all AST nodes."""

    def accept(self, visitor: "AstVisitor") -> Any:
        """Accept a visitor for traversal."""
        method_name = f"visit_{self.__class__.__name__}"
        method = getattr(visitor, method_name, visitor.generic_visit)
        return method(self)


class AstVisitor(ABC):
    """Base class for AST visitors."""

    def generic_visit(self, node: AstNode) -> Any:
        """Default visit method."""
        raise NotImplementedError(f"No visitor for {node.__class__.__name__}")


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class Expr(AstNode):
    """Base class for all expressions."""
    pass


@dataclass
class Literal(Expr):
    """A literal value: number, string, true, false or nil."""
    value: Any  # a runtime Value


@dataclass
class Grouping(Expr):
    """A parenthesized expression."""
    expression: Expr


@dataclass
class Unary(Expr):
    """A prefix operation (e.g., -n, !x)."""
    operator: Token
    right: Expr


@dataclass
class Binary(Expr):
    """An arithmetic, comparison or equality operation."""
    left: Expr
    operator: Token
    right: Expr


@dataclass
class Logical(Expr):
    """A short-circuiting 'and' / 'or'."""
    left: Expr
    operator: Token
    right: Expr


@dataclass
class Variable(Expr):
    """A variable reference."""
    name: Token


@dataclass
class Assign(Expr):
    """Assignment to an existing variable (e.g., x = 1)."""
    name: Token
    value: Expr


@dataclass
class Call(Expr):
    """A call (e.g., f(1, 2)). `paren` is the closing parenthesis."""
    callee: Expr
    paren: Token
    arguments: List[Expr] = field(default_factory=list)


@dataclass
class Get(Expr):
    """Property access (e.g., point.x)."""
    object: Expr
    name: Token


@dataclass
class Set(Expr):
    """Property assignment (e.g., point.x = 1)."""
    object: Expr
    name: Token
    value: Expr


@dataclass
class Super(Expr):
    """Superclass method lookup (e.g., super.init)."""
    keyword: Token
    method: Token


@dataclass
class This(Expr):
    """The receiver inside a method body."""
    keyword: Token


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class Stmt(AstNode):
    """Base class for all statements."""
    pass


@dataclass
class Expression(Stmt):
    """An expression evaluated for its effect."""
    expression: Expr


@dataclass
class Print(Stmt):
    """print expr;"""
    expression: Expr


@dataclass
class Var(Stmt):
    """var name (= initializer)?;"""
    name: Token
    initializer: Optional[Expr] = None


@dataclass
class Block(Stmt):
    """{ statements }"""
    statements: List[Stmt] = field(default_factory=list)


@dataclass
class If(Stmt):
    """if (condition) then_branch (else else_branch)?"""
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt] = None


@dataclass
class While(Stmt):
    """while (condition) body. 'for' loops are desugared into this."""
    condition: Expr
    body: Stmt


@dataclass
class Function(Stmt):
    """fun name(params) { body }"""
    name: Token
    params: List[Token] = field(default_factory=list)
    body: List[Stmt] = field(default_factory=list)


@dataclass
class Class(Stmt):
    """class Name (< Superclass)? { methods }"""
    name: Token
    superclass: Optional[Variable] = None
    methods: List[Function] = field(default_factory=list)


@dataclass
class Return(Stmt):
    """return value?;"""
    keyword: Token
    value: Optional[Expr] = None


# =============================================================================
# Visitor Helpers
# =============================================================================

class AstPrinter(AstVisitor):
    """Debug visitor that renders a node as a parenthesized prefix expression.

    Example: `print (2 + 3) * 4;` renders as `(print (* (group (+ 2 3)) 4))`.
    """

    def print(self, node: AstNode) -> str:
        return node.accept(self)

    def _parenthesize(self, name: str, *parts: Any) -> str:
        pieces = [name]
        for part in parts:
            if isinstance(part, AstNode):
                pieces.append(part.accept(self))
            elif isinstance(part, Token):
                pieces.append(part.lexeme)
            else:
                pieces.append(str(part))
        return "(" + " ".join(pieces) + ")"

    def generic_visit(self, node: AstNode) -> str:
        return f"<{node.__class__.__name__}>"

    # --- expressions ---

    def visit_Literal(self, node: Literal) -> str:
        if isinstance(node.value.data, str):
            return f'"{node.value}"'
        return str(node.value)

    def visit_Grouping(self, node: Grouping) -> str:
        return self._parenthesize("group", node.expression)

    def visit_Unary(self, node: Unary) -> str:
        return self._parenthesize(node.operator.lexeme, node.right)

    def visit_Binary(self, node: Binary) -> str:
        return self._parenthesize(node.operator.lexeme, node.left, node.right)

    def visit_Logical(self, node: Logical) -> str:
        return self._parenthesize(node.operator.lexeme, node.left, node.right)

    def visit_Variable(self, node: Variable) -> str:
        return node.name.lexeme

    def visit_Assign(self, node: Assign) -> str:
        return self._parenthesize("=", node.name, node.value)

    def visit_Call(self, node: Call) -> str:
        return self._parenthesize("call", node.callee, *node.arguments)

    def visit_Get(self, node: Get) -> str:
        return self._parenthesize(".", node.object, node.name)

    def visit_Set(self, node: Set) -> str:
        return self._parenthesize("=", self._parenthesize(".", node.object, node.name), node.value)

    def visit_Super(self, node: Super) -> str:
        return self._parenthesize("super", node.method)

    def visit_This(self, node: This) -> str:
        return "this"

    # --- statements ---

    def visit_Expression(self, node: Expression) -> str:
        return self._parenthesize(";", node.expression)

    def visit_Print(self, node: Print) -> str:
        return self._parenthesize("print", node.expression)

    def visit_Var(self, node: Var) -> str:
        if node.initializer is None:
            return self._parenthesize("var", node.name)
        return self._parenthesize("var", node.name, node.initializer)

    def visit_Block(self, node: Block) -> str:
        return self._parenthesize("block", *node.statements)

    def visit_If(self, node: If) -> str:
        if node.else_branch is None:
            return self._parenthesize("if", node.condition, node.then_branch)
        return self._parenthesize("if-else", node.condition, node.then_branch, node.else_branch)

    def visit_While(self, node: While) -> str:
        return self._parenthesize("while", node.condition, node.body)

    def visit_Function(self, node: Function) -> str:
        params = "(" + " ".join(p.lexeme for p in node.params) + ")"
        return self._parenthesize("fun", node.name, params, *node.body)

    def visit_Class(self, node: Class) -> str:
        if node.superclass is None:
            return self._parenthesize("class", node.name, *node.methods)
        return self._parenthesize("class", node.name, "<", node.superclass, *node.methods)

    def visit_Return(self, node: Return) -> str:
        if node.value is None:
            return "(return)"
        return self._parenthesize("return", node.value)


def print_ast(node: AstNode) -> str:
    """Render an AST node for debugging."""
    return AstPrinter().print(node)
