"""
pylox - a small tree-walking interpreter for the Lox scripting language.

This package provides:
- Scanner: Tokenizes source text, turning malformed input into error tokens
- Parser: Builds statements from tokens, recovering after syntax errors
- Interpreter: Evaluates print, var, assignment and expression statements
- Lox: A session that keeps variables alive between runs (REPL, scripts)

Usage:
    from pylox import scan, parse, run

    tokens = scan('print (2 + 3) * 4;')
    statements, had_error = parse(tokens)

    # Or scan, parse and execute in one step
    result = run('var greeting = "hi"; print greeting + " there";')
    if not result.success:
        for diag in result.diagnostics:
            print(diag.format())
"""

import logging

from .tokens import (
    Token,
    TokenType,
    KEYWORDS,
    is_keyword,
)

from .scanner import (
    Scanner,
    scan,
)

from .parser import (
    Parser,
    parse,
)

from .ast import (
    # Base
    AstNode,
    AstVisitor,
    # Expressions
    Expr,
    Literal,
    Grouping,
    Unary,
    Binary,
    Logical,
    Variable,
    Assign,
    Call,
    Get,
    Set,
    Super,
    This,
    # Statements
    Stmt,
    Expression,
    Print,
    Var,
    Block,
    If,
    While,
    Function,
    Class,
    Return,
    # Helpers
    AstPrinter,
    print_ast,
)

from .errors import (
    LoxError,
    ScanError,
    ParseError,
    LoxRuntimeError,
    LoxTypeError,
    UndefinedVariableError,
    NotImplementedConstructError,
    Diagnostic,
    DiagnosticCollector,
)

from .runtime import (
    Value,
    ValueKind,
    Environment,
    Interpreter,
    RunResult,
    run,
)

from .config import (
    LoxConfig,
    ConfigError,
    load_config,
)

from .lox import Lox

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Tokens
    'Token',
    'TokenType',
    'KEYWORDS',
    'is_keyword',
    # Scanner
    'Scanner',
    'scan',
    # Parser
    'Parser',
    'parse',
    # AST
    'AstNode',
    'AstVisitor',
    'Expr',
    'Literal',
    'Grouping',
    'Unary',
    'Binary',
    'Logical',
    'Variable',
    'Assign',
    'Call',
    'Get',
    'Set',
    'Super',
    'This',
    'Stmt',
    'Expression',
    'Print',
    'Var',
    'Block',
    'If',
    'While',
    'Function',
    'Class',
    'Return',
    'AstPrinter',
    'print_ast',
    # Errors
    'LoxError',
    'ScanError',
    'ParseError',
    'LoxRuntimeError',
    'LoxTypeError',
    'UndefinedVariableError',
    'NotImplementedConstructError',
    'Diagnostic',
    'DiagnosticCollector',
    # Runtime
    'Value',
    'ValueKind',
    'Environment',
    'Interpreter',
    'RunResult',
    'run',
    # Configuration
    'LoxConfig',
    'ConfigError',
    'load_config',
    # Session
    'Lox',
]
