"""
pylox runtime - tree-walking evaluation of parsed statements.

This module provides:
- Value: Immutable runtime values tagged with their kind
- Environment: The flat variable scope
- Interpreter: Executes statements against an Environment
- run: Scan, parse and execute a piece of source text
"""

from .values import (
    Value,
    ValueKind,
    number_val,
    string_val,
    bool_val,
    TRUE,
    FALSE,
    NIL,
    is_equal,
    format_number,
    stringify,
)

from .environment import (
    Environment,
)

from .interpreter import (
    Interpreter,
    RunResult,
    run,
)

__all__ = [
    # Values
    'Value',
    'ValueKind',
    'number_val',
    'string_val',
    'bool_val',
    'TRUE',
    'FALSE',
    'NIL',
    'is_equal',
    'format_number',
    'stringify',
    # Environment
    'Environment',
    # Interpreter
    'Interpreter',
    'RunResult',
    'run',
]
