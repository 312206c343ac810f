"""
Variable environment for the pylox interpreter.

A single flat scope mapping names to values. One Environment belongs to one
run; a REPL that wants bindings to persist between inputs must hand the same
instance to every run.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator

from .values import Value
from ..errors import error_undefined_variable
from ..tokens import Token


@dataclass
class Environment:
    """
    A flat name -> Value binding store.

    Values are immutable, so a value returned by `get` never changes when the
    binding is later redefined or assigned.
    """
    values: Dict[str, Value] = field(default_factory=dict)

    def define(self, name: str, value: Value) -> None:
        """Bind a name, replacing any previous binding (redeclaration is legal)."""
        self.values[name] = value

    def get(self, name: Token) -> Value:
        """Look up a variable; raises UndefinedVariableError when unbound."""
        try:
            return self.values[name.lexeme]
        except KeyError:
            raise error_undefined_variable(name) from None

    def assign(self, name: Token, value: Value) -> Value:
        """
        Replace an existing binding and return the assigned value.

        Unlike `define`, the name must already be declared.
        """
        if name.lexeme not in self.values:
            raise error_undefined_variable(name)
        self.values[name.lexeme] = value
        return value

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)
