"""
Interpreter session for pylox.

A Lox session owns one Environment and one Interpreter, so variables
declared by one run are visible to the next. Scripts use a single run; the
interactive prompt runs every line it reads in the same session.

Usage:
    session = Lox()
    session.run('var x = 1;')
    session.run('print x + 1;')     # prints 2
"""

import logging
from pathlib import Path
from typing import Callable, Optional, TextIO

from .config import LoxConfig
from .runtime import Environment, Interpreter, RunResult, run
from .scanner import scan

logger = logging.getLogger(__name__)

# Process exit codes (sysexits.h)
EXIT_OK = 0
EXIT_DATAERR = 65       # syntax or lexical error
EXIT_NOINPUT = 66       # script file missing or unreadable
EXIT_SOFTWARE = 70      # runtime error

REPL_EXIT_WORDS = ("exit", "quit")


def exit_code_for(result: RunResult) -> int:
    """Map a run outcome to the process exit code."""
    if result.had_parse_error:
        return EXIT_DATAERR
    if result.had_runtime_error:
        return EXIT_SOFTWARE
    return EXIT_OK


class Lox:
    """An interpreter session with a persistent global environment."""

    def __init__(self, config: Optional[LoxConfig] = None,
                 out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self.config = config or LoxConfig()
        self.environment = Environment()
        self.interpreter = Interpreter(out=out, err=err)

    def run(self, source: str) -> RunResult:
        """Run source text against this session's environment."""
        return run(
            source,
            environment=self.environment,
            interpreter=self.interpreter,
            show_source=self.config.show_source,
            max_errors=self.config.max_errors,
        )

    def run_file(self, path: Path) -> RunResult:
        """
        Run a UTF-8 script file.

        Raises:
            OSError: The file cannot be opened or read
            UnicodeDecodeError: The file is not valid UTF-8
        """
        source = Path(path).read_text(encoding='utf-8')
        logger.debug("running %s (%d bytes)", path, len(source))
        return self.run(source)

    def run_prompt(self, read_line: Optional[Callable[[str], str]] = None) -> int:
        """
        Read-eval-print loop.

        Each line is run on its own; an error is reported and the loop goes
        on. Bindings persist across lines. The loop ends at end of input or
        when the line is `exit` or `quit`.

        Args:
            read_line: Prompt-and-read function, the builtin `input` by default

        Returns:
            The exit code, always EXIT_OK.
        """
        read_line = read_line or input
        while True:
            try:
                line = read_line(self.config.prompt)
            except EOFError:
                print(file=self.interpreter.out)
                break
            except KeyboardInterrupt:
                print(file=self.interpreter.out)
                continue

            if line.strip() in REPL_EXIT_WORDS:
                break
            if not line.strip():
                continue

            if self.config.echo_tokens:
                print(" ".join(str(t) for t in scan(line)), file=self.interpreter.out)

            self.run(line)

        return EXIT_OK
