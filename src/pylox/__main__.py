#!/usr/bin/env python3
"""
CLI for the pylox interpreter.

Usage:
    python -m pylox [--config FILE] [-v] run FILE.lox
    python -m pylox [--config FILE] [-v] repl
    python -m pylox tokens FILE.lox
    python -m pylox ast FILE.lox

With no subcommand an interactive prompt starts.

Exit codes:
    0   success
    65  the script has a lexical or syntax error (nothing was executed)
    66  the script file cannot be read
    70  a statement failed at run time
    78  the configuration file is invalid

Examples:
    # Run a script
    python -m pylox run scripts/hello.lox

    # Show how a script is tokenized and parsed
    python -m pylox tokens scripts/hello.lox
    python -m pylox ast scripts/hello.lox
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import ConfigError, LoxConfig, load_config
from .lox import Lox, EXIT_OK, EXIT_DATAERR, EXIT_NOINPUT, EXIT_SOFTWARE, exit_code_for

EXIT_CONFIG = 78


def report_unreadable(source_path: Path, error: Exception) -> None:
    """Explain on stderr why a script could not be read."""
    if isinstance(error, FileNotFoundError):
        print(f"Error: File not found: {source_path}", file=sys.stderr)
    elif isinstance(error, UnicodeDecodeError):
        print(f"Error: {source_path} is not valid UTF-8 (byte {error.start})", file=sys.stderr)
    else:
        print(f"Error: Cannot read {source_path}: {error.strerror}", file=sys.stderr)


def read_source(path_str: str) -> Optional[str]:
    """Read a script, reporting a missing or unreadable file on stderr."""
    source_path = Path(path_str)
    try:
        return source_path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        report_unreadable(source_path, e)
    return None


def cmd_run(args, config: LoxConfig) -> int:
    """Run a script file."""
    source_path = Path(args.file)
    try:
        result = Lox(config).run_file(source_path)
    except (OSError, UnicodeDecodeError) as e:
        report_unreadable(source_path, e)
        return EXIT_NOINPUT
    return exit_code_for(result)


def cmd_repl(args, config: LoxConfig) -> int:
    """Start the interactive prompt."""
    return Lox(config).run_prompt()


def cmd_tokens(args, config: LoxConfig) -> int:
    """Print the token stream of a script, one token per line."""
    from .scanner import Scanner

    source = read_source(args.file)
    if source is None:
        return EXIT_NOINPUT

    scanner = Scanner(source)
    for token in scanner.scan_tokens():
        print(f"{token.line:>4}  {token}")

    if scanner.diagnostics.has_errors:
        print(scanner.diagnostics.format_all(config.show_source), file=sys.stderr)
        return EXIT_DATAERR
    return EXIT_OK


def cmd_ast(args, config: LoxConfig) -> int:
    """Print the parsed statements of a script."""
    from .scanner import scan
    from .parser import Parser
    from .ast import print_ast

    source = read_source(args.file)
    if source is None:
        return EXIT_NOINPUT

    parser = Parser(scan(source), source, config.max_errors)
    statements, had_error = parser.parse()

    if had_error:
        print(parser.diagnostics.format_all(config.show_source), file=sys.stderr)
        return EXIT_DATAERR

    try:
        rendered = [print_ast(stmt) for stmt in statements]
    except RecursionError:
        print("Error: Expression nested too deeply to print.", file=sys.stderr)
        return EXIT_SOFTWARE
    for line in rendered:
        print(line)
    return EXIT_OK


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog='python -m pylox',
        description='pylox interpreter',
    )
    parser.add_argument('--config', metavar='FILE',
                        help='Configuration file (default: $PYLOX_CONFIG or ~/.config/pylox/config.yaml)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='action')

    # run command
    run_parser = subparsers.add_parser('run', help='Run a script file')
    run_parser.add_argument('file', help='Lox source file')

    # repl command
    subparsers.add_parser('repl', help='Start the interactive prompt (default)')

    # tokens command
    tokens_parser = subparsers.add_parser('tokens', help='Print the token stream of a file')
    tokens_parser.add_argument('file', help='Lox source file')

    # ast command
    ast_parser = subparsers.add_parser('ast', help='Print the syntax tree of a file')
    ast_parser.add_argument('file', help='Lox source file')

    args = parser.parse_args(argv)

    try:
        config = load_config(Path(args.config) if args.config else None)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    configure_logging("DEBUG" if args.verbose else config.log_level)

    if args.action == 'run':
        return cmd_run(args, config)
    elif args.action == 'tokens':
        return cmd_tokens(args, config)
    elif args.action == 'ast':
        return cmd_ast(args, config)
    elif args.action in (None, 'repl'):
        return cmd_repl(args, config)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
