"""keylist command line package."""

from .app import configure_logging, console_main, emit_success, main
from .commands import CLIContext, parse_key, parse_literal, register_subcommands

__all__ = [
    "CLIContext",
    "configure_logging",
    "console_main",
    "emit_success",
    "main",
    "parse_key",
    "parse_literal",
    "register_subcommands",
]
