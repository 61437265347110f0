"""Module entry point package for ``python -m keylist_cli``."""

from __future__ import annotations

from keylist.cli.app import console_main, main

__all__ = ["console_main", "main"]
