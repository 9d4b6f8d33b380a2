"""
wsrepos CLI package.

Commands are discovered from ``wsrepos.cli.commands``; each module exposes
``SUMMARY``, ``register_args(parser)`` and ``main(args) -> int``.

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
"""
from ._args import add_dry_run_flag, add_json_flag
from ._output import OutputFormatter

__all__ = [
    # Output formatting
    "OutputFormatter",
    # Argument helpers
    "add_json_flag",
    "add_dry_run_flag",
]
