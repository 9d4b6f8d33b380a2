"""
wsrepos update-repos command.

SUMMARY: Add or update go_repository rules in WORKSPACE or a .bzl macro
"""
from __future__ import annotations

import argparse

from wsrepos.cli import OutputFormatter, add_dry_run_flag, add_json_flag

SUMMARY = "Add or update go_repository rules in WORKSPACE or a .bzl macro"

COMMAND = "update-repos"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register flags from every configurer, plus output flags."""
    from wsrepos.core.config import Config, default_registry

    registry = default_registry()
    config = Config()
    registry.register_flags(parser, COMMAND, config)
    add_dry_run_flag(parser)
    add_json_flag(parser)
    parser.set_defaults(_registry=registry, _config=config)


def main(args: argparse.Namespace) -> int:
    """Reconcile repository rules and write the result."""
    from wsrepos.core.config.update_repos import USAGE_HINT
    from wsrepos.core.exceptions import ConfigurationError, WsReposError
    from wsrepos.core.logging import suppress_lastresort_in_json_mode
    from wsrepos.core.repos.update import UpdateReposManager

    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    if formatter.json_mode:
        suppress_lastresort_in_json_mode()

    try:
        registry = args._registry
        config = args._config
        registry.check_flags(args, config)

        dry_run = bool(getattr(args, "dry_run", False))
        result = UpdateReposManager(config).run(dry_run=dry_run)
    except ConfigurationError as e:
        formatter.error(e, hint=USAGE_HINT)
        return e.exit_code
    except WsReposError as e:
        formatter.error(e)
        return e.exit_code

    reconcile = result.reconcile
    if formatter.json_mode:
        payload = result.to_dict()
        if dry_run:
            payload["diff"] = result.diff
        formatter.json_output({"status": "success", **payload})
        return 0

    for warning in reconcile.warnings:
        formatter.warning(str(warning))
    if dry_run and result.diff:
        formatter.text(result.diff.rstrip("\n"))
    verb = "would change" if dry_run else "changed"
    formatter.text(
        f"{len(reconcile.inserted)} added, {len(reconcile.updated)} updated, "
        f"{len(reconcile.removed)} removed; {len(result.changed_files)} files {verb}"
    )
    for path in result.changed_files:
        formatter.text_kv(verb, path)
    return 0


if __name__ == "__main__":
    import sys

    from wsrepos.cli._dispatcher import main as cli_main

    sys.exit(cli_main(["update-repos", *sys.argv[1:]]))
