#!/usr/bin/env python
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from hivespoke import __version__
from hivespoke.config.defaults import LIFECYCLE_PHASES
from hivespoke.errors import HiveError


def _repo_root() -> Path:
    return Path.cwd().resolve()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    # Transport chatter stays quiet even with -v
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("hivespoke").setLevel(logging.DEBUG if verbose else logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hive-spoke",
        description="hive-spoke - spoke declarations and hub-side verification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Global options
    parser.add_argument("--json", action="store_true", help="Output JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    parser.add_argument("--version", action="version", version=f"hive-spoke {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # --- Spoke side ---
    init_p = subparsers.add_parser("init", help="Scaffold .collab/ in this repository")
    init_p.add_argument("--hub", required=True, help="Hub repository (org/repo)")
    init_p.add_argument("--project", help="Project name (default: directory name)")
    init_p.add_argument("--name", help="Operator display name (default: git user.name)")
    init_p.add_argument("--overwrite", action="store_true", help="Replace an existing .collab/")

    status_p = subparsers.add_parser("status", help="Regenerate .collab/status.yaml")
    status_p.add_argument("--phase", choices=LIFECYCLE_PHASES, help="Set lifecycle phase")
    status_p.add_argument("--skip-tests", action="store_true", help="Do not run the test command")

    validate_p = subparsers.add_parser("validate", help="Validate .collab/ declarations")
    validate_p.add_argument("--strict", action="store_true", help="Exit 2 on warnings")

    # --- Hub side ---
    pull_p = subparsers.add_parser("pull", help="Aggregate spoke status across projects/")
    pull_p.add_argument("--remote", action="store_true", help="Fetch from spoke repos on GitHub")
    pull_p.add_argument("--concurrency", type=int, help="Parallel spoke fetches")

    verify_p = subparsers.add_parser("verify", help="Verify spoke keys against allowed-signers")
    verify_p.add_argument("--allowed-signers", type=Path, help="Path to allowed-signers file")
    verify_p.add_argument("--concurrency", type=int, help="Parallel spoke fetches")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    load_dotenv(_repo_root() / ".env")
    _configure_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 0

    from hivespoke.cli.commands import init, pull, status, validate, verify
    from hivespoke.cli.formatting.output import Reporter
    from hivespoke.config.settings import load_settings, set_settings

    reporter = Reporter(json_output=args.json)
    root = _repo_root()

    try:
        set_settings(load_settings(root))
    except (ValueError, TypeError) as e:
        reporter.error(f"Invalid hub settings: {e}")
        return 1

    try:
        if args.command == "init":
            return init.run(
                reporter,
                root,
                hub=args.hub,
                project=args.project,
                name=args.name,
                overwrite=args.overwrite,
            )
        elif args.command == "status":
            return status.run(reporter, root, phase=args.phase, skip_tests=args.skip_tests)
        elif args.command == "validate":
            return validate.run(reporter, root, strict=args.strict)
        elif args.command == "pull":
            return asyncio.run(
                pull.run(reporter, root, remote=args.remote, concurrency=args.concurrency)
            )
        elif args.command == "verify":
            return asyncio.run(
                verify.run(
                    reporter,
                    root,
                    allowed_signers=args.allowed_signers,
                    concurrency=args.concurrency,
                )
            )
    except HiveError as e:
        reporter.error(e.message)
        return 1
    except ValueError as e:
        # Out-of-range --concurrency and similar settings overrides
        reporter.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
