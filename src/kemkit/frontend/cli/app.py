"""
kemkit command line.

Commands:
    suites
    -> lists the built-in DHKEM suites with their secret/message sizes

    selftest [--suite NAME | --all] [--trials N]
    -> generates a fresh key pair per suite and runs the conformance checks

Usage:
    kemkit selftest --all -v
    python -m kemkit.frontend.cli.app selftest --suite DHKEM-P256-HKDF-SHA256
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from kemkit.config import load_settings
from kemkit.core.kem import KEM
from kemkit.security.dhkem import SUITES, generate_keypair, get_suite
from kemkit.testing.conformance import check_conformance

from .logging_config import configure_logging


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kemkit", description="KEM provider self-tests")
    parser.add_argument("-v", "--verbose", action="store_true", help="log at DEBUG level")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("suites", help="list built-in DHKEM suites")

    selftest = sub.add_parser("selftest", help="run conformance checks")
    group = selftest.add_mutually_exclusive_group()
    group.add_argument("--suite", help="suite name (default from KEMKIT_DEFAULT_SUITE)")
    group.add_argument("--all", action="store_true", help="check every built-in suite")
    selftest.add_argument("--trials", type=int, help="round trips per check")
    return parser


def cmd_suites() -> int:
    for suite in SUITES.values():
        print(
            f"{suite.name:<28} id=0x{suite.kem_id:04x} "
            f"secret={suite.secret_size} encapsulation={suite.encapsulation_size}"
        )
    return 0


def cmd_selftest(suite_names: List[str], trials: int) -> int:
    kem = KEM.get_instance("DHKEM")
    failures = 0
    for name in suite_names:
        suite = get_suite(name)
        private_key, public_key = generate_keypair(suite)
        logger.info("checking %s", suite.name)
        report = check_conformance(kem.spi, public_key, private_key, trials=trials, name=suite.name)
        print(report.summary())
        if not report.ok:
            failures += 1
    return 1 if failures else 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings()
    except ValueError as exc:
        print(f"configuration error: {exc}", file=sys.stderr)
        return 2

    configure_logging(logging.DEBUG if args.verbose else settings.log_level)

    if args.command == "suites":
        return cmd_suites()

    trials = args.trials if args.trials is not None else settings.selftest_trials
    if trials < 1:
        print("--trials must be at least 1", file=sys.stderr)
        return 2
    names = list(SUITES) if args.all else [args.suite or settings.default_suite]
    for name in names:
        if name not in SUITES:
            print(f"unknown suite: {name}", file=sys.stderr)
            return 2
    return cmd_selftest(names, trials)


if __name__ == "__main__":
    sys.exit(main())
