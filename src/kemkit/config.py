"""Runtime settings read from the environment.

KEMKIT_LOG_LEVEL        logging level name (default INFO)
KEMKIT_DEFAULT_SUITE    DHKEM suite used by ``kemkit selftest`` (default DHKEM-X25519-HKDF-SHA256)
KEMKIT_SELFTEST_TRIALS  round trips per conformance check (default 8)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from kemkit.security.dhkem import SUITES


DEFAULT_SUITE = "DHKEM-X25519-HKDF-SHA256"


@dataclass(frozen=True)
class Settings:
    log_level: int = logging.INFO
    default_suite: str = DEFAULT_SUITE
    selftest_trials: int = 8


def _parse_level(raw: str) -> int:
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"KEMKIT_LOG_LEVEL: unknown level {raw!r}")
    return level


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    log_level = logging.INFO
    raw_level = env.get("KEMKIT_LOG_LEVEL")
    if raw_level:
        log_level = _parse_level(raw_level)

    default_suite = env.get("KEMKIT_DEFAULT_SUITE") or DEFAULT_SUITE
    if default_suite not in SUITES:
        raise ValueError(f"KEMKIT_DEFAULT_SUITE: unknown suite {default_suite!r}")

    trials = 8
    raw_trials = env.get("KEMKIT_SELFTEST_TRIALS")
    if raw_trials:
        try:
            trials = int(raw_trials)
        except ValueError:
            raise ValueError(f"KEMKIT_SELFTEST_TRIALS: not an integer: {raw_trials!r}") from None
        if trials < 1:
            raise ValueError("KEMKIT_SELFTEST_TRIALS must be at least 1")

    return Settings(log_level=log_level, default_suite=default_suite, selftest_trials=trials)
