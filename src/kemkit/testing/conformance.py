"""Conformance checks any KEMSpi implementation should pass.

Only the full-range ``"Generic"`` path is mandatory. Slicing and custom
labels are checked when the encapsulator says it supports them and
otherwise must be refused with UnsupportedCombinationError.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

from kemkit.core.exceptions import DecapsulateError, SecretRangeError, UnsupportedCombinationError
from kemkit.core.spi import DecapsulatorSpi, EncapsulatorSpi, KEMSpi


logger = logging.getLogger(__name__)


@dataclass
class ConformanceReport:
    kem_name: str
    passed: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        lines = [f"{self.kem_name}: {len(self.passed)} passed, {len(self.failed)} failed"]
        for name, reason in self.failed:
            lines.append(f"  FAIL {name}: {reason}")
        return "\n".join(lines)


class ConformanceError(AssertionError):
    """A provider broke one of the checked properties."""


def _require(condition: bool, message: str) -> None:
    # explicit raise so the checks still run under python -O
    if not condition:
        raise ConformanceError(message)


class _Checks:
    def __init__(self, enc: EncapsulatorSpi, dec: DecapsulatorSpi, trials: int, workers: int):
        self.enc = enc
        self.dec = dec
        self.trials = trials
        self.workers = workers

    def sizes_are_stable(self):
        expected = (self.enc.secret_size(), self.enc.encapsulation_size())
        _require(
            expected == (self.dec.secret_size(), self.dec.encapsulation_size()),
            "encapsulator and decapsulator disagree on sizes",
        )
        for _ in range(self.trials):
            self.enc.encapsulate()
            _require((self.enc.secret_size(), self.enc.encapsulation_size()) == expected, "encapsulator sizes changed")
            _require((self.dec.secret_size(), self.dec.encapsulation_size()) == expected, "decapsulator sizes changed")

    def round_trip(self):
        for _ in range(self.trials):
            result = self.enc.encapsulate()
            _require(len(result.key) == self.enc.secret_size(), "key does not span the full secret")
            _require(len(result.encapsulation) == self.enc.encapsulation_size(), "wrong message length")
            _require(self.dec.decapsulate(result.encapsulation) == result.key, "recovered secret differs")

    def encapsulation_is_fresh(self):
        first = self.enc.encapsulate()
        second = self.enc.encapsulate()
        _require(first.encapsulation != second.encapsulation, "two encapsulations share a message")
        _require(first.key != second.key, "two encapsulations share a secret")

    def decapsulation_is_deterministic(self):
        message = self.enc.encapsulate().encapsulation
        _require(
            self.dec.decapsulate(message) == self.dec.decapsulate(message),
            "decapsulating the same message twice gave different secrets",
        )

    def bad_ranges_are_boundary_errors(self):
        size = self.enc.secret_size()
        message = self.enc.encapsulate().encapsulation
        for start, end in ((-1, size), (1, 0), (0, size + 1)):
            for call in (
                lambda: self.enc.encapsulate(start, end),
                lambda: self.dec.decapsulate(message, start, end),
                # range errors win over a bad message
                lambda: self.dec.decapsulate(message[:-1], start, end),
            ):
                try:
                    call()
                except SecretRangeError:
                    continue
                except DecapsulateError:
                    raise ConformanceError(f"range [{start}, {end}) reported as a decapsulation failure")
                raise ConformanceError(f"range [{start}, {end}) was accepted")

    def wrong_length_is_decapsulation_failure(self):
        message = self.enc.encapsulate().encapsulation
        for bad in (message[:-1], message + b"\x00", b""):
            try:
                self.dec.decapsulate(bad)
            except DecapsulateError:
                continue
            raise ConformanceError(f"{len(bad)}-byte message was accepted")

    def tampering_is_not_silent(self):
        # either an explicit failure or (implicit rejection) an unrelated secret
        result = self.enc.encapsulate()
        tampered = bytearray(result.encapsulation)
        tampered[0] ^= 0x01
        try:
            recovered = self.dec.decapsulate(bytes(tampered))
        except DecapsulateError:
            return
        _require(recovered != result.key, "tampered message decapsulated to the original secret")

    def slicing_is_consistent_or_refused(self):
        size = self.enc.secret_size()
        if size < 2:
            return
        start, end, label = 1, size, "AES"
        if not self.enc.supports(start, end, label):
            try:
                self.enc.encapsulate(start, end, label)
            except UnsupportedCombinationError:
                return
            raise ConformanceError("unsupported combination was accepted")
        result = self.enc.encapsulate(start, end, label)
        _require(len(result.key) == end - start, "sliced key has the wrong length")
        _require(result.key.algorithm == label, "sliced key lost its algorithm label")
        _require(
            self.dec.decapsulate(result.encapsulation, start, end, label) == result.key,
            "sliced secret differs after decapsulation",
        )

    def concurrent_encapsulation(self):
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            results = list(pool.map(lambda _: self.enc.encapsulate(), range(self.workers * 2)))
        keys = {r.key.encoded for r in results}
        _require(len(keys) == len(results), "concurrent calls produced a repeated secret")
        for r in results:
            _require(len(r.encapsulation) == self.enc.encapsulation_size(), "concurrent call returned a bad message length")
            _require(self.dec.decapsulate(r.encapsulation) == r.key, "concurrent round trip failed")

    ORDER = (
        "sizes_are_stable",
        "round_trip",
        "encapsulation_is_fresh",
        "decapsulation_is_deterministic",
        "bad_ranges_are_boundary_errors",
        "wrong_length_is_decapsulation_failure",
        "tampering_is_not_silent",
        "slicing_is_consistent_or_refused",
        "concurrent_encapsulation",
    )


def check_conformance(
    kem: KEMSpi,
    public_key: Any,
    private_key: Any,
    params: Optional[Any] = None,
    trials: int = 4,
    workers: int = 8,
    rng: Optional[Callable[[int], bytes]] = None,
    name: Optional[str] = None,
) -> ConformanceReport:
    """Run every check against one key pair and return a report.

    A check that raises is recorded as failed with the exception text; the
    remaining checks still run.
    """
    report = ConformanceReport(name or kem.name or type(kem).__name__)
    checks = _Checks(
        kem.new_encapsulator(public_key, params, rng),
        kem.new_decapsulator(private_key, params),
        trials=trials,
        workers=workers,
    )
    for check_name in _Checks.ORDER:
        try:
            getattr(checks, check_name)()
        except ConformanceError as exc:
            report.failed.append((check_name, str(exc)))
        except Exception as exc:
            report.failed.append((check_name, f"{type(exc).__name__}: {exc}"))
        else:
            report.passed.append(check_name)
        logger.debug("%s: %s", report.kem_name, check_name)
    return report
