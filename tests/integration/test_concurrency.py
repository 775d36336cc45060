"""
Integration tests: many threads sharing one encapsulator/decapsulator.
No locks are taken anywhere in kemkit, so these exercise the read-only design.
"""

import threading

import pytest

from kemkit.core.kem import KEM
from kemkit.security.dhkem import generate_keypair
from kemkit.testing.mock import MockKEM, MockParameters, generate_mock_keypair


THREADS = 16
CALLS_PER_THREAD = 8


def _run_threads(target):
    errors = []
    barrier = threading.Barrier(THREADS)

    def worker():
        barrier.wait()
        try:
            target()
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(THREADS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return errors


@pytest.fixture(params=["DHKEM-X25519-HKDF-SHA256", "DHKEM-P256-HKDF-SHA256", "mock"])
def shared_pair(request):
    if request.param == "mock":
        private_key, public_key = generate_mock_keypair()
        params = MockParameters(32, 64)
        kem = MockKEM()
        return kem.new_encapsulator(public_key, params), kem.new_decapsulator(private_key, params)
    private_key, public_key = generate_keypair(request.param)
    kem = KEM.get_instance("DHKEM")
    return kem.new_encapsulator(public_key), kem.new_decapsulator(private_key)


def test_concurrent_encapsulate_gives_distinct_secrets(shared_pair):
    enc, dec = shared_pair
    results = []
    results_lock = threading.Lock()

    def target():
        local = [enc.encapsulate() for _ in range(CALLS_PER_THREAD)]
        with results_lock:
            results.extend(local)

    assert _run_threads(target) == []
    assert len(results) == THREADS * CALLS_PER_THREAD
    assert len({r.key.encoded for r in results}) == len(results)
    assert len({r.encapsulation for r in results}) == len(results)
    for r in results:
        assert len(r.key) == enc.secret_size()
        assert len(r.encapsulation) == enc.encapsulation_size()
        assert dec.decapsulate(r.encapsulation) == r.key


def test_concurrent_decapsulate_is_deterministic(shared_pair):
    enc, dec = shared_pair
    result = enc.encapsulate()
    seen = []
    seen_lock = threading.Lock()

    def target():
        keys = [dec.decapsulate(result.encapsulation) for _ in range(CALLS_PER_THREAD)]
        with seen_lock:
            seen.extend(keys)

    assert _run_threads(target) == []
    assert len(seen) == THREADS * CALLS_PER_THREAD
    assert all(k == result.key for k in seen)


def test_concurrent_failures_stay_opaque(shared_pair):
    _, dec = shared_pair
    messages = []
    lock = threading.Lock()
    short = b"\x00" * (dec.encapsulation_size() - 1)

    def target():
        for _ in range(CALLS_PER_THREAD):
            try:
                dec.decapsulate(short)
            except Exception as exc:
                with lock:
                    messages.append((type(exc).__name__, str(exc)))

    assert _run_threads(target) == []
    assert set(messages) == {("DecapsulateError", "decapsulation failed")}
