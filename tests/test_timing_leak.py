import pytest

from attacks.timing_leak import measure, recover_secret, trials_for_jitter
from oracles.timing_server import TimingServer


def test_trials_for_jitter():
    assert trials_for_jitter(50, 0, 20) == 1
    assert trials_for_jitter(50, 10, 20) == 21
    assert trials_for_jitter(50, 25, 20) > trials_for_jitter(50, 10, 20)
    with pytest.raises(ValueError):
        trials_for_jitter(0, 1, 20)


def test_insecure_compare_stops_at_first_mismatch():
    server = TimingServer(b"k", base_time=50, jitter=0)
    assert server.insecure_compare(b"abcd", b"abcd") == (True, 200)
    assert server.insecure_compare(b"abXd", b"abcd") == (False, 150)
    assert server.insecure_compare(b"Xbcd", b"abcd") == (False, 50)
    assert server.comparisons == 3


def test_measure_returns_early_on_match():
    server = TimingServer(b"k", jitter=0)
    compare = server.compare_for(b"foo")
    assert measure(compare, server.signature(b"foo"), 10) == (True, 1000.0)
    assert server.comparisons == 1


def test_noiseless_recovery_is_exact():
    server = TimingServer(b"secret key", base_time=50, jitter=0)
    recovered, trace = recover_secret(server.compare_for(b"foo"), 20, return_trace=True)
    assert recovered == server.signature(b"foo")
    assert server.verify(b"foo", recovered)[0]
    assert len(trace) == 20 and trace[-1].exact
    assert all(entry.margin >= 50 for entry in trace[:-1])


def test_noisy_recovery_with_averaging():
    server = TimingServer(b"secret key", base_time=50, jitter=10, seed=7)
    trials = trials_for_jitter(50, 10, 20)
    recovered = recover_secret(server.compare_for(b"bar"), 20, trials=trials)
    assert recovered == server.signature(b"bar")
