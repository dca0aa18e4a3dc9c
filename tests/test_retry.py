import pytest

from pipeline.retry import RetryPolicy


def flaky(failures, result="ok"):
    calls = {"n": 0}

    def fn():
        calls["n"] += 1
        if calls["n"] <= failures:
            raise RuntimeError(f"failure {calls['n']}")
        return result

    return fn, calls


def test_backoff_doubles():
    policy = RetryPolicy()
    assert [policy.backoff(n) for n in (1, 2, 3)] == [1, 2, 4]


def test_succeeds_after_two_failures():
    sleeps = []
    fn, calls = flaky(2)
    assert RetryPolicy().call(fn, sleep=sleeps.append) == "ok"
    assert calls["n"] == 3
    assert sleeps == [1, 2]


def test_gives_up_with_last_error():
    sleeps = []
    fn, calls = flaky(5)
    with pytest.raises(RuntimeError, match="failure 3"):
        RetryPolicy(max_attempts=3).call(fn, sleep=sleeps.append)
    assert calls["n"] == 3
    assert sleeps == [1, 2]


def test_single_attempt_never_sleeps():
    sleeps = []
    fn, calls = flaky(1)
    with pytest.raises(RuntimeError):
        RetryPolicy(max_attempts=1).call(fn, sleep=sleeps.append)
    assert calls["n"] == 1
    assert sleeps == []


def test_sleeps_follow_backoff_schedule():
    class Flat(RetryPolicy):
        def backoff(self, attempt):
            return 7

    sleeps = []
    fn, _ = flaky(2)
    assert Flat().call(fn, sleep=sleeps.append) == "ok"
    assert sleeps == [7, 7]

    sleeps = []
    fn, _ = flaky(2)
    RetryPolicy(base_delay=0.5).call(fn, sleep=sleeps.append)
    assert sleeps == [0.5, 1.0]
