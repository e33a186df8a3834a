from webaudit.engine.retry import AUDIT_PAGE_MAX_TRIES, RetryTracker  # type: ignore[import]


def test_always_failing_url_is_retried_five_times_then_recorded_once():
    tracker = RetryTracker()
    url = "https://app/down"

    decisions = [tracker.register_failure(url) for _ in range(AUDIT_PAGE_MAX_TRIES + 3)]

    assert decisions[:AUDIT_PAGE_MAX_TRIES] == [True] * 5
    assert not any(decisions[AUDIT_PAGE_MAX_TRIES:])
    assert tracker.failures == [url]


def test_success_resets_the_attempt_count():
    tracker = RetryTracker(max_tries=2)
    url = "https://app/flaky"

    tracker.register_failure(url)
    tracker.register_failure(url)
    tracker.register_success(url)

    assert tracker.attempts(url) == 0
    assert tracker.register_failure(url) is True
    assert tracker.failures == []


def test_failures_returns_a_copy():
    tracker = RetryTracker(max_tries=0)
    tracker.register_failure("https://app/x")

    tracker.failures.clear()

    assert tracker.failures == ["https://app/x"]
