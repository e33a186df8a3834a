from datetime import datetime, timedelta

from webaudit.core.progress import UNKNOWN_ETA, compute_progress, eta  # type: ignore[import]


def test_progress_is_clamped_to_one_hundred():
    assert compute_progress(12, 10) == 100.0


def test_progress_without_sitemap_is_zero():
    assert compute_progress(3, 0) == 0.0


def test_progress_is_rounded():
    assert compute_progress(1, 3) == 33.33


def test_eta_unknown_without_progress():
    assert eta(0.0, datetime.now()) == UNKNOWN_ETA


def test_eta_extrapolates_elapsed_time():
    start = datetime(2024, 1, 1, 12, 0, 0)
    now = start + timedelta(minutes=10)

    assert eta(50.0, start, now) == "00:10:00"
