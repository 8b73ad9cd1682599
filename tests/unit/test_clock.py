from datetime import UTC, datetime

from src.adapters.clock import SystemClock


def test_now_is_aware_utc():
    before = datetime.now(UTC)
    now = SystemClock().now_utc()
    assert now.tzinfo is UTC
    assert before <= now <= datetime.now(UTC)
