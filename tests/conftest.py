from collections.abc import Iterator
from datetime import datetime
from typing import Any

import pytest
from loguru import logger


@pytest.fixture
def parse_error() -> ValueError:
    """Return a real error raised by the standard library."""
    try:
        datetime.fromisoformat("2025-06-07T25:06:07")
    except ValueError as exc:
        return exc
    raise AssertionError("expected fromisoformat to fail")  # pragma: no cover


@pytest.fixture
def trace_hex() -> str:
    return "0123456789abcdef0123456789abcdef"


@pytest.fixture
def log_records() -> Iterator[list[dict[str, Any]]]:
    """Collect loguru records emitted while the test runs."""
    records: list[dict[str, Any]] = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(sink_id)
