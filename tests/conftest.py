from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import Mock, patch

import httpx
import pytest

from arelay.letter import InMemoryDeadLetterSink

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def mock_sleep() -> Generator[Mock, None, None]:
    """Patch time.sleep to make tests run faster."""
    with patch("time.sleep", return_value=None) as mock:
        yield mock


@pytest.fixture
def mock_asleep() -> Generator[Mock, None, None]:
    """Patch asyncio.sleep to make tests run faster."""
    with patch("asyncio.sleep", return_value=None) as mock:
        yield mock


@pytest.fixture
def sink() -> InMemoryDeadLetterSink:
    """Create an empty in-memory dead letter sink."""
    return InMemoryDeadLetterSink()


@pytest.fixture
def wire_request() -> httpx.Request:
    """Create a wire request for executor tests."""
    return httpx.Request("POST", "http://localhost:3000/orders", content=b'{"id": 1}')
