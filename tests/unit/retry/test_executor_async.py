r"""Unit tests for asynchronous retry executor."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, Mock, call

import httpx
import pytest

from arelay.exceptions import RequestCancelledError, TransportFailedError
from arelay.retry import AsyncRetryExecutor, RetryState

URL = "http://localhost:3000/orders"


def create_response(status_code: int) -> Mock:
    return Mock(spec=httpx.Response, status_code=status_code)


def test_async_retry_executor_creation() -> None:
    """Test AsyncRetryExecutor initialization."""
    executor = AsyncRetryExecutor(max_retries=4)

    assert executor.max_retries == 4
    assert executor.strategy is not None
    assert executor.decider.max_retries == 4


@pytest.mark.asyncio
async def test_async_retry_executor_successful_request(
    mock_asleep: Mock, wire_request: httpx.Request
) -> None:
    response = create_response(200)
    send = AsyncMock(return_value=response)

    outcome = await AsyncRetryExecutor().execute(wire_request, send=send, url=URL)

    assert outcome.state is RetryState.SUCCESS
    assert outcome.response is response
    assert outcome.attempts == 1
    send.assert_awaited_once_with(wire_request)
    mock_asleep.assert_not_called()


@pytest.mark.asyncio
async def test_async_retry_executor_retry_then_success(
    mock_asleep: Mock, wire_request: httpx.Request
) -> None:
    fail = create_response(500)
    success = create_response(200)
    send = AsyncMock(side_effect=[fail, success])

    outcome = await AsyncRetryExecutor(max_retries=2).execute(wire_request, send=send)

    assert outcome.state is RetryState.SUCCESS
    assert outcome.response is success
    assert outcome.attempts == 2
    fail.aclose.assert_awaited_once()
    assert wire_request.headers["X-Retry"] == "1"
    mock_asleep.assert_called_once_with(1.5)


@pytest.mark.asyncio
@pytest.mark.parametrize("max_retries", [0, 2, 3])
async def test_async_retry_executor_exhausted(
    mock_asleep: Mock, wire_request: httpx.Request, max_retries: int
) -> None:
    markers = []

    async def send(request: httpx.Request) -> httpx.Response:
        markers.append(request.headers.get("X-Retry"))
        return create_response(503)

    outcome = await AsyncRetryExecutor(max_retries=max_retries).execute(wire_request, send=send)

    assert outcome.state is RetryState.EXHAUSTED
    assert outcome.attempts == max_retries + 1
    assert markers == [None] + [str(n) for n in range(1, max_retries + 1)]
    assert mock_asleep.call_count == max_retries


@pytest.mark.asyncio
async def test_async_retry_executor_backoff_delays(
    mock_asleep: Mock, wire_request: httpx.Request
) -> None:
    send = AsyncMock(return_value=create_response(500))

    await AsyncRetryExecutor(max_retries=3).execute(wire_request, send=send)

    assert mock_asleep.call_args_list == [call(1.5), call(2.25), call(3.375)]


@pytest.mark.asyncio
async def test_async_retry_executor_transport_error_is_not_retried(
    mock_asleep: Mock, wire_request: httpx.Request
) -> None:
    error = httpx.ConnectError("Connection refused")
    send = AsyncMock(side_effect=error)

    with pytest.raises(TransportFailedError, match=r"Connection refused") as exc_info:
        await AsyncRetryExecutor(max_retries=3).execute(wire_request, send=send, url=URL)

    assert exc_info.value.__cause__ is error
    send.assert_awaited_once()
    mock_asleep.assert_not_called()


@pytest.mark.asyncio
async def test_async_retry_executor_cancelled_before_first_attempt(
    wire_request: httpx.Request,
) -> None:
    cancel = asyncio.Event()
    cancel.set()
    send = AsyncMock()

    with pytest.raises(RequestCancelledError, match=r"before attempt 1"):
        await AsyncRetryExecutor().execute(wire_request, send=send, cancel=cancel)

    send.assert_not_awaited()


@pytest.mark.asyncio
async def test_async_retry_executor_cancelled_during_backoff(
    wire_request: httpx.Request,
) -> None:
    cancel = asyncio.Event()

    async def send(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        cancel.set()
        return create_response(500)

    with pytest.raises(RequestCancelledError, match=r"during backoff") as exc_info:
        await AsyncRetryExecutor(max_retries=3).execute(wire_request, send=send, cancel=cancel)

    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_async_retry_executor_cancelled_while_waiting(
    wire_request: httpx.Request,
) -> None:
    cancel = asyncio.Event()
    send = AsyncMock(return_value=create_response(500))
    executor = AsyncRetryExecutor(max_retries=3)

    task = asyncio.create_task(executor.execute(wire_request, send=send, cancel=cancel))
    await asyncio.sleep(0.05)
    cancel.set()

    with pytest.raises(RequestCancelledError):
        await task
    send.assert_awaited_once()
