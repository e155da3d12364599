import logging
from unittest.mock import AsyncMock, call

import pytest

from pagedrain.domain.events.batch_events import RetriesExhausted, RetryScheduled
from pagedrain.infrastructure.config.settings import set_config_for_testing
from pagedrain.infrastructure.resilience.retry import (
    backoff_delay, backoff_policy_from_config, retry_with_backoff, with_retry
)


@pytest.fixture
def mock_sleep(mocker):
    """Replaces the backoff sleep so tests run instantly and can inspect delays."""
    return mocker.patch(
        "pagedrain.infrastructure.resilience.retry.asyncio.sleep", new_callable=AsyncMock
    )


@pytest.mark.asyncio
async def test_always_failing_operation_runs_max_retries_plus_one_times(mock_sleep):
    error = ConnectionError("still down")
    operation = AsyncMock(side_effect=error)

    with pytest.raises(ConnectionError) as exc_info:
        await retry_with_backoff(operation, max_retries=3, base_delay=0.5)

    assert exc_info.value is error
    assert operation.await_count == 4
    assert mock_sleep.await_args_list == [call(0.5), call(1.0), call(2.0)]

@pytest.mark.asyncio
async def test_backoff_waits_500_then_1000_before_success(mock_sleep):
    operation = AsyncMock(side_effect=[TimeoutError("t0"), TimeoutError("t1"), "ok"])

    result = await retry_with_backoff(operation, max_retries=5, base_delay=500)

    assert result == "ok"
    assert operation.await_count == 3
    assert mock_sleep.await_args_list == [call(500), call(1000)]

@pytest.mark.asyncio
async def test_success_on_first_attempt_does_not_sleep(mock_sleep):
    operation = AsyncMock(return_value=42)

    assert await retry_with_backoff(operation) == 42
    operation.assert_awaited_once_with()
    mock_sleep.assert_not_awaited()

@pytest.mark.asyncio
async def test_only_last_error_is_surfaced(mock_sleep):
    operation = AsyncMock(side_effect=[ValueError("first"), KeyError("second"), RuntimeError("last")])

    with pytest.raises(RuntimeError, match="last"):
        await retry_with_backoff(operation, max_retries=2, base_delay=0.1)

@pytest.mark.asyncio
async def test_non_retryable_error_propagates_immediately(mock_sleep):
    operation = AsyncMock(side_effect=ValueError("bad request"))

    with pytest.raises(ValueError, match="bad request"):
        await retry_with_backoff(operation, retryable_exceptions=(ConnectionError,))

    assert operation.await_count == 1
    mock_sleep.assert_not_awaited()

@pytest.mark.asyncio
async def test_zero_retries_means_single_attempt(mock_sleep):
    operation = AsyncMock(side_effect=OSError("nope"))

    with pytest.raises(OSError):
        await retry_with_backoff(operation, max_retries=0)

    assert operation.await_count == 1
    mock_sleep.assert_not_awaited()

@pytest.mark.asyncio
@pytest.mark.parametrize("kwargs", [{"max_retries": -1}, {"base_delay": -0.1}])
async def test_rejects_negative_budget(kwargs, mock_sleep):
    operation = AsyncMock()
    with pytest.raises(ValueError):
        await retry_with_backoff(operation, **kwargs)
    operation.assert_not_awaited()

@pytest.mark.asyncio
async def test_exhaustion_is_logged_with_error_message(mock_sleep, caplog):
    operation = AsyncMock(side_effect=ConnectionError("redis gone"))

    with caplog.at_level(logging.WARNING, logger="pagedrain.infrastructure.resilience.retry"):
        with pytest.raises(ConnectionError):
            await retry_with_backoff(operation, max_retries=1, base_delay=0.5)

    errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
    assert errors == ["Max retries reached. Operation failed: redis gone"]
    assert any("Retrying after 0.50s" in r.getMessage() for r in caplog.records)

@pytest.mark.asyncio
async def test_retry_events_are_reported(mock_sleep):
    events = []
    operation = AsyncMock(side_effect=ConnectionError("down"))

    with pytest.raises(ConnectionError):
        await retry_with_backoff(operation, max_retries=2, base_delay=1, on_event=events.append)

    assert [type(e) for e in events] == [RetryScheduled, RetryScheduled, RetriesExhausted]
    assert [e.delay_seconds for e in events[:2]] == [1, 2]
    assert events[-1].attempts == 3
    assert events[-1].error_message == "down"

@pytest.mark.asyncio
async def test_with_retry_reinvokes_with_same_arguments(mock_sleep):
    calls = []

    async def fetch_page(offset, limit):
        calls.append((offset, limit))
        if len(calls) == 1:
            raise ConnectionError("blip")
        return ["row"] * limit

    wrapped = with_retry(fetch_page, max_retries=2, base_delay=0.25)

    assert await wrapped(10, 2) == ["row", "row"]
    assert calls == [(10, 2), (10, 2)]
    assert wrapped.__name__ == "fetch_page"
    mock_sleep.assert_awaited_once_with(0.25)

def test_backoff_delay_doubles_per_attempt():
    assert [backoff_delay(k, 0.5) for k in range(4)] == [0.5, 1.0, 2.0, 4.0]

def test_backoff_policy_reads_settings():
    set_config_for_testing({"retry.max_retries": 2, "retry.base_delay": 0.05})
    assert backoff_policy_from_config() == {"max_retries": 2, "base_delay": 0.05}
