"""Unit tests for the async retry decorator."""

from unittest.mock import AsyncMock, patch

import pytest

from pap.utils.retry import with_retry


class CustomError(Exception):
    pass


class NonRetryableError(Exception):
    pass


@pytest.mark.asyncio
async def test_retry_succeeds_on_first_attempt():
    """No retry needed when the coroutine succeeds."""
    mock_func = AsyncMock(return_value="success")
    decorated = with_retry(max_attempts=3)(mock_func)

    assert await decorated() == "success"
    assert mock_func.await_count == 1


@pytest.mark.asyncio
async def test_retry_succeeds_after_failures():
    """Coroutine succeeds after 2 failures."""
    mock_func = AsyncMock(side_effect=[CustomError(), CustomError(), "success"])
    decorated = with_retry(max_attempts=3, initial_delay=0.01, retry_on=(CustomError,))(mock_func)

    assert await decorated() == "success"
    assert mock_func.await_count == 3


@pytest.mark.asyncio
async def test_retry_exhausts_max_attempts():
    """Raises the last error after max attempts."""
    mock_func = AsyncMock(side_effect=CustomError("persistent failure"))
    decorated = with_retry(max_attempts=3, initial_delay=0.01, retry_on=(CustomError,))(mock_func)

    with pytest.raises(CustomError, match="persistent failure"):
        await decorated()

    assert mock_func.await_count == 3


@pytest.mark.asyncio
async def test_retry_reraises_immediately():
    """Exceptions listed in reraise_on skip retrying."""
    mock_func = AsyncMock(side_effect=NonRetryableError("do not retry"))
    decorated = with_retry(
        max_attempts=3,
        retry_on=(Exception,),
        reraise_on=(NonRetryableError,),
    )(mock_func)

    with pytest.raises(NonRetryableError, match="do not retry"):
        await decorated()

    assert mock_func.await_count == 1


@pytest.mark.asyncio
async def test_unlisted_errors_propagate():
    mock_func = AsyncMock(side_effect=KeyError("boom"))
    decorated = with_retry(max_attempts=3, retry_on=(CustomError,))(mock_func)

    with pytest.raises(KeyError):
        await decorated()

    assert mock_func.await_count == 1


@pytest.mark.asyncio
async def test_retry_exponential_backoff():
    """Delays double per retry when jitter is off."""
    mock_func = AsyncMock(side_effect=[CustomError(), CustomError(), CustomError(), "success"])
    decorated = with_retry(
        max_attempts=4,
        initial_delay=0.1,
        exponential_base=2.0,
        jitter=False,
        retry_on=(CustomError,),
    )(mock_func)

    with patch("pap.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
        assert await decorated() == "success"

    assert [c.args[0] for c in sleep.await_args_list] == pytest.approx([0.1, 0.2, 0.4])


@pytest.mark.asyncio
async def test_retry_respects_max_delay():
    """A single delay never exceeds max_delay."""
    mock_func = AsyncMock(side_effect=[CustomError()] * 5 + ["success"])
    decorated = with_retry(
        max_attempts=6,
        initial_delay=10.0,
        max_delay=0.1,
        jitter=False,
        retry_on=(CustomError,),
    )(mock_func)

    with patch("pap.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
        await decorated()

    assert all(c.args[0] == pytest.approx(0.1) for c in sleep.await_args_list)


@pytest.mark.asyncio
async def test_retry_with_jitter_stays_in_band():
    mock_func = AsyncMock(side_effect=[CustomError()] * 3 + ["success"])
    decorated = with_retry(max_attempts=4, initial_delay=1.0, max_delay=1.0, retry_on=(CustomError,))(mock_func)

    with patch("pap.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
        await decorated()

    assert all(0.5 <= c.args[0] <= 1.5 for c in sleep.await_args_list)


def test_wraps_preserves_name():
    @with_retry()
    async def fetch_claims():
        return []

    assert fetch_claims.__name__ == "fetch_claims"
