import asyncio

import pytest

from debounce.outcome import SUPERSEDED, Failed, Fired, Superseded, settle


class TestSettle:
    """Test delivering outcomes to plain futures."""

    @pytest.mark.asyncio
    async def test_fired_resolves(self):
        """Test that Fired resolves the future with its value."""
        future = asyncio.get_running_loop().create_future()
        settle(future, Fired(3))
        assert await future == 3

    @pytest.mark.asyncio
    async def test_failed_rejects(self):
        """Test that Failed rejects the future with its error."""
        future = asyncio.get_running_loop().create_future()
        settle(future, Failed(ValueError('boom')))
        with pytest.raises(ValueError, match='boom'):
            await future

    @pytest.mark.asyncio
    async def test_failed_with_cancellation_cancels(self):
        """Test that a cancelled awaitable cancels the future rather than rejecting it."""
        future = asyncio.get_running_loop().create_future()
        settle(future, Failed(asyncio.CancelledError()))
        assert future.cancelled()

    @pytest.mark.asyncio
    async def test_superseded_leaves_pending(self):
        """Test that Superseded leaves the future unsettled."""
        future = asyncio.get_running_loop().create_future()
        settle(future, SUPERSEDED)
        assert not future.done()

    @pytest.mark.asyncio
    async def test_done_future_is_left_alone(self):
        """Test that an already-cancelled future doesn't cause an error."""
        future = asyncio.get_running_loop().create_future()
        future.cancel()
        settle(future, Fired(1))
        assert future.cancelled()


def test_outcomes_compare_by_value():
    """Test that outcomes can be compared directly in assertions."""
    error = ValueError()
    assert Fired(1) == Fired(1)
    assert Fired(1) != Fired(2)
    assert Failed(error) == Failed(error)
    assert Superseded() == SUPERSEDED
