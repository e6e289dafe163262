"""
Tests for the settlement job wrapper.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from edutrack.modules.payments import jobs


def _session_maker(session):
    maker = MagicMock()
    maker.return_value.__aenter__.return_value = session
    return MagicMock(return_value=maker)


@pytest.mark.asyncio
async def test_settlement_commits():
    """Commit the session after a settlement run."""
    session = AsyncMock()

    with (
        patch("edutrack.modules.payments.jobs.get_session_maker", _session_maker(session)),
        patch(
            "edutrack.modules.payments.jobs.service.settle_school_transfers",
            AsyncMock(return_value=3),
        ),
    ):
        assert await jobs.settle_school_transfers() == 3

    session.commit.assert_awaited_once()
    session.rollback.assert_not_awaited()


@pytest.mark.asyncio
async def test_settlement_rolls_back_on_error():
    """Roll back and re-raise when the run fails."""
    session = AsyncMock()

    with (
        patch("edutrack.modules.payments.jobs.get_session_maker", _session_maker(session)),
        patch(
            "edutrack.modules.payments.jobs.service.settle_school_transfers",
            AsyncMock(side_effect=RuntimeError("db down")),
        ),
    ):
        with pytest.raises(RuntimeError):
            await jobs.settle_school_transfers()

    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()


def test_register_payment_jobs():
    """Register the settlement job under its fixed id."""
    with patch("edutrack.modules.payments.jobs.register_job") as mock_register:
        jobs.register_payment_jobs()

    kwargs = mock_register.call_args.kwargs
    assert kwargs["job_id"] == "payments_settle_school_transfers"
    assert kwargs["func"] is jobs.settle_school_transfers
