"""
Unit tests for the upstream health gauge in webcivics.webcard.model.health
"""

import pytest

from webcivics.webcard.model.health import UpstreamHealth


class TestUpstreamHealth:
    """Test suite for UpstreamHealth."""

    @pytest.mark.asyncio
    async def test_healthy_by_default(self):
        assert await UpstreamHealth().is_healthy() is True

    @pytest.mark.asyncio
    async def test_failures_above_threshold(self):
        health = UpstreamHealth(threshold=2)

        await health.record_failure()
        await health.record_failure()
        assert await health.is_healthy() is True

        assert await health.record_failure() == 3
        assert await health.is_healthy() is False

    @pytest.mark.asyncio
    async def test_tick_decays(self):
        health = UpstreamHealth(failures=3, threshold=2)

        await health.tick()
        assert await health.is_healthy() is True

    @pytest.mark.asyncio
    async def test_tick_stops_at_zero(self):
        health = UpstreamHealth(threshold=0)

        await health.tick()
        await health.record_failure()
        assert await health.is_healthy() is False
