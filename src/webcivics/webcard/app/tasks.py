import asyncio
import logging
from typing import NoReturn

from aiohttp import web

from webcivics.webcard.app.config import HealthGaugeAppKey

logger = logging.getLogger(__name__)

HEALTH_TICK_SECONDS = 30


async def tick_health_task(app: web.Application) -> NoReturn:
    """
    Decay the upstream failure count by 1 every 30 seconds.
    """

    logger.info("Starting health gauge task")

    health_gauge = app[HealthGaugeAppKey]
    while True:
        await health_gauge.tick()
        await asyncio.sleep(HEALTH_TICK_SECONDS)
