"""
Expired Registration Sweeper

Temporary registrations are already invisible once past their expiry; this
background task deletes them so the table does not grow without bound.
Runs every REGISTRATION_SWEEP_INTERVAL_MINUTES while the app is up.
"""

import asyncio
from typing import Callable, Optional

from app.core.config import settings
from app.core.database import get_session_local
from app.core.logging_config import logger
from app.services.registration_service import RegistrationService, registration_service


class RegistrationSweeper:
    """start() / stop() around a periodic sweep_expired()"""

    def __init__(
        self,
        service: Optional[RegistrationService] = None,
        interval_seconds: Optional[float] = None,
        session_factory: Optional[Callable] = None,
    ):
        self.service = service or registration_service
        self.interval_seconds = interval_seconds or settings.REGISTRATION_SWEEP_INTERVAL_MINUTES * 60
        self._session_factory = session_factory
        self._task: Optional[asyncio.Task] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start the sweep background task"""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._sweep_loop())
        logger.info("Registration sweeper started")

    async def stop(self):
        """Stop the sweep background task"""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Registration sweeper stopped")

    async def sweep_once(self) -> int:
        session_factory = self._session_factory or get_session_local()
        async with session_factory() as db:
            return await self.service.sweep_expired(db)

    async def _sweep_loop(self):
        while self._running:
            try:
                await self.sweep_once()
                await asyncio.sleep(self.interval_seconds)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in registration sweep: {e}")
                await asyncio.sleep(self.interval_seconds)


registration_sweeper = RegistrationSweeper()
