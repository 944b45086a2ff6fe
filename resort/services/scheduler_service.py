"""
Планировщик периодических задач
"""

import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from resort.core.config import settings

logger = logging.getLogger(__name__)


class SchedulerService:
    """Сервис для управления периодическими задачами"""

    def __init__(self):
        self.scheduler = AsyncIOScheduler()
        self._jobs_registered = False

    def register_jobs(self):
        if self._jobs_registered:
            logger.warning("Jobs already registered")
            return

        if settings.expiration_sweep_interval_minutes > 0:
            from resort.jobs.expiration_job import expire_stale_bookings_job

            self.scheduler.add_job(
                expire_stale_bookings_job,
                IntervalTrigger(minutes=settings.expiration_sweep_interval_minutes),
                id="expiration_sweep",
                name="Expire unpaid bookings",
                replace_existing=True,
            )
            logger.info(
                f"Registered expiration sweep "
                f"(every {settings.expiration_sweep_interval_minutes} minutes)"
            )
        else:
            logger.info("Expiration sweep disabled (interval = 0), expiring lazily on read")

        self._jobs_registered = True

    def start(self):
        if not self.scheduler.running:
            self.register_jobs()
            self.scheduler.start()
            logger.info("Scheduler started")
        else:
            logger.warning("Scheduler already running")

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Scheduler stopped")

    def get_jobs(self):
        return self.scheduler.get_jobs()


# Глобальный экземпляр
scheduler_service = SchedulerService()
