"""ARQ worker for matrimony background jobs.

Run with: arq services.matrimony_service.worker.WorkerSettings
"""

from libs.common.arq_config import daily_at, get_redis_settings
from libs.common.config import get_settings
from libs.common.logging import configure_logging, get_logger

logger = get_logger(__name__)
settings = get_settings()


# ── Wrapper functions (ARQ requires top-level async callables) ──


async def task_cleanup_scheduled_profiles(ctx: dict):
    """Delete profiles whose scheduled deletion date has passed."""
    from services.matrimony_service.tasks import cleanup_scheduled_profiles

    logger.info("Running: cleanup_scheduled_profiles")
    await cleanup_scheduled_profiles()


async def startup(ctx: dict):
    configure_logging()
    logger.info("Matrimony worker started")


# ── Worker configuration ──


class WorkerSettings:
    """ARQ worker settings with cron job schedules."""

    redis_settings = get_redis_settings()
    on_startup = startup

    functions = [task_cleanup_scheduled_profiles]

    cron_jobs = [
        # Daily (2 AM UTC by default)
        daily_at(task_cleanup_scheduled_profiles, hour=settings.MATRIMONY_CLEANUP_HOUR),
    ]
