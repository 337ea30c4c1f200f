"""Helpers shared by the ARQ workers.

Workers read their Redis connection from REDIS_URL and schedule jobs with
``cron``; this module keeps both in one place so every worker agrees.
"""

from urllib.parse import urlparse

from arq import cron
from arq.connections import RedisSettings
from arq.cron import CronJob
from libs.common.config import get_settings


def get_redis_settings(redis_url: str | None = None) -> RedisSettings:
    """Build ARQ RedisSettings from a redis:// URL (REDIS_URL by default)."""
    parsed = urlparse(redis_url or get_settings().REDIS_URL)
    database = parsed.path.lstrip("/") or "0"

    return RedisSettings(
        host=parsed.hostname or "localhost",
        port=parsed.port or 6379,
        database=int(database),
        password=parsed.password,
        ssl=parsed.scheme == "rediss",
    )


def daily_at(coroutine, hour: int, minute: int = 0) -> CronJob:
    """Run ``coroutine`` once a day at ``hour:minute`` UTC."""
    return cron(coroutine, hour={hour}, minute={minute}, run_at_startup=False)
