"""ARQ worker for attendance background tasks.

Run with: arq services.attendance_service.worker.WorkerSettings

Day-end runs are enqueued by the institution's scheduler or by an operator:
    await redis.enqueue_job("task_run_day_end_reports", "2025-03-13")
"""

from typing import Optional

from arq.connections import RedisSettings
from libs.common.config import get_settings
from libs.common.logging import configure_logging, get_logger
from libs.db.config import dispose_engine

logger = get_logger(__name__)


async def startup(ctx: dict):
    configure_logging()


async def shutdown(ctx: dict):
    await dispose_engine()


async def task_run_day_end_reports(
    ctx: dict, date: Optional[str] = None, dry_run: bool = False
) -> dict:
    """Auto-complete attendance and send day-end reports for one date."""
    from services.attendance_service.tasks import run_day_end_reports

    logger.info(f"Running: run_day_end_reports date={date or 'today'} dry_run={dry_run}")
    summary = await run_day_end_reports(date, dry_run=dry_run)
    return summary.model_dump() if summary else {}


class WorkerSettings:
    """ARQ worker settings."""

    redis_settings = RedisSettings.from_dsn(get_settings().REDIS_URL)

    functions = [task_run_day_end_reports]

    on_startup = startup
    on_shutdown = shutdown
