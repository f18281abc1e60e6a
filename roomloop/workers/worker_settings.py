"""ARQ Worker Settings and Configuration."""

import structlog
from arq import cron
from arq.connections import RedisSettings

from roomloop.core.config import settings
from roomloop.core.database import AsyncSessionLocal, engine
from roomloop.core.logging_config import configure_logging
from roomloop.workers.tasks import advance_room_lifecycle

logger = structlog.get_logger(__name__)


async def startup(ctx: dict) -> None:
    """Initialize resources on worker startup."""
    configure_logging(debug=settings.debug, json_logs=settings.log_json)
    ctx["session_factory"] = AsyncSessionLocal
    logger.info("arq_worker_started", redis_url=settings.redis_url)


async def shutdown(ctx: dict) -> None:
    """Clean up resources on worker shutdown."""
    await engine.dispose()
    logger.info("arq_worker_stopped")


class WorkerSettings:
    """ARQ worker configuration. Run with `arq roomloop.workers.worker_settings.WorkerSettings`."""

    functions = [advance_room_lifecycle]

    # Once a minute, on the minute
    cron_jobs = [cron(advance_room_lifecycle, second=0, run_at_startup=True, unique=True)]

    redis_settings = RedisSettings.from_dsn(settings.redis_url)

    on_startup = startup
    on_shutdown = shutdown

    max_jobs = 10
    job_timeout = 60
    keep_result = 3600

    max_tries = 1
