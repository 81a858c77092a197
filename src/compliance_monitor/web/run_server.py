"""
Starts the status API together with the recurring compliance check.
"""
import asyncio
import logging

from hypercorn.asyncio import serve
from hypercorn.config import Config as HypercornConfig
from quart import Quart

from compliance_monitor.services.config import Config
from compliance_monitor.services.scheduler import PeriodicScheduler
from compliance_monitor.web.app import create_app
from compliance_monitor.workflows.monitor_factory import create_monitor_from_config

logger = logging.getLogger(__name__)


def build_app(config: Config) -> Quart:
    """Monitor, scheduler and web app wired together; the scheduler follows the app lifecycle."""
    monitor = create_monitor_from_config(config)
    scheduler = PeriodicScheduler(
        monitor.run,
        interval_minutes=config.CHECK_INTERVAL_MINUTES,
        run_on_startup=config.RUN_ON_STARTUP,
    )
    app = create_app(monitor, scheduler)

    @app.before_serving
    async def startup():
        await monitor.store.initialize()
        scheduler.start()
        logger.info(f"Compliance monitor started; checks every {config.CHECK_INTERVAL_MINUTES} minutes")

    @app.after_serving
    async def shutdown():
        # Waits for an in-flight run so persistence is not cut off mid-write.
        await scheduler.stop()

    return app


def run_server(config: Config) -> None:
    app = build_app(config)

    hypercorn_config = HypercornConfig()
    hypercorn_config.bind = [f"{config.HOST}:{config.PORT}"]
    hypercorn_config.accesslog = '-'
    hypercorn_config.errorlog = '-'

    logger.info(f"Starting Compliance Monitor on http://{config.HOST}:{config.PORT}")
    asyncio.run(serve(app, hypercorn_config))
