import argparse
import asyncio
import json
import logging
import sys
import time
from typing import List, Optional

from compliance_monitor.services.config import load_config
from compliance_monitor.services.logging import setup_logging
from compliance_monitor.workflows.compliance_run import ComplianceMonitor
from compliance_monitor.workflows.monitor_factory import create_monitor_from_config

logger = logging.getLogger(__name__)


async def run_once(monitor: ComplianceMonitor) -> int:
    start_time = time.perf_counter()
    logger.info("Running compliance check")

    result = await monitor.run()
    print(json.dumps(result.to_dict(), indent=2))

    logger.info(f"Processed {result.processed} alerts in {time.perf_counter() - start_time:.2f}s")
    return 0 if result.success else 1


async def show_alerts(monitor: ComplianceMonitor) -> int:
    alerts = await monitor.list_alerts()
    print(json.dumps([a.to_payload() for a in alerts], indent=2))
    return 0


async def forward(monitor: ComplianceMonitor, alert_ids: List[str]) -> int:
    result, missing = await monitor.forward_alerts(alert_ids)
    for alert_id in missing:
        logger.warning(f"Alert not found in log: {alert_id}")
    print(json.dumps({"status": result.status, "forwarded": result.forwarded, "message": result.message}))
    return 0 if result.status in ("sent", "not_configured") else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Trade compliance monitor')
    parser.add_argument('--config', default=None,
                        help='Path to config.yml (default: resources/config.yml)')
    parser.add_argument('--log-level', default='INFO',
                        help='Logging level (default: INFO)')

    sub = parser.add_subparsers(dest='command')
    sub.add_parser('run', help='Run one compliance check and print the summary')
    sub.add_parser('serve', help='Start the status API and scheduled checks')
    sub.add_parser('alerts', help='Print the alert log')
    forward_parser = sub.add_parser('forward', help='Re-forward logged alerts by id')
    forward_parser.add_argument('alert_ids', nargs='+')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level.upper())

    config = load_config(args.config)
    command = args.command or 'run'

    if command == 'serve':
        from compliance_monitor.web.run_server import run_server
        run_server(config)
        return 0

    monitor = create_monitor_from_config(config)

    if command == 'alerts':
        return asyncio.run(show_alerts(monitor))
    if command == 'forward':
        return asyncio.run(forward(monitor, args.alert_ids))
    return asyncio.run(run_once(monitor))


if __name__ == "__main__":
    sys.exit(main())
