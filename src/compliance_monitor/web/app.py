"""
Status and control API for the compliance monitor.
Uses Quart so run triggers and health checks share the monitor's event loop.
"""
import logging
from typing import Optional

from quart import Quart, jsonify, request
from quart_cors import cors

from compliance_monitor.services.scheduler import PeriodicScheduler
from compliance_monitor.workflows.compliance_run import ComplianceMonitor

logger = logging.getLogger(__name__)

INDEX_HTML = """<!doctype html>
<html>
  <head><title>Compliance Monitor Service</title></head>
  <body style="font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; padding: 20px;">
    <h1>Compliance Monitor Service</h1>
    <p>Service is running. Checks are performed every {interval} minutes.</p>
    <h2>API Endpoints:</h2>
    <ul>
      <li><code>GET /health</code> - Health check</li>
      <li><code>POST /run</code> - Run a compliance check now</li>
      <li><code>GET /alerts</code> - Alert log</li>
      <li><code>GET /processed</code> - Processed alert ids</li>
      <li><code>GET|POST /config/forwarding</code> - Downstream endpoint</li>
      <li><code>POST /forward</code> - Re-forward logged alerts</li>
    </ul>
  </body>
</html>
"""


def create_app(monitor: ComplianceMonitor, scheduler: Optional[PeriodicScheduler] = None) -> Quart:
    app = Quart(__name__)
    app = cors(app, allow_origin="*")

    app.config["MONITOR"] = monitor
    app.config["SCHEDULER"] = scheduler

    @app.route('/')
    async def index():
        interval = scheduler.interval_minutes if scheduler else "-"
        return INDEX_HTML.format(interval=interval), 200, {"Content-Type": "text/html"}

    @app.route('/health')
    async def health():
        next_run = scheduler.next_run_at if scheduler else None
        return jsonify(monitor.health(next_run=next_run))

    @app.route('/run', methods=['GET', 'POST'])
    async def run_now():
        """Run one cycle immediately and return its summary."""
        result = await monitor.run()
        body = result.to_dict()
        if result.skipped:
            return jsonify(body), 409
        if not result.success:
            return jsonify(body), 500
        return jsonify(body)

    @app.route('/alerts')
    async def list_alerts():
        alerts = await monitor.list_alerts()
        return jsonify({
            'count': len(alerts),
            'alerts': [a.to_payload() for a in alerts],
        })

    @app.route('/processed')
    async def list_processed():
        ids = await monitor.list_processed_ids()
        return jsonify({'count': len(ids), 'processedIds': ids})

    @app.route('/config/forwarding', methods=['GET', 'POST'])
    async def forwarding_config():
        if request.method == 'POST':
            data = await request.get_json(silent=True) or {}
            endpoint = (data.get('endpoint') or '').strip() or None
            monitor.configure_forwarding(endpoint, data.get('secret'))
        return jsonify({
            'endpoint': monitor.forwarding_endpoint,
            'configured': bool(monitor.forwarding_endpoint),
        })

    @app.route('/forward', methods=['POST'])
    async def forward_alerts():
        """Re-send named alerts from the log, e.g. to test a new endpoint."""
        data = await request.get_json(silent=True) or {}
        alert_ids = data.get('alertIds') or []
        if not isinstance(alert_ids, list) or not alert_ids:
            return jsonify({'status': 'error', 'message': 'alertIds must be a non-empty list'}), 400

        result, missing = await monitor.forward_alerts(str(i) for i in alert_ids)
        body = {
            'status': result.status,
            'forwarded': result.forwarded,
            'message': result.message,
            'missing': missing,
        }
        if result.status == 'skipped':
            return jsonify(body), 404
        if result.status == 'error':
            return jsonify(body), 502
        return jsonify(body)

    @app.errorhandler(404)
    async def not_found(error):
        return jsonify({'status': 'error', 'message': 'Not found'}), 404

    return app
