"""
Workflows module - Orchestration of the compliance polling cycle.
"""
from compliance_monitor.workflows.compliance_run import ComplianceMonitor

__all__ = [
    "ComplianceMonitor",
]
