"""
Trade compliance monitor: turns trade-restriction news into structured alerts.
"""

__version__ = "0.1.0"
