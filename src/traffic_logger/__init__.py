"""Periodic per-interface network traffic logger.

Samples cumulative RX/TX byte counters for every network interface at a
fixed interval and appends them as timestamped rows to a CSV file.
"""

from traffic_logger.collector import Collector, run_collector
from traffic_logger.config import CollectorConfig

__all__ = ["Collector", "CollectorConfig", "run_collector"]
