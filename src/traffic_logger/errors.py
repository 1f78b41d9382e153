"""Exception hierarchy for the traffic logger.

Every error here is fatal: nothing is retried, the collector drains its
output and the CLI exits non-zero after printing the message.
"""

from __future__ import annotations


class TrafficLoggerError(Exception):
    """Base class for all traffic logger failures."""


class ConfigurationError(TrafficLoggerError):
    """Invalid interval or unwritable output path, detected at startup."""


class EnumerationError(TrafficLoggerError):
    """The OS interface table could not be read."""


class WriteError(TrafficLoggerError):
    """Writing to the output stream failed mid-run."""
