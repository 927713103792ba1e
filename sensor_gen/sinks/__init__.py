"""Output sinks for the sensor generator.

Import the sink you need directly from this package::

    from sensor_gen.sinks import ConsoleSink, FileSink
"""

from __future__ import annotations

from sensor_gen.sinks.base import Sink, SinkUnavailableError
from sensor_gen.sinks.console import ConsoleSink
from sensor_gen.sinks.file import FileSink

__all__ = [
    "ConsoleSink",
    "FileSink",
    "Sink",
    "SinkUnavailableError",
]
