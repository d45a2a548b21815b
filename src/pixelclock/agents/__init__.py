"""Background agents that keep external data fresh.

Each agent owns one cache behind its own lock and refreshes it on a
StoppableThread.
"""

from .diagnostics import DiagnosticsAgent, DiagnosticsStatus, PingLevel
from .sensors import (
    AreaGrouping,
    AreaSensors,
    Measurement,
    SensorAgent,
    SensorProvider,
    SensorState,
    StateResponse,
)
from .weather import DayWeather, TwoDayWeather, WeatherAgent, WeatherOptions, WeatherProvider

__all__ = [
    "DiagnosticsAgent",
    "DiagnosticsStatus",
    "PingLevel",
    "AreaGrouping",
    "AreaSensors",
    "Measurement",
    "SensorAgent",
    "SensorProvider",
    "SensorState",
    "StateResponse",
    "DayWeather",
    "TwoDayWeather",
    "WeatherAgent",
    "WeatherOptions",
    "WeatherProvider",
]
