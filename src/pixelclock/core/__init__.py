"""Core infrastructure module.

Provides foundational components:
- Configuration loading with validation
- Custom exception hierarchy
- Structured logging
- Thread-safe primitives and frame channels
"""

from .config import Config, load_config
from .errors import (
    PixelClockError,
    ConfigurationError,
    HardwareError,
    APIError,
    ValidationError,
)
from .logging import setup_logging, get_logger
from .threading import (
    AtomicCounter,
    Channel,
    ChannelClosed,
    ReadWriteLock,
    StoppableThread,
)

__all__ = [
    # Config
    "Config",
    "load_config",
    # Errors
    "PixelClockError",
    "ConfigurationError",
    "HardwareError",
    "APIError",
    "ValidationError",
    # Logging
    "setup_logging",
    "get_logger",
    # Threading
    "AtomicCounter",
    "Channel",
    "ChannelClosed",
    "ReadWriteLock",
    "StoppableThread",
]
