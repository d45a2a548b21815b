"""HTTP clients for the external data providers."""

from .homeassistant import HomeAssistantClient
from .tomorrowio import TomorrowIOClient

__all__ = ["HomeAssistantClient", "TomorrowIOClient"]
