"""Remote sensor cache grouped by area.

At startup the agent asks the provider which area each configured sensor
belongs to, then polls every sensor that was placed in an area.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Protocol

from ..core.errors import ConfigurationError
from ..core.threading import ReadWriteLock, StoppableThread

logger = logging.getLogger(__name__)

# Attributes with a dedicated SensorState field
METADATA_ATTRIBUTES = frozenset(
    {
        "friendly_name",
        "unit_of_measurement",
        "icon",
        "device_class",
        "state_class",
        "entity_picture",
    }
)


@dataclass(frozen=True)
class StateResponse:
    """Raw entity state as returned by the provider."""

    entity_id: str
    state: str
    attributes: dict[str, Any] = field(default_factory=dict)
    last_changed: str = ""
    last_updated: str = ""


@dataclass(frozen=True)
class AreaGrouping:
    """An area and the sensor entity IDs assigned to it."""

    area: str
    entities: tuple[str, ...]


@dataclass(frozen=True)
class Measurement:
    key: str
    value: str
    unit: str = ""


@dataclass(frozen=True)
class SensorState:
    """Current reading of one sensor."""

    entity_id: str
    name: str
    state: str
    unit: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    measurements: tuple[Measurement, ...] = ()
    last_updated: str = ""


@dataclass(frozen=True)
class AreaSensors:
    area: str
    sensors: tuple[SensorState, ...] = ()


class SensorProvider(Protocol):
    """Source of sensor states and area assignments."""

    def get_state(self, entity_id: str) -> StateResponse:
        ...

    def get_area_groupings(self) -> list[AreaGrouping]:
        ...


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_sensor_state(entity_id: str, response: StateResponse) -> SensorState:
    """Convert a provider response into a SensorState.

    The first measurement is the state itself, keyed by the object part of
    the entity ID (``sensor.kitchen_temp`` -> ``kitchen_temp``). Every other
    non-metadata attribute becomes a further measurement.
    """
    attrs = response.attributes
    name = attrs.get("friendly_name")
    if not isinstance(name, str):
        name = entity_id
    unit = attrs.get("unit_of_measurement")
    if not isinstance(unit, str):
        unit = ""

    _, dot, object_id = entity_id.partition(".")
    primary_key = object_id if dot else entity_id

    measurements = [Measurement(primary_key, response.state, unit)]
    extra: dict[str, str] = {}
    for key, value in attrs.items():
        if key in METADATA_ATTRIBUTES:
            continue
        text = _stringify(value)
        extra[key] = text
        measurements.append(Measurement(key, text))

    return SensorState(
        entity_id=entity_id,
        name=name,
        state=response.state,
        unit=unit,
        attributes=extra,
        measurements=tuple(measurements),
        last_updated=response.last_updated,
    )


class SensorAgent:
    """Polls configured sensors and groups them by area.

    Usage:
        agent = SensorAgent(client, ["sensor.kitchen_temp"], shutdown=shutdown)
        for area in agent.get_areas():
            ...
    """

    def __init__(
        self,
        provider: SensorProvider,
        entity_ids: list[str],
        refresh: float = 60.0,
        shutdown: threading.Event | None = None,
    ) -> None:
        if not entity_ids:
            raise ConfigurationError("At least one sensor entity ID is required")
        if refresh <= 0:
            raise ConfigurationError(
                "Sensor refresh interval must be positive",
                details={"refresh": refresh},
            )

        self._provider = provider
        self._entity_ids = list(dict.fromkeys(entity_ids))
        self._refresh = refresh
        self._lock = ReadWriteLock()
        self._sensors: dict[str, SensorState] = {}
        self._areas: list[AreaGrouping] = []
        self._areas_discovered = False

        self._discover_areas()
        self.refresh()

        self._thread = StoppableThread(
            target=self._refresh_loop,
            name="SensorAgent",
            stop_event=shutdown,
        )
        self._thread.start()

    @property
    def areas_discovered(self) -> bool:
        """True if area discovery succeeded at startup."""
        with self._lock.read_locked():
            return self._areas_discovered

    @property
    def entity_ids(self) -> list[str]:
        """Entity IDs being polled."""
        return list(self._entity_ids)

    def _discover_areas(self) -> None:
        logger.info("Fetching sensor area groupings")
        try:
            groupings = self._provider.get_area_groupings()
        except Exception as e:
            logger.error("Area discovery failed, polling all sensors: %s", e)
            return

        configured = set(self._entity_ids)
        assigned: set[str] = set()
        areas: list[AreaGrouping] = []
        for grouping in groupings:
            matched = tuple(eid for eid in grouping.entities if eid in configured)
            if matched:
                areas.append(AreaGrouping(grouping.area, matched))
                assigned.update(matched)

        valid: list[str] = []
        for entity_id in self._entity_ids:
            if entity_id in assigned:
                valid.append(entity_id)
            else:
                logger.error("Sensor %s not found in any area, skipping", entity_id)

        with self._lock.write_locked():
            self._areas = areas
            self._areas_discovered = True
        self._entity_ids = valid
        logger.info("Discovered %d area(s) for %d sensor(s)", len(areas), len(valid))

    def refresh(self) -> int:
        """Fetch every polled sensor once.

        Returns:
            Number of sensors updated
        """
        updated = 0
        for entity_id in self._entity_ids:
            try:
                response = self._provider.get_state(entity_id)
            except Exception as e:
                logger.error("Error fetching sensor %s: %s", entity_id, e)
                continue

            state = to_sensor_state(entity_id, response)
            with self._lock.write_locked():
                self._sensors[entity_id] = state
            updated += 1

        logger.debug("Refreshed %d/%d sensors", updated, len(self._entity_ids))
        return updated

    def get_sensor(self, entity_id: str) -> SensorState | None:
        with self._lock.read_locked():
            return self._sensors.get(entity_id)

    def get_all_sensors(self) -> list[SensorState]:
        with self._lock.read_locked():
            return list(self._sensors.values())

    def get_areas(self) -> list[AreaSensors]:
        """All discovered areas with their cached sensors, in discovery order."""
        with self._lock.read_locked():
            return [self._area_sensors(grouping) for grouping in self._areas]

    def get_area(self, area: str) -> AreaSensors | None:
        """Cached sensors of one area, or None for an unknown area."""
        with self._lock.read_locked():
            for grouping in self._areas:
                if grouping.area == area:
                    return self._area_sensors(grouping)
        return None

    def _area_sensors(self, grouping: AreaGrouping) -> AreaSensors:
        # Caller holds the read lock
        sensors = tuple(
            self._sensors[eid] for eid in grouping.entities if eid in self._sensors
        )
        return AreaSensors(grouping.area, sensors)

    def stop(self) -> None:
        """Stop the refresh thread."""
        self._thread.stop()

    def _refresh_loop(self, thread: StoppableThread) -> None:
        while not thread.wait(self._refresh):
            self.refresh()
