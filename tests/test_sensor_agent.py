from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from pixelclock.agents.sensors import (
    AreaGrouping,
    AreaSensors,
    Measurement,
    SensorAgent,
    StateResponse,
    to_sensor_state,
)
from pixelclock.core.errors import APIError, ConfigurationError


def _state(entity_id: str, state: str, **attributes) -> StateResponse:
    return StateResponse(
        entity_id=entity_id,
        state=state,
        attributes=attributes,
        last_updated="2024-03-05T12:00:00+00:00",
    )


STATES = {
    "sensor.kitchen_temp": _state(
        "sensor.kitchen_temp",
        "21.5",
        friendly_name="Kitchen Temperature",
        unit_of_measurement="°C",
        device_class="temperature",
    ),
    "sensor.kitchen_hum": _state(
        "sensor.kitchen_hum", "40", friendly_name="Kitchen Humidity", unit_of_measurement="%"
    ),
    "sensor.office_co2": _state(
        "sensor.office_co2", "612", friendly_name="Office CO2", unit_of_measurement="ppm"
    ),
}


def _provider(groupings: list[AreaGrouping] | Exception) -> MagicMock:
    provider = MagicMock()
    if isinstance(groupings, Exception):
        provider.get_area_groupings.side_effect = groupings
    else:
        provider.get_area_groupings.return_value = groupings
    provider.get_state.side_effect = lambda eid: STATES[eid]
    return provider


def test_to_sensor_state_maps_metadata_and_measurements() -> None:
    response = _state(
        "sensor.kitchen_temp",
        "21.5",
        friendly_name="Kitchen Temperature",
        unit_of_measurement="°C",
        icon="mdi:thermometer",
        state_class="measurement",
        battery=87,
        calibrated=True,
    )

    sensor = to_sensor_state("sensor.kitchen_temp", response)

    assert sensor.name == "Kitchen Temperature"
    assert sensor.unit == "°C"
    assert sensor.state == "21.5"
    assert sensor.last_updated == "2024-03-05T12:00:00+00:00"
    assert sensor.attributes == {"battery": "87", "calibrated": "true"}
    assert sensor.measurements[0] == Measurement("kitchen_temp", "21.5", "°C")
    assert set(sensor.measurements[1:]) == {
        Measurement("battery", "87"),
        Measurement("calibrated", "true"),
    }


def test_to_sensor_state_falls_back_to_entity_id() -> None:
    sensor = to_sensor_state("nodot", _state("nodot", "on"))

    assert sensor.name == "nodot"
    assert sensor.unit == ""
    assert sensor.measurements == (Measurement("nodot", "on", ""),)


def test_areas_filtered_to_configured_sensors() -> None:
    provider = _provider(
        [
            AreaGrouping("Kitchen", ("sensor.kitchen_temp", "sensor.kitchen_hum", "sensor.fridge")),
            AreaGrouping("Garage", ("sensor.garage_door",)),
            AreaGrouping("Office", ("sensor.office_co2",)),
        ]
    )
    agent = SensorAgent(
        provider, ["sensor.kitchen_temp", "sensor.kitchen_hum", "sensor.office_co2"]
    )
    agent.stop()

    assert agent.areas_discovered
    areas = agent.get_areas()
    assert [a.area for a in areas] == ["Kitchen", "Office"]
    assert [s.entity_id for s in areas[0].sensors] == ["sensor.kitchen_temp", "sensor.kitchen_hum"]
    assert agent.get_area("Garage") is None


def test_unassigned_sensors_are_not_polled() -> None:
    provider = _provider([AreaGrouping("Kitchen", ("sensor.kitchen_temp",))])
    agent = SensorAgent(provider, ["sensor.kitchen_temp", "sensor.office_co2"])
    agent.stop()

    polled = [c.args[0] for c in provider.get_state.call_args_list]
    assert polled == ["sensor.kitchen_temp"]
    assert agent.entity_ids == ["sensor.kitchen_temp"]
    assert agent.get_sensor("sensor.office_co2") is None


def test_discovery_failure_polls_everything_without_areas() -> None:
    provider = _provider(APIError("template failed"))
    agent = SensorAgent(provider, ["sensor.kitchen_temp", "sensor.office_co2"])
    agent.stop()

    assert not agent.areas_discovered
    assert agent.get_areas() == []
    assert {s.entity_id for s in agent.get_all_sensors()} == {
        "sensor.kitchen_temp",
        "sensor.office_co2",
    }


def test_failed_fetch_keeps_cached_value() -> None:
    provider = _provider([AreaGrouping("Office", ("sensor.office_co2",))])
    agent = SensorAgent(provider, ["sensor.office_co2"])
    agent.stop()

    provider.get_state.side_effect = APIError("offline")

    assert agent.refresh() == 0
    assert agent.get_sensor("sensor.office_co2").state == "612"
    assert agent.get_area("Office") == AreaSensors(
        "Office", (agent.get_sensor("sensor.office_co2"),)
    )


def test_area_omits_sensors_not_yet_fetched() -> None:
    provider = _provider([AreaGrouping("Kitchen", ("sensor.kitchen_temp", "sensor.kitchen_hum"))])

    def get_state(entity_id: str) -> StateResponse:
        if entity_id == "sensor.kitchen_temp":
            raise APIError("unavailable")
        return STATES[entity_id]

    provider.get_state.side_effect = get_state
    agent = SensorAgent(provider, ["sensor.kitchen_temp", "sensor.kitchen_hum"])
    agent.stop()

    kitchen = agent.get_area("Kitchen")
    assert [s.entity_id for s in kitchen.sensors] == ["sensor.kitchen_hum"]


def test_empty_entity_list_rejected() -> None:
    with pytest.raises(ConfigurationError):
        SensorAgent(MagicMock(), [])


def test_non_positive_refresh_rejected() -> None:
    with pytest.raises(ConfigurationError):
        SensorAgent(MagicMock(), ["sensor.x"], refresh=0)
