from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable

import httpx
import pytest

from pixelclock.agents.sensors import AreaGrouping
from pixelclock.clients.homeassistant import AREA_SENSORS_TEMPLATE, HomeAssistantClient
from pixelclock.clients.tomorrowio import TomorrowIOClient, day_from_values
from pixelclock.core.errors import APIError


def _http(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def _day(**overrides: Any) -> dict[str, Any]:
    values = {
        "temperatureMax": 14.2,
        "temperatureMin": 5.8,
        "sunriseTime": "2024-03-05T06:38:00Z",
        "sunsetTime": "2024-03-05T17:49:00Z",
        "precipitationProbabilityAvg": 5,
        "windSpeedAvg": 3.1,
        "windGustAvg": 7.0,
        "cloudCoverAvg": 20,
        "snowAccumulationSum": 0,
        "snowIntensityMax": 0,
        "humidityAvg": 71.5,
    }
    values.update(overrides)
    return {"time": "2024-03-05T06:00:00Z", "values": values}


def _forecast(*days: dict[str, Any]) -> dict[str, Any]:
    return {"timelines": {"daily": list(days)}, "location": {"lat": 51.5, "lon": -0.12}}


def test_forecast_request_and_mapping() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=_forecast(_day(), _day(precipitationProbabilityAvg=80)))

    client = TomorrowIOClient("secret", client=_http(handler))
    weather = client.get_two_day_weather("51.5072", "-0.1276")

    params = requests[0].url.params
    assert requests[0].url.path == "/v4/weather/forecast"
    assert params["location"] == "51.5072,-0.1276"
    assert params["fields"] == "core"
    assert params["units"] == "metric"
    assert params["timesteps"] == "1d"
    assert params["apikey"] == "secret"

    assert weather.today.temperature_high == 14.2
    assert weather.today.temperature_low == 5.8
    assert weather.today.sunrise == datetime(2024, 3, 5, 6, 38, tzinfo=timezone.utc)
    assert weather.today.humidity == 71.5
    assert not weather.today.rainy
    assert weather.tomorrow.rainy


@pytest.mark.parametrize(
    ("overrides", "field", "expected"),
    [
        ({"precipitationProbabilityAvg": 25}, "rainy", False),
        ({"precipitationProbabilityAvg": 26}, "rainy", True),
        ({"windSpeedAvg": 6}, "windy", False),
        ({"windSpeedAvg": 6.5}, "windy", True),
        ({"windGustAvg": 12.1}, "windy", True),
        ({"cloudCoverAvg": 60}, "cloudy", False),
        ({"cloudCoverAvg": 75}, "cloudy", True),
        ({"snowAccumulationSum": 0.4}, "snowy", True),
        ({"snowIntensityMax": 0.1}, "snowy", True),
        ({}, "snowy", False),
    ],
)
def test_condition_thresholds(overrides: dict[str, Any], field: str, expected: bool) -> None:
    day = day_from_values(_day(**overrides)["values"])

    assert getattr(day, field) is expected


def test_missing_values_default_to_zero() -> None:
    day = day_from_values({})

    assert day.temperature_high == 0.0
    assert day.sunrise is None
    assert not (day.rainy or day.windy or day.cloudy or day.snowy)


def test_forecast_error_message_from_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"code": 401001, "type": "Invalid Auth", "message": "bad key"})

    client = TomorrowIOClient("wrong", client=_http(handler))

    with pytest.raises(APIError, match="bad key"):
        client.get_two_day_weather("0", "0")


def test_forecast_server_error() -> None:
    client = TomorrowIOClient("key", client=_http(lambda r: httpx.Response(503)))

    with pytest.raises(APIError) as exc_info:
        client.get_two_day_weather("0", "0")
    assert exc_info.value.details["status"] == 503


def test_forecast_needs_two_days() -> None:
    client = TomorrowIOClient("key", client=_http(lambda r: httpx.Response(200, json=_forecast(_day()))))

    with pytest.raises(APIError):
        client.get_two_day_weather("0", "0")


def test_forecast_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route", request=request)

    client = TomorrowIOClient("key", client=_http(handler))

    with pytest.raises(APIError) as exc_info:
        client.get_two_day_weather("0", "0")
    assert isinstance(exc_info.value.cause, httpx.ConnectError)


def test_get_state() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json={
                "entity_id": "sensor.kitchen_temp",
                "state": "21.5",
                "attributes": {"friendly_name": "Kitchen Temperature", "unit_of_measurement": "°C"},
                "last_changed": "2024-03-05T11:00:00+00:00",
                "last_updated": "2024-03-05T12:00:00+00:00",
            },
        )

    client = HomeAssistantClient("http://ha.local:8123/", "token123", client=_http(handler))
    state = client.get_state("sensor.kitchen_temp")

    assert requests[0].method == "GET"
    assert str(requests[0].url) == "http://ha.local:8123/api/states/sensor.kitchen_temp"
    assert requests[0].headers["Authorization"] == "Bearer token123"
    assert state.state == "21.5"
    assert state.attributes["friendly_name"] == "Kitchen Temperature"
    assert state.last_updated == "2024-03-05T12:00:00+00:00"


def test_get_area_groupings_posts_template() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json=[
                {"area": "Kitchen", "entities": ["sensor.kitchen_temp", "sensor.kitchen_hum"]},
                {"area": "Office", "entities": ["sensor.office_co2"]},
            ],
        )

    client = HomeAssistantClient("http://ha.local:8123", "token123", client=_http(handler))
    groupings = client.get_area_groupings()

    assert requests[0].method == "POST"
    assert requests[0].url.path == "/api/template"
    assert json.loads(requests[0].content) == {"template": AREA_SENSORS_TEMPLATE}
    assert groupings == [
        AreaGrouping("Kitchen", ("sensor.kitchen_temp", "sensor.kitchen_hum")),
        AreaGrouping("Office", ("sensor.office_co2",)),
    ]


def test_area_template_selects_sensor_entities() -> None:
    assert "select('match', '^sensor\\\\.')" in AREA_SENSORS_TEMPLATE
    assert AREA_SENSORS_TEMPLATE.endswith("{{ ns.result | to_json }}")


@pytest.mark.parametrize("status", [401, 404, 500])
def test_home_assistant_error_status(status: int) -> None:
    client = HomeAssistantClient("http://ha.local", "t", client=_http(lambda r: httpx.Response(status)))

    with pytest.raises(APIError):
        client.get_state("sensor.x")


def test_home_assistant_bad_payloads() -> None:
    client = HomeAssistantClient(
        "http://ha.local", "t", client=_http(lambda r: httpx.Response(200, json=[{"nope": 1}]))
    )
    with pytest.raises(APIError):
        client.get_area_groupings()

    client = HomeAssistantClient(
        "http://ha.local", "t", client=_http(lambda r: httpx.Response(200, text="not json"))
    )
    with pytest.raises(APIError):
        client.get_state("sensor.x")
