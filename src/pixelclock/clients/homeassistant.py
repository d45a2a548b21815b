"""Home Assistant REST client."""

import logging
from typing import Any

import httpx

from ..agents.sensors import AreaGrouping, StateResponse
from ..core.errors import APIError

logger = logging.getLogger(__name__)

# Lists every area that has sensor entities, as JSON
AREA_SENSORS_TEMPLATE = (
    "{%- set ns = namespace(result=[]) -%}"
    "{%- for aid in areas() -%}"
    "  {%- set sensors = area_entities(aid)"
    "        | select('match', '^sensor\\\\.')"
    "        | list -%}"
    "  {%- if sensors -%}"
    "    {%- set ns.result = ns.result + ["
    '        {"area": area_name(aid), "entities": sensors}'
    "    ] -%}"
    "  {%- endif -%}"
    "{%- endfor -%}"
    "{{ ns.result | to_json }}"
)


class HomeAssistantClient:
    """Sensor provider backed by the Home Assistant REST API.

    Usage:
        client = HomeAssistantClient("http://homeassistant.local:8123", token)
        state = client.get_state("sensor.kitchen_temperature")
    """

    def __init__(self, base_url: str, token: str, client: httpx.Client | None = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=10.0)
        self._headers = {"Authorization": f"Bearer {token}"}

    def get_state(self, entity_id: str) -> StateResponse:
        """Fetch the current state of one entity.

        Raises:
            APIError: On transport failure, error status or unexpected payload
        """
        data = self._request("GET", f"/api/states/{entity_id}")
        if not isinstance(data, dict):
            raise APIError("Unexpected state response", details={"entity_id": entity_id})

        attributes = data.get("attributes") or {}
        return StateResponse(
            entity_id=str(data.get("entity_id", entity_id)),
            state=str(data.get("state", "")),
            attributes=dict(attributes) if isinstance(attributes, dict) else {},
            last_changed=str(data.get("last_changed", "")),
            last_updated=str(data.get("last_updated", "")),
        )

    def get_area_groupings(self) -> list[AreaGrouping]:
        """List areas with the sensor entities assigned to each.

        Raises:
            APIError: On transport failure, error status or unexpected payload
        """
        data = self._request("POST", "/api/template", json={"template": AREA_SENSORS_TEMPLATE})
        try:
            return [
                AreaGrouping(area=str(item["area"]), entities=tuple(item["entities"]))
                for item in data
            ]
        except (KeyError, TypeError) as e:
            raise APIError(
                "Error parsing area sensors response",
                details={"error": str(e)},
                cause=e,
            ) from e

    def _request(self, method: str, path: str, json: Any = None) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = self._client.request(method, url, headers=self._headers, json=json)
        except httpx.HTTPError as e:
            raise APIError(
                "Home Assistant request failed",
                details={"path": path, "error": str(e)},
                cause=e,
            ) from e

        if response.status_code >= 400:
            raise APIError(
                f"Home Assistant API error: {response.status_code} {response.reason_phrase}",
                details={"path": path, "status": response.status_code},
            )

        try:
            return response.json()
        except ValueError as e:
            raise APIError(
                "Invalid JSON from Home Assistant",
                details={"path": path},
                cause=e,
            ) from e

    def close(self) -> None:
        self._client.close()
