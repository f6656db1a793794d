"""
Fleet API Client - HTTP client for the node configuration API.

Thin request/response wrapper: it issues one HTTP call per method and hands
back the raw status and body. Interpreting the status is left to callers,
which need to treat 404 differently depending on the operation.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp
from pydantic import BaseModel

from errors import RemoteAPIError

logger = logging.getLogger(__name__)


@dataclass
class APIResponse:
    """Raw response from the fleet API."""

    status: int
    body: str = ""
    data: Optional[Any] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def not_found(self) -> bool:
        return self.status == 404


def check_ok_response(response: APIResponse) -> APIResponse:
    """Raise RemoteAPIError unless the response has a 2xx status."""
    if not response.ok:
        raise RemoteAPIError(response.status, response.body)
    return response


class FleetAPIClient:
    """
    Client for the fleet-management node configuration endpoints.

    Authentication is a pre-provisioned API key sent with every request.
    No retries are performed; transport errors propagate to the caller.
    """

    def __init__(
        self,
        api_url: str,
        api_token: str,
        request_timeout: int = 30,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_token = api_token
        self.request_timeout = request_timeout

    @classmethod
    def from_config(cls, api_config) -> "FleetAPIClient":
        """Build a client from an APIConfig."""
        return cls(
            api_url=api_config.url,
            api_token=api_config.token,
            request_timeout=api_config.request_timeout,
        )

    def _get_headers(self) -> Dict[str, str]:
        """Get HTTP headers for API requests."""
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.api_token:
            headers["X-API-Key"] = self.api_token
        return headers

    def _configurations_url(self, cluster_id: str) -> str:
        return f"{self.api_url}/v1/kubernetes/clusters/{cluster_id}/node-configurations"

    def _configuration_url(self, cluster_id: str, config_id: str) -> str:
        return f"{self._configurations_url(cluster_id)}/{config_id}"

    async def _request(
        self,
        method: str,
        url: str,
        body: Optional[BaseModel] = None,
    ) -> APIResponse:
        """Issue a single request and capture status, text and parsed JSON."""
        payload = body.model_dump(by_alias=True, exclude_none=True) if body else None
        timeout = aiohttp.ClientTimeout(total=self.request_timeout)

        logger.debug(f"{method} {url}")
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.request(
                method, url, headers=self._get_headers(), json=payload
            ) as response:
                text = await response.text()
                data = None
                if text:
                    try:
                        data = json.loads(text)
                    except json.JSONDecodeError:
                        logger.debug(f"Non-JSON response body from {method} {url}")
                return APIResponse(status=response.status, body=text, data=data)

    async def create_configuration(
        self, cluster_id: str, body: BaseModel
    ) -> APIResponse:
        return await self._request("POST", self._configurations_url(cluster_id), body)

    async def get_configuration(self, cluster_id: str, config_id: str) -> APIResponse:
        return await self._request(
            "GET", self._configuration_url(cluster_id, config_id)
        )

    async def update_configuration(
        self, cluster_id: str, config_id: str, body: BaseModel
    ) -> APIResponse:
        return await self._request(
            "PUT", self._configuration_url(cluster_id, config_id), body
        )

    async def delete_configuration(
        self, cluster_id: str, config_id: str
    ) -> APIResponse:
        return await self._request(
            "DELETE", self._configuration_url(cluster_id, config_id)
        )

    async def list_configurations(self, cluster_id: str) -> APIResponse:
        return await self._request("GET", self._configurations_url(cluster_id))
