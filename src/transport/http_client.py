# src/transport/http_client.py
"""
HTTP transport to the remote planning service.

send(endpoint, body) POSTs JSON and returns (response_text, error):
exactly one of the two is set. Network failures and non-2xx statuses
become error strings; nothing is raised to the caller.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

import httpx

log = logging.getLogger(__name__)

SendResult = Tuple[Optional[str], Optional[str]]


@dataclass
class ApiConfig:
    base_url: str = "http://127.0.0.1:8000"
    events_path: str = "/events"
    permission_path: str = "/plan-permission"
    timeout_s: float = 30.0

    # Directory holding captured photos referenced by file_name
    photo_dir: str = "photos"

    # Embed referenced image files as base64 before sending
    inline_images: bool = True


class HttpTransport:
    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        timeout_s: float = 30.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout_s)

    @classmethod
    def from_config(cls, config: ApiConfig) -> "HttpTransport":
        return cls(base_url=config.base_url, timeout_s=config.timeout_s)

    def url_for(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self._base_url}/{endpoint.lstrip('/')}"

    def send(self, endpoint: str, body: Mapping[str, Any]) -> SendResult:
        url = self.url_for(endpoint)
        content = json.dumps(body, ensure_ascii=False).encode("utf-8")
        try:
            response = self._client.post(
                url,
                content=content,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            log.error("POST %s failed: %s", url, exc)
            return None, str(exc) or type(exc).__name__

        if response.is_success:
            log.debug("POST %s -> %s", url, response.status_code)
            return response.text, None

        error = f"HTTP {response.status_code}: {response.text}"
        log.error("POST %s failed: %s", url, error)
        return None, error

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
