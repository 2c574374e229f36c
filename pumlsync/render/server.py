"""Renderer backed by a PlantUML HTTP server."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

import httpx

from pumlsync.errors import RenderError
from pumlsync.render.encoding import encode_plantuml

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "https://www.plantuml.com/plantuml"


def _validate_server_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise ValueError(f"PlantUML server_url must be http(s), got {parsed.scheme!r}")
    if "\r" in url or "\n" in url:
        raise ValueError("CRLF injection detected in server_url")
    return url


class PlantUmlServerRenderer:
    """Fetches ``{server_url}/{fmt}/{encoded}`` from a PlantUML server."""

    def __init__(
        self,
        server_url: str = DEFAULT_SERVER_URL,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.server_url = _validate_server_url(server_url.rstrip("/"))
        self.timeout = timeout
        self._client = client

    def url_for(self, text: str, fmt: str) -> str:
        return f"{self.server_url}/{fmt}/{encode_plantuml(text)}"

    def render(self, text: str, fmt: str) -> bytes:
        url = self.url_for(text, fmt)
        logger.debug("GET %s (%d chars of diagram text)", url[:120], len(text))
        try:
            if self._client is not None:
                resp = self._client.get(url, timeout=self.timeout)
            else:
                resp = httpx.get(url, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise RenderError(f"PlantUML server request failed: {e}") from e

        if resp.status_code != 200:
            # PlantUML answers syntax errors with 400 and an error image
            detail = resp.headers.get("x-plantuml-diagram-error") or f"HTTP {resp.status_code}"
            raise RenderError(f"PlantUML render failed: {detail}")
        return resp.content
