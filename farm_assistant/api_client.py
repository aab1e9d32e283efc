import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from .errors import MalformedResponse, ServiceError, TransportFailure

logger = logging.getLogger(__name__)


class ApiClient:
    """Thin ``requests`` wrapper that turns every failure into a FarmAssistantError."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        if not base_url:
            raise ValueError("No backend URL configured")
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def pest_image_url(self, pest_name: str) -> str:
        return self.url(f"/get_pest_image/{quote(pest_name, safe='')}")

    def _send(self, method: str, path: str, **kwargs) -> requests.Response:
        url = self.url(path)
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise TransportFailure(str(e) or type(e).__name__) from e
        if not resp.ok:
            raise ServiceError(resp.status_code, resp.text)
        return resp

    @staticmethod
    def _json(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise MalformedResponse(f"Response is not valid JSON: {resp.text[:200]}") from e

    def post_file(self, path: str, files: Dict[str, Any]) -> Any:
        return self._json(self._send("POST", path, files=files))

    def post_json(self, path: str, payload: Dict[str, Any]) -> Any:
        return self._json(self._send("POST", path, json=payload))

    def get_json(self, path: str) -> Any:
        return self._json(self._send("GET", path))

    def probe(self, url: str) -> bool:
        """GET ``url`` without reading the body; True when it answers 2xx."""
        try:
            resp = self.session.get(url, stream=True, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Probe of %s failed: %s", url, e)
            return False
        try:
            return resp.ok
        finally:
            resp.close()
