"""Thin HTTP client for a running deck service."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import requests

from .errors import ServiceError
from .storage import check_filename

DEFAULT_TIMEOUT = 30


class DeckClient:
    """Client for the ``/api/presentations`` endpoints.

    Example:
        client = DeckClient("http://localhost:3001")
        result = client.generate({"type": "corporate", "slides": [...]})
        client.download(result["filename"], Path("out"))
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        *,
        prefix: str = "/api/presentations",
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.prefix = prefix
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{self.prefix}{path}"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        try:
            resp = self.session.request(method, self._url(path), timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise ServiceError(f"Could not reach {self.base_url}: {exc}") from exc
        if not resp.ok:
            raise ServiceError(self._error_message(resp), status_code=resp.status_code)
        return resp

    @staticmethod
    def _error_message(resp: requests.Response) -> str:
        try:
            body = resp.json()
        except ValueError:
            return resp.text or resp.reason
        if isinstance(body, dict):
            message = body.get("error") or body.get("detail") or resp.reason
            details = body.get("details")
            if isinstance(details, list):
                message = "\n".join([str(message), *(f"- {d}" for d in details)])
            elif details:
                message = f"{message}: {details}"
            return str(message)
        return resp.text

    def _json(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        return self._request(method, path, **kwargs).json()

    def generate(self, request: Mapping[str, Any]) -> Dict[str, Any]:
        return self._json("POST", "/generate", json=dict(request))

    def recipe(
        self,
        name: str,
        *,
        presentation_type: Optional[str] = None,
        values: Optional[Mapping[str, Any]] = None,
        config: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"values": dict(values or {})}
        if presentation_type:
            payload["type"] = presentation_type
        if config:
            payload["config"] = dict(config)
        return self._json("POST", f"/recipes/{name}", json=payload)

    def list(self) -> Dict[str, Any]:
        return self._json("GET", "/list")

    def delete(self, filename: str) -> Dict[str, Any]:
        return self._json("DELETE", f"/delete/{filename}")

    def cleanup(self, max_age_days: Optional[float] = None) -> Dict[str, Any]:
        payload = {} if max_age_days is None else {"maxAgeDays": max_age_days}
        return self._json("POST", "/cleanup", json=payload)

    def health(self) -> Dict[str, Any]:
        return self._json("GET", "/health")

    def templates(self) -> Dict[str, Any]:
        return self._json("GET", "/templates")

    def download(self, filename: str, output_dir: Path) -> Path:
        filename = check_filename(filename)
        resp = self._request("GET", f"/download/{filename}")
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        target = output_dir / filename
        target.write_bytes(resp.content)
        return target
