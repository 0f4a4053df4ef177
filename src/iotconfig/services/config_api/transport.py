"""JSON-over-HTTP transport to the config service.

Unary calls post one JSON document and read one back.  Server-streamed calls
answer with newline-delimited JSON, terminated by a ``null`` line or the end of
the body.  Client-streamed calls post one signed request per line, in order.
"""
from __future__ import annotations

import json
import logging
import ssl
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping

import httpx

from ..crypto.signing import HasSignatureField, encode, to_jsonable
from ..errors import TransportError

__all__ = ["ConfigServiceTransport", "DEFAULT_CONFIG_HOST"]

_log = logging.getLogger("iotconfig.config_api.transport")

DEFAULT_CONFIG_HOST = "http://localhost:50051"
_JSON = "application/json"
_NDJSON = "application/x-ndjson"


def _body(message: HasSignatureField | Mapping[str, Any]) -> bytes:
    if isinstance(message, Mapping):
        return json.dumps(to_jsonable(message), sort_keys=True, separators=(",", ":")).encode("utf-8")
    return encode(message)


@dataclass(slots=True)
class ConfigServiceTransport:
    base_url: str = DEFAULT_CONFIG_HOST
    timeout: float = 15.0
    verify: str | bool | ssl.SSLContext = True
    default_headers: dict[str, str] = field(default_factory=dict)
    # injected by tests (httpx.MockTransport)
    transport: httpx.BaseTransport | None = None

    @classmethod
    def from_settings(cls, settings: Any, *, transport: httpx.BaseTransport | None = None) -> "ConfigServiceTransport":
        base_url = getattr(settings, "config_host", None) or DEFAULT_CONFIG_HOST
        timeout = float(getattr(settings, "timeout", None) or 15.0)
        return cls(base_url=base_url, timeout=timeout, transport=transport)

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            verify=self.verify,
            headers=self.default_headers,
            transport=self.transport,
        )

    @staticmethod
    def _path(service: str, method: str) -> str:
        return f"/v1/{service}/{method}"

    def call(self, service: str, method: str, message: HasSignatureField | Mapping[str, Any]) -> Any:
        path = self._path(service, method)
        _log.debug("unary %s", path)
        try:
            with self._client() as client:
                response = client.post(path, content=_body(message), headers={"Content-Type": _JSON})
        except httpx.RequestError as exc:
            raise TransportError(f"{path} failed: {exc}") from exc
        return self._decode(path, response)

    def call_stream(self, service: str, method: str, message: HasSignatureField | Mapping[str, Any]) -> Iterator[Any]:
        """Yield response elements in server order until the stream ends."""
        path = self._path(service, method)
        _log.debug("server stream %s", path)
        try:
            with self._client() as client:
                with client.stream("POST", path, content=_body(message), headers={"Content-Type": _JSON, "Accept": _NDJSON}) as response:
                    if response.status_code >= 400:
                        response.read()
                        self._raise_for_status(path, response)
                    for line in response.iter_lines():
                        if not line.strip():
                            continue
                        try:
                            item = json.loads(line)
                        except ValueError as exc:
                            raise TransportError(f"{path}: malformed stream element: {exc}") from exc
                        if item is None:
                            return
                        yield item
        except httpx.RequestError as exc:
            raise TransportError(f"{path} failed: {exc}") from exc

    def call_client_stream(self, service: str, method: str, messages: Iterable[HasSignatureField]) -> Any:
        path = self._path(service, method)
        lines = [encode(message) + b"\n" for message in messages]
        _log.debug("client stream %s (%d elements)", path, len(lines))
        try:
            with self._client() as client:
                response = client.post(path, content=iter(lines), headers={"Content-Type": _NDJSON})
        except httpx.RequestError as exc:
            raise TransportError(f"{path} failed: {exc}") from exc
        return self._decode(path, response)

    def _decode(self, path: str, response: httpx.Response) -> Any:
        self._raise_for_status(path, response)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"{path}: response is not JSON: {exc}", status_code=response.status_code) from exc

    @staticmethod
    def _raise_for_status(path: str, response: httpx.Response) -> None:
        if response.status_code < 400:
            return
        message = response.text or f"HTTP {response.status_code}"
        error_code: str | None = None
        content: Any = None
        try:
            content = response.json()
        except ValueError:
            content = response.text
        if isinstance(content, Mapping):
            detail = content.get("detail") or content.get("message") or content.get("error")
            if isinstance(detail, str):
                message = detail
            code = content.get("code")
            if isinstance(code, str):
                error_code = code
        raise TransportError(f"{path}: {message}", status_code=response.status_code, error_code=error_code, payload=content)
