"""A minimal JSON-RPC 2.0 client over HTTP."""

from __future__ import annotations

import itertools
from typing import Any, Optional
from urllib.parse import urlparse

import requests

DEFAULT_TIMEOUT = 30.0


class RpcError(Exception):
    """Raised when an RPC call fails or the server returns an error."""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data


class RpcClient:
    """JSON-RPC client bound to one server URL."""

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        scheme = urlparse(url).scheme.lower()
        if scheme not in ("http", "https"):
            raise ValueError(f"unsupported RPC url {url!r}")
        self._url = url
        self._timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._ids = itertools.count(1)

    @property
    def url(self) -> str:
        """The RPC server URL the client is connected to."""
        return self._url

    def call(self, method: str, *args: Any) -> Any:
        """Call a remote method with positional arguments and return its result."""
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": list(args),
        }
        try:
            response = self._session.post(self._url, json=payload, timeout=self._timeout)
        except requests.RequestException as exc:
            raise RpcError(str(exc)) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise RpcError(
                f"{response.status_code} {response.reason}: invalid JSON-RPC response"
            ) from exc

        if not isinstance(body, dict):
            raise RpcError("invalid JSON-RPC response")

        error = body.get("error")
        if error is not None:
            if isinstance(error, dict):
                code = error.get("code")
                message = error.get("message") or f"json-rpc error {code}"
                raise RpcError(str(message), code, error.get("data"))
            raise RpcError(str(error))

        if not response.ok:
            raise RpcError(f"{response.status_code} {response.reason}")

        if "result" not in body:
            raise RpcError("invalid JSON-RPC response: missing result")
        return body["result"]

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()