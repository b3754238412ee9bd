"""
Simple JSON-RPC client.
"""

import json
import logging
from collections.abc import Callable
from typing import Any

import requests

from electrumd.config.constants import RPC_TIMEOUT
from electrumd.errors import JsonError, RpcError, RpcTransportError

Params = list[Any] | dict[str, Any]


class JsonRpcClient:
    """
    JSON-RPC 2.0 client over HTTP, with optional basic auth.

    Supports attribute-style method calls; keyword arguments are sent as
    named params:
        rpc.version()
        rpc.load_wallet(wallet_path="/tmp/.../default_wallet")

    Usage:
        rpc = JsonRpcClient("http://127.0.0.1:7777", auth=("electrumd", "secret"))
        version = rpc.call("version")
    """

    def __init__(
        self,
        url: str,
        auth: tuple[str, str] | None = None,
        name: str | None = None,
        timeout: float = RPC_TIMEOUT,
    ):
        self.url = url
        self.auth = auth
        self.name = name or url
        self.timeout = timeout
        self.id_counter = 0
        self.logger = logging.getLogger(f"rpc.{self.name}")
        self.pre_call_hook: Callable[[str], None] = lambda _: None

    def set_pre_call_hook(self, hook: Callable[[str], None]):
        self.pre_call_hook = hook

    def __getattr__(self, method: str):
        """
        Allow method calls as attributes.
        rpc.getinfo() -> calls "getinfo" method
        """
        if method.startswith("_"):
            raise AttributeError(method)

        def rpc_call(*args, **kwargs):
            if args and kwargs:
                raise TypeError("JSON-RPC params are either positional or named, not both")
            return self._call(method, kwargs if kwargs else list(args))

        return rpc_call

    def _call(self, method: str, params: Params) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name
            params: Positional (list) or named (dict) method parameters

        Returns:
            Result from RPC call

        Raises:
            RpcError: If the RPC returns an error
            RpcTransportError: If the HTTP request fails
            JsonError: If the request or the response is not valid JSON
        """
        self.pre_call_hook(method)
        self.id_counter += 1

        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": self.id_counter,
        }
        try:
            body = json.dumps(payload)
        except (TypeError, ValueError) as e:
            raise JsonError(f"cannot serialize params for {method}: {e}") from e

        self.logger.debug(f"RPC call: {method}({params})")

        try:
            resp = requests.post(
                self.url,
                data=body,
                headers={"Content-Type": "application/json"},
                auth=self.auth,
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            self.logger.debug(f"RPC request failed: {e}")
            raise RpcTransportError(f"{method}: {e}") from e

        try:
            result = resp.json()
        except ValueError as e:
            self.logger.warning(f"Invalid JSON response: {resp.text}")
            raise JsonError(f"invalid JSON response to {method}: {e}") from e

        if not isinstance(result, dict):
            raise JsonError(f"unexpected response to {method}: {result!r}")

        if result.get("error") is not None:
            error = result["error"]
            self.logger.warning(f"RPC error: {error}")
            if not isinstance(error, dict):
                error = {"code": None, "message": str(error)}
            raise RpcError(error)

        return result.get("result")

    def call(self, method: str, params: Params | None = None) -> Any:
        """
        Explicit call method (alternative to attribute style).

        Usage:
            rpc.call("version")
            rpc.call("load_wallet", {"wallet_path": path})
        """
        return self._call(method, [] if params is None else params)
