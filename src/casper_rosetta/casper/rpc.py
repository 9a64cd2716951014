"""
Casper node JSON-RPC client.

Thin typed wrapper over the node's ``/rpc`` endpoint. Every read takes an
optional :class:`RequestContext`; it is checked before each attempt and
caps the HTTP timeout. Transport failures are retried with exponential
backoff; JSON-RPC errors are never retried.
"""

from __future__ import annotations
import json
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

import requests
from requests.adapters import HTTPAdapter
from pydantic import BaseModel, ValidationError

from ..monitoring.metrics import MetricsRegistry, get_registry
from ..runtime.context import RequestContext
from ..runtime.errors import (
    CasperRosettaError,
    NotFoundError,
    UnableToParseError,
    UpstreamRpcError,
    UpstreamUnavailableError,
)
from .types import Block, DeployInfo, PeerEntry, StoredValue, Transfer

logger = logging.getLogger(__name__)

DEFAULT_NODE_URL = "http://localhost:7777/rpc"

# Node error codes that mean "the thing you asked for is not there".
NOT_FOUND_RPC_CODES = frozenset({
    -32000,  # no such deploy
    -32001,  # no such block
    -32003,  # query failed
    -32006,  # get balance failed
    -32009,  # no such account
})

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass
class RpcClientConfig:
    """Configuration for the node RPC client."""

    endpoint: str = DEFAULT_NODE_URL
    timeout: float = 120.0
    max_retries: int = 2
    retry_delay: float = 0.5
    retry_backoff: float = 2.0
    pool_maxsize: int = 16
    debug: bool = False
    user_agent: str = "casper-rosetta/0.1.0"


class CasperRpcClient:
    """
    Casper node JSON-RPC client.

    Example:
        ```python
        client = CasperRpcClient("http://localhost:7777/rpc")
        block = client.get_latest_block()
        balance = client.get_account_balance(block.state_root_hash, purse)
        ```
    """

    def __init__(
        self,
        config: Union[str, RpcClientConfig, None] = None,
        session: Optional[requests.Session] = None,
        metrics: Optional[MetricsRegistry] = None,
    ):
        """
        Initialize the RPC client.

        Args:
            config: Endpoint URL or a RpcClientConfig
            session: Optional requests.Session for connection pooling
            metrics: Registry receiving request metrics (process registry by default)
        """
        if config is None:
            config = RpcClientConfig()
        elif isinstance(config, str):
            config = RpcClientConfig(endpoint=config)
        self.config = config

        self.logger = logger
        if self.config.debug:
            self.logger.setLevel(logging.DEBUG)

        self._owns_session = session is None
        if session is None:
            # One pooled connection per concurrent deploy read
            session = requests.Session()
            adapter = HTTPAdapter(pool_maxsize=self.config.pool_maxsize)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self._session = session

        registry = metrics or get_registry()
        self._requests = registry.counter("rpc_requests_total", "Node RPC requests")
        self._errors = registry.counter("rpc_errors_total", "Failed node RPC requests")
        self._latency = registry.timer("rpc_request_duration", "Node RPC latency")

    @property
    def endpoint(self) -> str:
        return self.config.endpoint

    def close(self) -> None:
        """Close the HTTP session if owned by this client."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> CasperRpcClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # Low-level RPC
    # =========================================================================

    def _call(self, method: str, params: Optional[Dict[str, Any]] = None,
              ctx: Optional[RequestContext] = None) -> Any:
        """
        Make a JSON-RPC 2.0 call.

        Args:
            method: RPC method name
            params: Method parameters
            ctx: Request context checked before each attempt

        Returns:
            The ``result`` member of the response

        Raises:
            NotFoundError: The node reports the item as missing
            UpstreamRpcError: Any other JSON-RPC error
            UpstreamUnavailableError: Transport failure after all retries
            UnableToParseError: The response body is not JSON
        """
        ctx = ctx or RequestContext.background()
        payload: Dict[str, Any] = {
            "jsonrpc": "2.0",
            "id": random.randint(1, 1_000_000),
            "method": method,
        }
        if params is not None:
            payload["params"] = params

        labels = {"method": method}
        last_error: Optional[CasperRosettaError] = None

        for attempt in range(self.config.max_retries + 1):
            ctx.check(stage=method)
            if attempt > 0:
                delay = self.config.retry_delay * (self.config.retry_backoff ** (attempt - 1))
                remaining = ctx.remaining()
                if remaining is not None:
                    delay = min(delay, max(remaining, 0.0))
                self.logger.debug(f"Retrying {method} in {delay:.2f}s (attempt {attempt + 1})")
                time.sleep(delay)
                ctx.check(stage=method)

            if self.config.debug:
                self.logger.debug(f"Request: {method} -> {json.dumps(payload)}")

            self._requests.increment(labels=labels)
            try:
                with self._latency.time(labels):
                    response = self._session.post(
                        self.config.endpoint,
                        json=payload,
                        headers={"Content-Type": "application/json", "User-Agent": self.config.user_agent},
                        timeout=ctx.timeout(self.config.timeout),
                    )
            except requests.exceptions.RequestException as e:
                self._errors.increment(labels=labels)
                last_error = UpstreamUnavailableError(
                    f"HTTP request failed: {e}", details={"method": method}, cause=e)
                continue

            if response.status_code >= 500:
                self._errors.increment(labels=labels)
                last_error = UpstreamUnavailableError(
                    f"HTTP {response.status_code}: {response.reason}", details={"method": method})
                continue

            if response.status_code != 200:
                self._errors.increment(labels=labels)
                raise UpstreamRpcError(
                    f"HTTP {response.status_code}: {response.reason}", details={"method": method})

            try:
                response_data = response.json()
            except ValueError as e:
                self._errors.increment(labels=labels)
                raise UnableToParseError(
                    f"Invalid JSON response from {method}", details={"method": method}, cause=e) from e

            if not isinstance(response_data, dict):
                self._errors.increment(labels=labels)
                raise UnableToParseError(
                    f"{method} response is not a JSON object", details={"method": method})

            if self.config.debug:
                self.logger.debug(f"Response: {method} <- {json.dumps(response_data)}")

            if "error" in response_data and response_data["error"] is not None:
                self._errors.increment(labels=labels)
                raise self._map_rpc_error(method, params, response_data["error"])

            return response_data.get("result")

        raise last_error

    @staticmethod
    def _map_rpc_error(method: str, params: Optional[Dict[str, Any]], error: Any) -> CasperRosettaError:
        if isinstance(error, dict):
            message = error.get("message", "Unknown error")
            code = error.get("code")
            data = error.get("data")
        else:
            message, code, data = str(error), None, None

        details = {"method": method, "params": params or {}}
        if code in NOT_FOUND_RPC_CODES:
            details["rpc_code"] = code
            return NotFoundError(f"{method}: {message}", details=details)
        return UpstreamRpcError(f"{method}: {message}", rpc_code=code, rpc_data=data, details=details)

    def call(self, method: str, params: Optional[Dict[str, Any]] = None,
             ctx: Optional[RequestContext] = None) -> Any:
        """
        Make a raw JSON-RPC call.

        Exposed for node methods without a typed wrapper.
        """
        return self._call(method, params, ctx)

    @staticmethod
    def _parse(model: Type[ModelT], data: Any, method: str) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise UnableToParseError(
                f"Unexpected {method} response shape", details={"method": method}, cause=e) from e

    def _call_object(self, method: str, params: Optional[Dict[str, Any]],
                     ctx: Optional[RequestContext]) -> Dict[str, Any]:
        """Call ``method`` and return its result as a dict, treating a null result as empty."""
        result = self._call(method, params, ctx)
        if result is None:
            return {}
        if not isinstance(result, dict):
            raise UnableToParseError(f"{method} result is not an object", details={"method": method})
        return result

    @staticmethod
    def _result_items(result: Dict[str, Any], key: str, method: str) -> List[Any]:
        items = result.get(key) or []
        if not isinstance(items, list):
            raise UnableToParseError(f"{method} {key} is not a list", details={"method": method})
        return items

    # =========================================================================
    # Chain
    # =========================================================================

    def _get_block(self, identifier: Optional[Dict[str, Any]], ctx: Optional[RequestContext]) -> Block:
        params = {"block_identifier": identifier} if identifier is not None else None
        result = self._call_object("chain_get_block", params, ctx)
        if not result.get("block"):
            raise NotFoundError("Block not found", details={"block_identifier": identifier})
        return self._parse(Block, result["block"], "chain_get_block")

    def get_block_by_hash(self, block_hash: str, ctx: Optional[RequestContext] = None) -> Block:
        return self._get_block({"Hash": block_hash}, ctx)

    def get_block_by_height(self, height: int, ctx: Optional[RequestContext] = None) -> Block:
        return self._get_block({"Height": height}, ctx)

    def get_latest_block(self, ctx: Optional[RequestContext] = None) -> Block:
        return self._get_block(None, ctx)

    def _get_block_transfers(self, identifier: Optional[Dict[str, Any]],
                             ctx: Optional[RequestContext]) -> List[Transfer]:
        params = {"block_identifier": identifier} if identifier is not None else None
        result = self._call_object("chain_get_block_transfers", params, ctx)
        return [self._parse(Transfer, item, "chain_get_block_transfers")
                for item in self._result_items(result, "transfers", "chain_get_block_transfers")]

    def get_block_transfers_by_hash(self, block_hash: str,
                                    ctx: Optional[RequestContext] = None) -> List[Transfer]:
        return self._get_block_transfers({"Hash": block_hash}, ctx)

    def get_block_transfers_by_height(self, height: int,
                                      ctx: Optional[RequestContext] = None) -> List[Transfer]:
        return self._get_block_transfers({"Height": height}, ctx)

    def get_latest_block_transfers(self, ctx: Optional[RequestContext] = None) -> List[Transfer]:
        return self._get_block_transfers(None, ctx)

    # =========================================================================
    # Info
    # =========================================================================

    def get_deploy(self, deploy_hash: str, ctx: Optional[RequestContext] = None) -> DeployInfo:
        result = self._call_object("info_get_deploy", {"deploy_hash": deploy_hash}, ctx)
        if not result:
            raise NotFoundError("Deploy not found", details={"deploy_hash": deploy_hash})
        return self._parse(DeployInfo, result, "info_get_deploy")

    def get_peers(self, ctx: Optional[RequestContext] = None) -> List[PeerEntry]:
        result = self._call_object("info_get_peers", None, ctx)
        return [self._parse(PeerEntry, item, "info_get_peers")
                for item in self._result_items(result, "peers", "info_get_peers")]

    # =========================================================================
    # State
    # =========================================================================

    def get_state_item(self, state_root_hash: str, key: str, path: Optional[List[str]] = None,
                       ctx: Optional[RequestContext] = None) -> StoredValue:
        params = {"state_root_hash": state_root_hash, "key": key, "path": path or []}
        result = self._call_object("state_get_item", params, ctx)
        if not result.get("stored_value"):
            raise NotFoundError("State item not found", details={"key": key, "state_root_hash": state_root_hash})
        return self._parse(StoredValue, result["stored_value"], "state_get_item")

    def get_account_balance(self, state_root_hash: str, purse: str,
                            ctx: Optional[RequestContext] = None) -> int:
        params = {"state_root_hash": state_root_hash, "purse_uref": purse}
        result = self._call_object("state_get_balance", params, ctx)
        value = result.get("balance_value")
        if value is None:
            raise NotFoundError("Purse balance not found", details={"purse": purse, "state_root_hash": state_root_hash})
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise UnableToParseError(
                f"Balance is not an integer: {value!r}", details={"purse": purse}, cause=e) from e
