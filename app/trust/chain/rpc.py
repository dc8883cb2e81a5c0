"""
Minimal Ethereum JSON-RPC client.

Only the two read calls the verifiers need are exposed: eth_getCode for the
deployment check and eth_call for contract reads.
"""

import itertools
import logging
from typing import Any, List, Optional

import httpx

from .exceptions import CallRevertedError, ChainCallError

log = logging.getLogger(__name__)


class JsonRpcClient:
    """Async JSON-RPC client over HTTP."""

    _ids = itertools.count(1)

    def __init__(self, url: str, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout

    async def request(self, method: str, params: List[Any]) -> Any:
        """Send one JSON-RPC request and return its result.

        Raises:
            CallRevertedError: The node reported a revert.
            ChainCallError: Transport, HTTP or JSON-RPC failure.
        """
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
                body = response.json()
        except httpx.TimeoutException:
            raise ChainCallError(f"{method} timed out after {self.timeout}s")
        except httpx.HTTPStatusError as e:
            raise ChainCallError(f"{method} failed: HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            raise ChainCallError(f"{method} failed: {e}")
        except ValueError:
            raise ChainCallError(f"{method} returned invalid JSON")

        error = body.get("error") if isinstance(body, dict) else None
        if error:
            message = error.get("message") or "unknown JSON-RPC error"
            log.debug(f"rpc_error method={method} code={error.get('code')} message={message}")
            if "revert" in message.lower():
                raise CallRevertedError(message)
            raise ChainCallError(message)

        if not isinstance(body, dict) or "result" not in body:
            raise ChainCallError(f"{method} returned no result")
        return body["result"]

    async def get_code(self, address: str, block: str = "latest") -> str:
        return await self.request("eth_getCode", [address, block])

    async def call(self, address: str, data: str, block: str = "latest") -> Optional[str]:
        return await self.request("eth_call", [{"to": address, "data": data}, block])
