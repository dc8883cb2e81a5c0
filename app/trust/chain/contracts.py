"""Read-only contract calls against a fixed method table.

Document stores and token registries are only ever read through three
methods, so their ABI is a static table of selectors and argument types
rather than a full ABI codec.

Failure order matters to callers:
1. Contract not deployed at the address
2. Method not on the contract interface
3. Argument not conforming to the method's ABI type
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from app.core import config
from .exceptions import (
    ChainCallError,
    ContractNotDeployedError,
    InvalidAddressError,
    InvalidArgumentError,
    MethodNotFoundError,
)
from .rpc import JsonRpcClient

log = logging.getLogger(__name__)

_ADDRESS = re.compile(r"^0x[0-9a-fA-F]{40}$")
_BYTES32 = re.compile(r"^0x[0-9a-fA-F]{64}$")
_HEX_UINT = re.compile(r"^0x[0-9a-fA-F]{1,64}$")


@dataclass(frozen=True)
class ContractMethod:
    """One read method: 4-byte selector, argument types, return type."""
    name: str
    selector: str
    inputs: Tuple[str, ...]
    output: str


CONTRACT_METHODS = {
    "isIssued": ContractMethod("isIssued", "0x163aa631", ("bytes32",), "bool"),
    "isRevoked": ContractMethod("isRevoked", "0x4294857f", ("bytes32",), "bool"),
    "ownerOf": ContractMethod("ownerOf", "0x6352211e", ("uint256",), "address"),
}


def encode_argument(abi_type: str, value: Any) -> str:
    """Encode one static argument as a 32-byte hex word (no 0x prefix).

    Raises:
        InvalidArgumentError: Value does not conform to abi_type.
    """
    if abi_type == "bytes32":
        if isinstance(value, str) and _BYTES32.match(value):
            return value[2:].lower()
    elif abi_type == "uint256":
        if isinstance(value, bool):
            raise InvalidArgumentError()
        if isinstance(value, int) and 0 <= value < 2 ** 256:
            return format(value, "064x")
        if isinstance(value, str) and _HEX_UINT.match(value):
            return value[2:].lower().rjust(64, "0")
    elif abi_type == "address":
        if isinstance(value, str) and _ADDRESS.match(value):
            return value[2:].lower().rjust(64, "0")
    raise InvalidArgumentError()


def decode_output(abi_type: str, data: Optional[str]) -> Any:
    """Decode a single static return word.

    Raises:
        ChainCallError: Empty or malformed return data.
    """
    if not data or data == "0x":
        raise ChainCallError("call returned no data")
    try:
        word = int(data, 16)
    except ValueError:
        raise ChainCallError(f"call returned malformed data: {data[:20]}")

    if abi_type == "bool":
        return word != 0
    if abi_type == "address":
        return "0x" + format(word, "064x")[-40:]
    return word


def to_token_id(merkle_root: str) -> str:
    """Merkle root as a 0x-prefixed, zero-padded 32-byte token id."""
    root = merkle_root.lower()
    if root.startswith("0x"):
        root = root[2:]
    return "0x" + root.rjust(64, "0")


class ContractCaller:
    """Chain-read capability: execute a named read method on a contract."""

    def __init__(self, rpc: JsonRpcClient):
        self.rpc = rpc

    async def execute(self, contract_address: str, method: str, args: Sequence[Any]) -> Any:
        """Call ``method(*args)`` on the contract and decode the result.

        Raises:
            InvalidAddressError: contract_address is not a hex address.
            ContractNotDeployedError: No code at contract_address.
            MethodNotFoundError: method is not in the method table.
            InvalidArgumentError: args do not match the method's ABI types.
            ChainCallError: Any other RPC or decoding failure.
        """
        if not isinstance(contract_address, str) or not _ADDRESS.match(contract_address):
            raise InvalidAddressError()

        code = await self.rpc.get_code(contract_address)
        if not code or code in ("0x", "0x0"):
            raise ContractNotDeployedError()

        contract_method = CONTRACT_METHODS.get(method)
        if contract_method is None:
            raise MethodNotFoundError()

        if len(args) != len(contract_method.inputs):
            raise InvalidArgumentError()
        encoded = "".join(
            encode_argument(abi_type, value)
            for abi_type, value in zip(contract_method.inputs, args)
        )

        log.debug(f"eth_call {method} on {contract_address}")
        result = await self.rpc.call(contract_address, contract_method.selector + encoded)
        return decode_output(contract_method.output, result)


def default_contract_caller(network: Optional[str] = None) -> ContractCaller:
    """Build a caller for the configured endpoint of ``network``.

    Raises:
        ValueError: No endpoint known for the network.
    """
    url = config.rpc_url_for(network or config.DEFAULT_NETWORK)
    return ContractCaller(JsonRpcClient(url, timeout=config.RPC_TIMEOUT_SECONDS))


async def execute(
    contract_address: str,
    method: str,
    args: Sequence[Any],
    caller: Optional[ContractCaller] = None,
) -> Any:
    """Module-level convenience around ContractCaller.execute."""
    caller = caller or default_contract_caller()
    return await caller.execute(contract_address, method, args)
