"""Chain read capability: JSON-RPC transport and fixed-table contract calls."""

from .exceptions import (
    ChainCallError,
    ContractNotDeployedError,
    InvalidArgumentError,
    MethodNotFoundError,
    InvalidAddressError,
    CallRevertedError,
)
from .rpc import JsonRpcClient
from .contracts import (
    CONTRACT_METHODS,
    ContractCaller,
    ContractMethod,
    default_contract_caller,
    execute,
    to_token_id,
)

__all__ = [
    # Exceptions
    "ChainCallError",
    "ContractNotDeployedError",
    "InvalidArgumentError",
    "MethodNotFoundError",
    "InvalidAddressError",
    "CallRevertedError",
    # Transport
    "JsonRpcClient",
    # Contracts
    "CONTRACT_METHODS",
    "ContractCaller",
    "ContractMethod",
    "default_contract_caller",
    "execute",
    "to_token_id",
]
