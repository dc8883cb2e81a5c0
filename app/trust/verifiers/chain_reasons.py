"""Map chain read failures to per-contract reasons."""

from enum import IntEnum
from typing import Type

from app.trust.api_models import Reason
from app.trust.chain import ContractNotDeployedError, InvalidAddressError, InvalidArgumentError
from .base import describe


def chain_failure_reason(exc: Exception, codes: Type[IntEnum], address: str, label: str) -> Reason:
    """Reason for a failed read on ``address``.

    ``codes`` must define CONTRACT_ADDRESS_INVALID, INVALID_ARGUMENT and
    CHAIN_UNHANDLED_ERROR. ``label`` names the contract kind in messages.
    """
    if isinstance(exc, (ContractNotDeployedError, InvalidAddressError)):
        return Reason.of(
            codes["CONTRACT_ADDRESS_INVALID"],
            f"Invalid {label} address {address}: {describe(exc)}",
        )
    if isinstance(exc, InvalidArgumentError):
        return Reason.of(codes["INVALID_ARGUMENT"], describe(exc))
    return Reason.of(codes["CHAIN_UNHANDLED_ERROR"], describe(exc))
