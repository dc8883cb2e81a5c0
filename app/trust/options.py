"""Verification options: network, capability providers and policy.

Capabilities left unset are built from configuration on first use, so a
misconfigured chain endpoint only fails the verifiers that need the chain.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from app.core import config
from .chain import ContractCaller, default_contract_caller
from .did import DidResolver, VerificationMethod, get_did_resolver
from .dns import DnsTxtResolver, get_dns_resolver

# (message, signature, key) -> bool
SignatureVerifier = Callable[[str, str, VerificationMethod], bool]


@dataclass
class VerificationOptions:
    network: str = config.DEFAULT_NETWORK
    contract_caller: Optional[ContractCaller] = None
    did_resolver: Optional[DidResolver] = None
    dns_resolver: Optional[DnsTxtResolver] = None
    # Optional: signature check over the merkle root for DID-signed documents
    signature_verifier: Optional[SignatureVerifier] = None

    def chain(self) -> ContractCaller:
        if self.contract_caller is None:
            self.contract_caller = default_contract_caller(self.network)
        return self.contract_caller

    def resolver(self) -> DidResolver:
        if self.did_resolver is None:
            self.did_resolver = get_did_resolver()
        return self.did_resolver

    def dns(self) -> DnsTxtResolver:
        if self.dns_resolver is None:
            self.dns_resolver = get_dns_resolver()
        return self.dns_resolver

    @property
    def network_id(self) -> int:
        return config.network_id_for(self.network)


def build_options(network: Optional[str] = None, **overrides) -> VerificationOptions:
    """Options for ``network`` (default from config) with capability overrides."""
    return VerificationOptions(network=network or config.DEFAULT_NETWORK, **overrides)
