"""Resolved DID document models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class VerificationMethod:
    """One key listed in a DID document.

    Attributes:
        id: Fully qualified method id (e.g. "did:ethr:0xabc#controller").
        type: Key type (e.g. "EcdsaSecp256k1RecoveryMethod2020").
        controller: DID controlling the key.
        ethereum_address: Address form of the key, when published.
        blockchain_account_id: CAIP-10 account id, when published.
        public_key_hex: Raw public key, when published.
    """
    id: str
    type: str
    controller: str
    ethereum_address: Optional[str] = None
    blockchain_account_id: Optional[str] = None
    public_key_hex: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "VerificationMethod":
        return cls(
            id=raw.get("id", ""),
            type=raw.get("type", ""),
            controller=raw.get("controller", ""),
            ethereum_address=raw.get("ethereumAddress"),
            blockchain_account_id=raw.get("blockchainAccountId"),
            public_key_hex=raw.get("publicKeyHex"),
        )


@dataclass(frozen=True)
class DidDocument:
    id: str
    verification_methods: List[VerificationMethod] = field(default_factory=list)

    def method_ids(self) -> List[str]:
        return [vm.id for vm in self.verification_methods]

    def method(self, method_id: str) -> Optional[VerificationMethod]:
        return next((vm for vm in self.verification_methods if vm.id == method_id), None)
