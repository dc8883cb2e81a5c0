"""Signed document model.

Wrapped documents arrive in one of two shapes:

- v2: ``data.issuers[]`` with salted values (``"<salt>:<type>:<value>"``),
  a ``signature`` merkle block and an optional ``proof`` array.
- v3: a single ``issuer`` with ``openAttestationMetadata.proof`` naming the
  proof method, and a ``proof`` block holding both the merkle data and,
  for DID-signed documents, the signing key and signature.

Both are normalised into ``Document``, whose issuers are a tagged union on
``method``. Verifiers match on that tag only and never inspect raw shapes.
"""

import logging
import re
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from .exceptions import DocumentParseError

log = logging.getLogger(__name__)

V2_SCHEMA = "https://schema.openattestation.com/2.0/schema.json"
V3_SCHEMA = "https://schema.openattestation.com/3.0/schema.json"

# "<salt>:<type>:<value>" - salt never contains a colon
_SALTED_VALUE = re.compile(r"^[^:]*:(string|number|boolean|null|undefined):(.*)$", re.DOTALL)


class DocumentVersion(str, Enum):
    V2 = "V2"
    V3 = "V3"


class ProofMethod(str, Enum):
    """How an issuer proves it issued the document."""
    DOCUMENT_STORE = "DOCUMENT_STORE"
    TOKEN_REGISTRY = "TOKEN_REGISTRY"
    DID = "DID"
    DNS_DID = "DNS_DID"


class IdentityProofType(str, Enum):
    DNS_TXT = "DNS-TXT"
    DNS_DID = "DNS-DID"
    DID = "DID"


class IdentityProof(BaseModel):
    type: IdentityProofType
    location: Optional[str] = None
    key: Optional[str] = None


class Revocation(BaseModel):
    type: str
    location: Optional[str] = None


class DocumentStoreIssuer(BaseModel):
    method: Literal[ProofMethod.DOCUMENT_STORE] = ProofMethod.DOCUMENT_STORE
    name: Optional[str] = None
    document_store: str
    identity_proof: Optional[IdentityProof] = None


class TokenRegistryIssuer(BaseModel):
    method: Literal[ProofMethod.TOKEN_REGISTRY] = ProofMethod.TOKEN_REGISTRY
    name: Optional[str] = None
    token_registry: str
    identity_proof: Optional[IdentityProof] = None


class DidIssuer(BaseModel):
    method: Literal[ProofMethod.DID] = ProofMethod.DID
    name: Optional[str] = None
    id: str
    identity_proof: IdentityProof
    revocation: Optional[Revocation] = None


class DnsDidIssuer(BaseModel):
    method: Literal[ProofMethod.DNS_DID] = ProofMethod.DNS_DID
    name: Optional[str] = None
    id: str
    identity_proof: IdentityProof
    revocation: Optional[Revocation] = None


Issuer = Annotated[
    Union[DocumentStoreIssuer, TokenRegistryIssuer, DidIssuer, DnsDidIssuer],
    Field(discriminator="method"),
]


class SignatureBlock(BaseModel):
    """Merkle signature data shared by all issuers."""
    merkle_root: str
    target_hash: str
    proofs: List[str] = Field(default_factory=list)


class ProofEntry(BaseModel):
    """One detached signature binding a verification method to the merkle root."""
    type: Optional[str] = None
    proof_purpose: Optional[str] = None
    verification_method: str
    signature: str


class Document(BaseModel):
    version: DocumentVersion
    issuers: List[Issuer] = Field(min_length=1)
    signature: SignatureBlock
    proof: Optional[List[ProofEntry]] = None

    def issuers_using(self, *methods: ProofMethod) -> List[Any]:
        """Issuers whose proof method is one of ``methods``, in document order."""
        return [issuer for issuer in self.issuers if issuer.method in methods]

    def uses(self, *methods: ProofMethod) -> bool:
        return any(issuer.method in methods for issuer in self.issuers)


# =============================================================================
# Parsing
# =============================================================================


def unsalt(value: Any) -> Any:
    """Strip v2 salts recursively, restoring the declared primitive type."""
    if isinstance(value, dict):
        return {k: unsalt(v) for k, v in value.items()}
    if isinstance(value, list):
        return [unsalt(v) for v in value]
    if not isinstance(value, str):
        return value

    match = _SALTED_VALUE.match(value)
    if not match:
        return value

    kind, raw = match.group(1), match.group(2)
    if kind == "string":
        return raw
    if kind == "number":
        return float(raw) if any(c in raw for c in ".eE") else int(raw)
    if kind == "boolean":
        return raw == "true"
    return None


def _object(value: Any, what: str) -> dict:
    if not isinstance(value, dict):
        raise DocumentParseError(f"{what} must be an object")
    return value


def _identity_proof(raw: Any, location_key: str = "location") -> Optional[dict]:
    if not raw:
        return None
    raw = _object(raw, "Identity proof")
    return {
        "type": raw.get("type"),
        "location": raw.get(location_key),
        "key": raw.get("key"),
    }


def _issuer_from_v2(raw: Any) -> dict:
    raw = _object(raw, "Issuer")
    identity = _object(raw.get("identityProof") or {}, "Identity proof")
    identity_type = identity.get("type")
    issuer = {"name": raw.get("name"), "identity_proof": _identity_proof(identity)}

    if "tokenRegistry" in raw:
        issuer.update(method=ProofMethod.TOKEN_REGISTRY, token_registry=raw["tokenRegistry"])
    elif "documentStore" in raw:
        issuer.update(method=ProofMethod.DOCUMENT_STORE, document_store=raw["documentStore"])
    elif identity_type in (IdentityProofType.DID.value, IdentityProofType.DNS_DID.value):
        method = ProofMethod.DID if identity_type == IdentityProofType.DID.value else ProofMethod.DNS_DID
        issuer.update(method=method, id=raw.get("id"), revocation=raw.get("revocation"))
    else:
        raise DocumentParseError(
            f"Issuer {raw.get('name', '<unnamed>')} has no documentStore, tokenRegistry or DID identity proof"
        )
    return issuer


def _parse_v2(raw: dict) -> dict:
    data = unsalt(_object(raw["data"], "v2 data"))
    issuers = data.get("issuers")
    if not isinstance(issuers, list):
        raise DocumentParseError("v2 document has no issuers array")

    signature = _object(raw["signature"], "v2 signature")
    proof = raw.get("proof")
    if proof is not None and (not isinstance(proof, list) or not all(isinstance(e, dict) for e in proof)):
        raise DocumentParseError("v2 proof must be an array of objects")
    return {
        "version": DocumentVersion.V2,
        "issuers": [_issuer_from_v2(issuer) for issuer in issuers],
        "signature": {
            "merkle_root": signature.get("merkleRoot"),
            "target_hash": signature.get("targetHash"),
            "proofs": signature.get("proofs") or [],
        },
        "proof": None if proof is None else [
            {
                "type": entry.get("type"),
                "proof_purpose": entry.get("proofPurpose"),
                "verification_method": entry.get("verificationMethod"),
                "signature": entry.get("signature"),
            }
            for entry in proof
        ],
    }


def _parse_v3(raw: dict) -> dict:
    metadata = _object(raw.get("openAttestationMetadata") or {}, "v3 openAttestationMetadata")
    proof_metadata = _object(metadata.get("proof") or {}, "v3 proof metadata")
    method = proof_metadata.get("method")
    value = proof_metadata.get("value")
    identity = _identity_proof(metadata.get("identityProof"), location_key="identifier")
    proof = _object(raw.get("proof") or {}, "v3 proof")

    issuer_block = _object(raw.get("issuer") or {}, "v3 issuer")
    issuer: Dict[str, Any] = {"name": issuer_block.get("name"), "identity_proof": identity}
    if method == ProofMethod.TOKEN_REGISTRY.value:
        issuer.update(method=ProofMethod.TOKEN_REGISTRY, token_registry=value)
    elif method == ProofMethod.DOCUMENT_STORE.value:
        issuer.update(method=ProofMethod.DOCUMENT_STORE, document_store=value)
    elif method == ProofMethod.DID.value:
        if identity is None:
            raise DocumentParseError("v3 DID document has no identity proof")
        identity["key"] = proof.get("key")
        is_dns = identity["type"] == IdentityProofType.DNS_DID.value
        issuer.update(
            method=ProofMethod.DNS_DID if is_dns else ProofMethod.DID,
            id=value,
            revocation=proof_metadata.get("revocation"),
        )
    else:
        raise DocumentParseError(f"Unsupported v3 proof method: {method}")

    entries = None
    if proof.get("signature"):
        entries = [{
            "type": proof.get("type"),
            "proof_purpose": proof.get("proofPurpose"),
            "verification_method": proof.get("key"),
            "signature": proof.get("signature"),
        }]

    return {
        "version": DocumentVersion.V3,
        "issuers": [issuer],
        "signature": {
            "merkle_root": proof.get("merkleRoot"),
            "target_hash": proof.get("targetHash"),
            "proofs": proof.get("proofs") or [],
        },
        "proof": entries,
    }


def parse_document(raw: Any) -> Document:
    """Normalise a wrapped v2 or v3 document.

    Raises:
        DocumentParseError: Shape not recognised or required fields missing.
    """
    if not isinstance(raw, dict):
        raise DocumentParseError("Document must be a JSON object")

    if raw.get("version") == V3_SCHEMA or "openAttestationMetadata" in raw:
        fields = _parse_v3(raw)
    elif "data" in raw and "signature" in raw:
        fields = _parse_v2(raw)
    else:
        raise DocumentParseError("Unrecognised document shape")

    try:
        document = Document.model_validate(fields)
    except ValidationError as e:
        raise DocumentParseError(f"Invalid document: {e.errors()[0]['msg']}")

    log.debug(f"parsed {document.version.value} document with {len(document.issuers)} issuer(s)")
    return document
