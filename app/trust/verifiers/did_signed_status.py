"""DID-signed document status: signed by every DID issuer and not revoked.

Each DID / DNS-DID issuer is checked independently and concurrently:

1. Resolve the issuer's DID to its verification methods.
2. Find the proof entry signed by the issuer's key.
3. Optionally check the signature over the merkle root.
4. Read the issuer's revocation block. Only type NONE counts as not
   revoked; any other declared mechanism is treated as revoked.

A resolver failure only marks that issuer as not issued. A missing proof
array or a missing revocation block means the document itself is
malformed and fails the whole fragment before any issuer is resolved.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from app.core import config
from app.trust.api_models import DidSignedDocumentStatusCode, FragmentType
from app.trust.document import Document, DocumentVersion, ProofEntry, ProofMethod
from app.trust.exceptions import MalformedDocumentError
from app.trust.fanout import settle_all
from app.trust.options import VerificationOptions
from .base import Outcome, Verifier, describe, per_version

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuanceStatus:
    did: str
    issued: bool
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        entry: Dict[str, Any] = {"did": self.did, "issued": self.issued}
        if self.reason is not None:
            entry["reason"] = self.reason
        return entry


@dataclass(frozen=True)
class RevocationStatus:
    did: str
    revoked: bool
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        entry: Dict[str, Any] = {"did": self.did, "revoked": self.revoked}
        if self.reason is not None:
            entry["reason"] = self.reason
        return entry


@dataclass(frozen=True)
class IssuerStatus:
    issuance: IssuanceStatus
    revocation: Optional[RevocationStatus] = None


def find_proof(proofs: List[ProofEntry], method_ids: List[str]) -> Optional[ProofEntry]:
    """First proof entry signed by one of ``method_ids``."""
    wanted = set(method_ids)
    return next((proof for proof in proofs if proof.verification_method in wanted), None)


class DidSignedStatusVerifier(Verifier):
    name = "OpenAttestationDidSignedDocumentStatus"
    type = FragmentType.DOCUMENT_STATUS
    codes = DidSignedDocumentStatusCode
    skip_message = "Document was not signed by DID directly"

    def test(self, document: Document, options: VerificationOptions) -> bool:
        return document.uses(ProofMethod.DID, ProofMethod.DNS_DID)

    async def check(self, document: Document, options: VerificationOptions) -> Outcome:
        if document.proof is None:
            raise MalformedDocumentError.proofs_missing()

        issuers = document.issuers_using(ProofMethod.DID, ProofMethod.DNS_DID)
        if any(issuer.revocation is None for issuer in issuers):
            raise MalformedDocumentError.revocation_missing()

        settled = await settle_all({
            index: self._check_issuer(issuer, document, options)
            for index, issuer in enumerate(issuers)
        })

        results: List[IssuerStatus] = []
        for result in settled.values():
            # Per-issuer failures are already folded into the status;
            # anything left here is structural.
            if not result.ok:
                raise result.error
            results.append(result.value)

        issuance = [result.issuance for result in results]
        revocation = [result.revocation for result in results if result.revocation is not None]
        issued_on_all = all(status.issued for status in issuance)
        revoked_on_any = any(status.revoked for status in revocation)

        details = {"issuance": per_version(document, [status.to_dict() for status in issuance])}
        if revocation or document.version == DocumentVersion.V2:
            details["revocation"] = per_version(document, [status.to_dict() for status in revocation])

        data = {"issuedOnAll": issued_on_all, "revokedOnAny": revoked_on_any, "details": details}
        if issued_on_all and not revoked_on_any:
            return Outcome.valid(data)
        return Outcome.invalid(data)

    async def _check_issuer(self, issuer, document: Document, options: VerificationOptions) -> IssuerStatus:
        did = issuer.id
        key = issuer.identity_proof.key

        try:
            did_document = await options.resolver().resolve(did)
        except Exception as e:
            log.info(f"did_resolution_failed did={did}: {describe(e)}")
            return IssuerStatus(IssuanceStatus(did, False, describe(e)))

        method_ids = [method_id for method_id in did_document.method_ids() if key is None or method_id == key]
        proof = find_proof(document.proof or [], method_ids)
        if proof is None:
            # Also covers a declared key the DID document does not list
            return IssuerStatus(IssuanceStatus(did, False, f"Proof not found for {key or did}"))

        if options.signature_verifier is not None:
            method = did_document.method(proof.verification_method)
            try:
                signed = options.signature_verifier(document.signature.merkle_root, proof.signature, method)
            except Exception as e:
                return IssuerStatus(IssuanceStatus(did, False, describe(e)))
            if not signed:
                return IssuerStatus(IssuanceStatus(did, False, f"Signature verification failed for {method.id}"))

        revocation = issuer.revocation
        if revocation.type == config.REVOCATION_TYPE_NONE:
            return IssuerStatus(IssuanceStatus(did, True), RevocationStatus(did, False))
        return IssuerStatus(
            IssuanceStatus(did, True),
            RevocationStatus(did, True, f"Revocation type {revocation.type} is not supported, treated as revoked"),
        )
