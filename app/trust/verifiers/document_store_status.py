"""Document store status: issued and not revoked on every issuer's store.

Issuance is checked on the merkle root. Revocation is checked on the
target hash and on the merkle root, so revoking either the single document
or its whole batch is detected. All reads for all stores are dispatched
together.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from app.trust.api_models import DocumentStoreStatusCode, FragmentType, Reason
from app.trust.chain import to_token_id
from app.trust.document import Document, ProofMethod
from app.trust.fanout import Settled, settle_all
from app.trust.options import VerificationOptions
from .base import Outcome, Verifier, per_version
from .chain_reasons import chain_failure_reason

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuanceStatus:
    address: str
    issued: bool
    reason: Optional[Reason] = None

    def to_dict(self) -> Dict[str, Any]:
        entry: Dict[str, Any] = {"issued": self.issued, "address": self.address}
        if self.reason is not None:
            entry["reason"] = self.reason.to_dict()
        return entry


@dataclass(frozen=True)
class RevocationStatus:
    address: str
    revoked: bool
    reason: Optional[Reason] = None

    def to_dict(self) -> Dict[str, Any]:
        entry: Dict[str, Any] = {"revoked": self.revoked, "address": self.address}
        if self.reason is not None:
            entry["reason"] = self.reason.to_dict()
        return entry


def document_stores(document: Document) -> List[str]:
    """Distinct store addresses in discovery order (case-insensitive)."""
    seen: Dict[str, str] = {}
    for issuer in document.issuers_using(ProofMethod.DOCUMENT_STORE):
        seen.setdefault(issuer.document_store.lower(), issuer.document_store)
    return list(seen.values())


def revocation_hashes(document: Document) -> List[str]:
    hashes = [to_token_id(document.signature.target_hash), to_token_id(document.signature.merkle_root)]
    return list(dict.fromkeys(hashes))


class DocumentStoreStatusVerifier(Verifier):
    name = "OpenAttestationEthereumDocumentStoreStatus"
    type = FragmentType.DOCUMENT_STATUS
    codes = DocumentStoreStatusCode
    skip_message = 'Document issuers doesn\'t have "documentStore" property or DOCUMENT_STORE method'

    def test(self, document: Document, options: VerificationOptions) -> bool:
        return document.uses(ProofMethod.DOCUMENT_STORE)

    async def check(self, document: Document, options: VerificationOptions) -> Outcome:
        stores = document_stores(document)
        merkle_root = to_token_id(document.signature.merkle_root)
        hashes = revocation_hashes(document)
        caller = options.chain()

        calls: Dict[Tuple[str, ...], Any] = {}
        for store in stores:
            calls[("isIssued", store)] = caller.execute(store, "isIssued", [merkle_root])
            for value in hashes:
                calls[("isRevoked", store, value)] = caller.execute(store, "isRevoked", [value])
        settled = await settle_all(calls)

        issuance = [self._issuance(store, merkle_root, settled[("isIssued", store)]) for store in stores]
        revocation = [
            self._revocation(store, [(value, settled[("isRevoked", store, value)]) for value in hashes])
            for store in stores
        ]

        data = {
            "issuedOnAll": all(status.issued for status in issuance),
            "revokedOnAny": any(status.revoked for status in revocation),
            "details": {
                "issuance": per_version(document, [status.to_dict() for status in issuance]),
                "revocation": per_version(document, [status.to_dict() for status in revocation]),
            },
        }

        not_issued = next((status for status in issuance if not status.issued), None)
        if not_issued is not None:
            return Outcome.invalid(data, not_issued.reason)
        revoked = next((status for status in revocation if status.revoked), None)
        if revoked is not None:
            return Outcome.invalid(data, revoked.reason)
        return Outcome.valid(data)

    def _issuance(self, address: str, merkle_root: str, result: Settled) -> IssuanceStatus:
        if not result.ok:
            log.info(f"isIssued failed on {address}: {result.error}")
            return IssuanceStatus(address, False, chain_failure_reason(result.error, self.codes, address, "document store"))
        if not result.value:
            return IssuanceStatus(address, False, Reason.of(
                self.codes.DOCUMENT_NOT_ISSUED,
                f"Document {merkle_root} has not been issued under contract {address}",
            ))
        return IssuanceStatus(address, True)

    def _revocation(self, address: str, results: List[Tuple[str, Settled]]) -> RevocationStatus:
        # A failed revocation read counts as revoked
        for value, result in results:
            if not result.ok:
                log.info(f"isRevoked failed on {address}: {result.error}")
                return RevocationStatus(address, True, chain_failure_reason(result.error, self.codes, address, "document store"))
            if result.value:
                return RevocationStatus(address, True, Reason.of(
                    self.codes.DOCUMENT_REVOKED,
                    f"Document {value} has been revoked under contract {address}",
                ))
        return RevocationStatus(address, False)
