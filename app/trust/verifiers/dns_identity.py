"""Issuer identity proofs published in DNS TXT records.

DNS-TXT: the issuer's domain publishes the issuer's contract address for
the verification network.
DNS-DID: the issuer's domain publishes the issuer's DID key.

Every issuer's domain is looked up concurrently; a failed lookup marks
only that issuer as unverified.
"""

import logging
from abc import abstractmethod
from typing import Any, Callable, Dict, List

from app.trust.api_models import (
    DnsDidIdentityProofCode,
    DnsTxtIdentityProofCode,
    FragmentStatus,
    FragmentType,
    Reason,
)
from app.trust.document import Document, IdentityProofType, ProofMethod
from app.trust.dns import parse_did_record, parse_txt_record
from app.trust.exceptions import MalformedDocumentError
from app.trust.fanout import settle_all
from app.trust.options import VerificationOptions
from .base import Outcome, Verifier, describe, per_version

log = logging.getLogger(__name__)


def _contract_address(issuer) -> str:
    if issuer.method == ProofMethod.DOCUMENT_STORE:
        return issuer.document_store
    if issuer.method == ProofMethod.TOKEN_REGISTRY:
        return issuer.token_registry
    raise MalformedDocumentError(f"DNS-TXT identity proof requires a contract address, issuer uses {issuer.method.value}")


class _DnsIdentityVerifier(Verifier):
    """Shared fan-out: one TXT lookup per issuer, matched by ``_matcher``."""

    type = FragmentType.ISSUER_IDENTITY
    value_key: str
    invalid_message: str

    @abstractmethod
    def _issuers(self, document: Document) -> List[Any]:
        """Issuers whose identity this verifier checks."""

    @abstractmethod
    def _expected(self, issuer, options: VerificationOptions) -> str:
        """Value the issuer's domain must publish."""

    @abstractmethod
    def _matcher(self, expected: str, options: VerificationOptions) -> Callable[[str], bool]:
        """Predicate over raw TXT records for ``expected``."""

    async def check(self, document: Document, options: VerificationOptions) -> Outcome:
        issuers = self._issuers(document)
        expected = []
        for issuer in issuers:
            if not issuer.identity_proof.location:
                raise MalformedDocumentError("Issuer identity proof has no location")
            expected.append(self._expected(issuer, options))

        dns = options.dns()
        settled = await settle_all({
            index: dns.query(issuer.identity_proof.location)
            for index, issuer in enumerate(issuers)
        })

        entries: List[Dict[str, Any]] = []
        for index, issuer in enumerate(issuers):
            location = issuer.identity_proof.location
            entry: Dict[str, Any] = {"location": location, self.value_key: expected[index]}
            result = settled[index]
            if not result.ok:
                log.info(f"dns_lookup_failed location={location}: {describe(result.error)}")
                entry.update(status=FragmentStatus.INVALID.value, reason=describe(result.error))
            else:
                matches = self._matcher(expected[index], options)
                matched = any(matches(record) for record in result.value)
                entry["status"] = (FragmentStatus.VALID if matched else FragmentStatus.INVALID).value
            entries.append(entry)

        data = per_version(document, entries)
        if all(entry["status"] == FragmentStatus.VALID.value for entry in entries):
            return Outcome.valid(data)
        return Outcome.invalid(data, Reason.of(self.codes["INVALID_IDENTITY"], self.invalid_message))


class DnsTxtIdentityProofVerifier(_DnsIdentityVerifier):
    name = "OpenAttestationDnsTxtIdentityProof"
    codes = DnsTxtIdentityProofCode
    skip_message = 'Document issuers doesn\'t have "documentStore" / "tokenRegistry" property or doesn\'t use DNS-TXT type'
    value_key = "value"
    invalid_message = "Certificate issuer identity is invalid"

    def test(self, document: Document, options: VerificationOptions) -> bool:
        return bool(self._issuers(document))

    def _issuers(self, document: Document) -> List[Any]:
        return [
            issuer for issuer in document.issuers
            if issuer.identity_proof is not None
            and issuer.identity_proof.type == IdentityProofType.DNS_TXT
        ]

    def _expected(self, issuer, options: VerificationOptions) -> str:
        return _contract_address(issuer)

    def _matcher(self, expected: str, options: VerificationOptions) -> Callable[[str], bool]:
        network_id = options.network_id

        def matches(raw: str) -> bool:
            record = parse_txt_record(raw)
            return (
                record is not None
                and record.addr.lower() == expected.lower()
                and record.net_id == network_id
            )
        return matches


class DnsDidIdentityProofVerifier(_DnsIdentityVerifier):
    name = "OpenAttestationDnsDidIdentityProof"
    codes = DnsDidIdentityProofCode
    skip_message = "Document was not issued using DNS-DID"
    value_key = "key"
    invalid_message = "Certificate issuer identity is invalid"

    def test(self, document: Document, options: VerificationOptions) -> bool:
        return document.uses(ProofMethod.DNS_DID)

    def _issuers(self, document: Document) -> List[Any]:
        return document.issuers_using(ProofMethod.DNS_DID)

    def _expected(self, issuer, options: VerificationOptions) -> str:
        if not issuer.identity_proof.key:
            raise MalformedDocumentError("DNS-DID identity proof has no key")
        return issuer.identity_proof.key

    def _matcher(self, expected: str, options: VerificationOptions) -> Callable[[str], bool]:
        def matches(raw: str) -> bool:
            record = parse_did_record(raw)
            return record is not None and record.public_key.lower() == expected.lower()
        return matches
