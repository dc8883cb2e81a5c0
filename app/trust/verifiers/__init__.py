"""Fragment-producing verifiers."""

from .base import Outcome, Verifier
from .document_store_status import DocumentStoreStatusVerifier
from .token_registry_status import TokenRegistryStatusVerifier
from .did_signed_status import DidSignedStatusVerifier
from .dns_identity import DnsDidIdentityProofVerifier, DnsTxtIdentityProofVerifier


def default_verifiers():
    """Fresh instances of every built-in verifier, in report order."""
    return [
        DocumentStoreStatusVerifier(),
        TokenRegistryStatusVerifier(),
        DidSignedStatusVerifier(),
        DnsTxtIdentityProofVerifier(),
        DnsDidIdentityProofVerifier(),
    ]


__all__ = [
    "Outcome",
    "Verifier",
    "DocumentStoreStatusVerifier",
    "TokenRegistryStatusVerifier",
    "DidSignedStatusVerifier",
    "DnsTxtIdentityProofVerifier",
    "DnsDidIdentityProofVerifier",
    "default_verifiers",
]
