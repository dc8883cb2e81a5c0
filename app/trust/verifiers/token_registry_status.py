"""Token registry status: is the document minted as a token on its registry?

The token id is the document's merkle root. A document is minted on a
registry when ``ownerOf(tokenId)`` returns a non-zero owner. Only one
registry per document is allowed: a merkle-root token id is only
meaningful under a single registry, so several registries are rejected
before any chain call is made.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from app.core import config
from app.trust.api_models import FragmentType, Reason, TokenRegistryStatusCode
from app.trust.chain import CallRevertedError, to_token_id
from app.trust.document import Document, ProofMethod
from app.trust.exceptions import ConfigurationError
from app.trust.fanout import Settled, settle_all
from app.trust.options import VerificationOptions
from .base import Outcome, Verifier, per_version
from .chain_reasons import chain_failure_reason

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MintStatus:
    address: str
    minted: bool
    reason: Optional[Reason] = None

    def to_dict(self) -> Dict[str, Any]:
        entry: Dict[str, Any] = {"minted": self.minted, "address": self.address}
        if self.reason is not None:
            entry["reason"] = self.reason.to_dict()
        return entry


def not_minted_reason(token_id: str, address: str) -> Reason:
    return Reason.of(
        TokenRegistryStatusCode.DOCUMENT_NOT_MINTED,
        f"Document {token_id} has not been issued under contract {address}",
    )


def token_registries(document: Document) -> List[str]:
    """Distinct registry addresses in discovery order (case-insensitive)."""
    seen: Dict[str, str] = {}
    for issuer in document.issuers_using(ProofMethod.TOKEN_REGISTRY):
        seen.setdefault(issuer.token_registry.lower(), issuer.token_registry)
    return list(seen.values())


class TokenRegistryStatusVerifier(Verifier):
    name = "OpenAttestationEthereumTokenRegistryStatus"
    type = FragmentType.DOCUMENT_STATUS
    codes = TokenRegistryStatusCode
    skip_message = 'Document issuers doesn\'t have "tokenRegistry" property or TOKEN_REGISTRY method'

    def test(self, document: Document, options: VerificationOptions) -> bool:
        return document.uses(ProofMethod.TOKEN_REGISTRY)

    async def check(self, document: Document, options: VerificationOptions) -> Outcome:
        registries = token_registries(document)
        if len(registries) > 1:
            raise ConfigurationError.multiple_token_registries(len(registries))

        token_id = to_token_id(document.signature.merkle_root)
        caller = options.chain()
        settled = await settle_all({
            registry: caller.execute(registry, "ownerOf", [token_id])
            for registry in registries
        })
        statuses = [self._status(address, token_id, result) for address, result in settled.items()]

        data = {
            "mintedOnAll": all(status.minted for status in statuses),
            "details": per_version(document, [status.to_dict() for status in statuses]),
        }
        not_minted = next((status for status in statuses if not status.minted), None)
        if not_minted is not None:
            return Outcome.invalid(data, not_minted.reason)
        return Outcome.valid(data)

    def _status(self, address: str, token_id: str, result: Settled) -> MintStatus:
        if not result.ok:
            log.info(f"ownerOf failed on {address}: {result.error}")
            if isinstance(result.error, CallRevertedError):
                # ERC721 reverts ownerOf for tokens that were never minted
                return MintStatus(address, False, not_minted_reason(token_id, address))
            reason = chain_failure_reason(result.error, self.codes, address, "token registry")
            return MintStatus(address, False, reason)

        owner = str(result.value).lower()
        if owner == config.ZERO_ADDRESS:
            return MintStatus(address, False, not_minted_reason(token_id, address))
        return MintStatus(address, True)
