"""
HTTP DID resolver client.

Resolves a DID through a universal-resolver style endpoint
(``GET {base_url}{did}``) and extracts its verification methods. Both the
resolution-result envelope (``{"didDocument": {...}}``) and a bare DID
document are accepted; legacy ``publicKey`` entries are read as
verification methods.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from app.core import config
from .cache import CacheConfig, DidDocumentCache
from .exceptions import DidResolutionError
from .models import DidDocument, VerificationMethod

log = logging.getLogger(__name__)


def parse_did_document(did: str, body: Dict[str, Any]) -> DidDocument:
    """Build a DidDocument from a resolver response body.

    Raises:
        DidResolutionError: No DID document in the body.
    """
    raw = body.get("didDocument", body) if isinstance(body, dict) else None
    if not isinstance(raw, dict) or not raw:
        raise DidResolutionError(f"No DID document returned for {did}")

    entries = list(raw.get("verificationMethod") or []) + list(raw.get("publicKey") or [])
    methods = [VerificationMethod.from_dict(entry) for entry in entries if isinstance(entry, dict)]
    return DidDocument(id=raw.get("id", did), verification_methods=methods)


class DidResolver:
    """Key-resolution capability with a positive-result cache."""

    def __init__(
        self,
        base_url: str = config.DID_RESOLVER_URL,
        timeout: float = config.DID_RESOLVER_TIMEOUT_SECONDS,
        cache: Optional[DidDocumentCache] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.cache = cache or DidDocumentCache(
            CacheConfig(
                ttl_seconds=config.DID_CACHE_TTL_SECONDS,
                max_entries=config.DID_CACHE_MAX_ENTRIES,
            )
        )

    async def resolve(self, did: str) -> DidDocument:
        """Resolve ``did`` to its DID document.

        Raises:
            DidResolutionError: Network failure, unknown DID or malformed response.
        """
        if not did or not did.startswith("did:"):
            raise DidResolutionError(f"Invalid DID: {did}")

        cached = await self.cache.get(did)
        if cached is not None:
            log.debug(f"did_cache_hit did={did}")
            return cached

        url = f"{self.base_url}{quote(did, safe=':')}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await client.get(url, headers={"Accept": "application/did+json, application/json"})

                if response.status_code == 404:
                    raise DidResolutionError(f"DID not found: {did}")
                if response.status_code >= 400:
                    raise DidResolutionError(
                        f"DID resolution failed for {did}: HTTP {response.status_code}"
                    )
                body = response.json()
        except httpx.TimeoutException:
            raise DidResolutionError(f"DID resolution timed out for {did}")
        except httpx.HTTPError as e:
            raise DidResolutionError(f"DID resolution failed for {did}: {e}")
        except ValueError:
            raise DidResolutionError(f"DID resolver returned invalid JSON for {did}")

        document = parse_did_document(did, body)
        log.info(f"did_resolved did={did} methods={len(document.verification_methods)}")
        await self.cache.put(did, document)
        return document


_did_resolver: Optional[DidResolver] = None


def get_did_resolver() -> DidResolver:
    """Get or create the DID resolver singleton."""
    global _did_resolver
    if _did_resolver is None:
        _did_resolver = DidResolver()
    return _did_resolver
