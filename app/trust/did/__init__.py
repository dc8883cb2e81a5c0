"""Key resolution capability: DID documents over HTTP with caching."""

from .exceptions import DidResolutionError
from .models import DidDocument, VerificationMethod
from .cache import CacheConfig, DidDocumentCache
from .resolver import DidResolver, get_did_resolver, parse_did_document

__all__ = [
    "DidResolutionError",
    "DidDocument",
    "VerificationMethod",
    "CacheConfig",
    "DidDocumentCache",
    "DidResolver",
    "get_did_resolver",
    "parse_did_document",
]
