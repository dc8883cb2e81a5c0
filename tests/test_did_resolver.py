"""Tests for DID resolution and the resolved-document cache."""

import httpx
import pytest
from unittest.mock import AsyncMock, patch

from app.trust.did import (
    CacheConfig,
    DidDocumentCache,
    DidResolutionError,
    DidResolver,
    parse_did_document,
)

DID = "did:ethr:0xE712878f6E8d5d4F9e87E10DA604F9cB564C9a89"

RESOLUTION_RESULT = {
    "didResolutionMetadata": {"contentType": "application/did+ld+json"},
    "didDocument": {
        "@context": ["https://www.w3.org/ns/did/v1"],
        "id": DID,
        "verificationMethod": [
            {
                "id": f"{DID}#controller",
                "type": "EcdsaSecp256k1RecoveryMethod2020",
                "controller": DID,
                "blockchainAccountId": "0xE712878f6E8d5d4F9e87E10DA604F9cB564C9a89@eip155:1",
            }
        ],
        "authentication": [f"{DID}#controller"],
    },
    "didDocumentMetadata": {},
}


def _http_client(status_code=200, body=None, side_effect=None):
    client = AsyncMock()
    client.__aenter__.return_value = client
    client.__aexit__.return_value = None
    response = httpx.Response(
        status_code, json=body if body is not None else {},
        request=httpx.Request("GET", "https://resolver.test/" + DID),
    )
    client.get = AsyncMock(return_value=response, side_effect=side_effect)
    return client


class TestParseDidDocument:

    def test_resolution_envelope(self):
        document = parse_did_document(DID, RESOLUTION_RESULT)

        assert document.id == DID
        assert document.method_ids() == [f"{DID}#controller"]
        method = document.verification_methods[0]
        assert method.controller == DID
        assert method.blockchain_account_id.endswith("@eip155:1")

    def test_bare_document_with_legacy_public_key(self):
        body = {
            "id": DID,
            "publicKey": [{
                "id": f"{DID}#owner",
                "type": "Secp256k1VerificationKey2018",
                "controller": DID,
                "ethereumAddress": "0xe712878f6e8d5d4f9e87e10da604f9cb564c9a89",
            }],
        }

        document = parse_did_document(DID, body)

        assert document.method_ids() == [f"{DID}#owner"]
        assert document.verification_methods[0].ethereum_address == "0xe712878f6e8d5d4f9e87e10da604f9cb564c9a89"
        assert document.method(f"{DID}#owner").type == "Secp256k1VerificationKey2018"
        assert document.method(f"{DID}#controller") is None

    def test_empty_body(self):
        with pytest.raises(DidResolutionError, match="No DID document"):
            parse_did_document(DID, {"didDocument": {}})


class TestDidResolver:

    @pytest.mark.asyncio
    async def test_resolves_and_caches(self):
        client = _http_client(body=RESOLUTION_RESULT)
        resolver = DidResolver(base_url="https://resolver.test/", timeout=1.0)

        with patch("app.trust.did.resolver.httpx.AsyncClient", return_value=client):
            first = await resolver.resolve(DID)
            second = await resolver.resolve(DID)

        assert first == second
        assert client.get.await_count == 1
        assert client.get.call_args.args[0] == f"https://resolver.test/{DID}"
        assert resolver.cache.metrics()["hits"] == 1

    @pytest.mark.asyncio
    async def test_not_found(self):
        resolver = DidResolver(base_url="https://resolver.test/", timeout=1.0)

        with patch("app.trust.did.resolver.httpx.AsyncClient", return_value=_http_client(status_code=404)):
            with pytest.raises(DidResolutionError, match="DID not found"):
                await resolver.resolve(DID)
        assert resolver.cache.size == 0

    @pytest.mark.asyncio
    async def test_server_error(self):
        resolver = DidResolver(base_url="https://resolver.test/", timeout=1.0)

        with patch("app.trust.did.resolver.httpx.AsyncClient", return_value=_http_client(status_code=500)):
            with pytest.raises(DidResolutionError, match="HTTP 500"):
                await resolver.resolve(DID)

    @pytest.mark.asyncio
    async def test_timeout(self):
        client = _http_client(side_effect=httpx.ConnectTimeout("slow"))
        resolver = DidResolver(base_url="https://resolver.test/", timeout=1.0)

        with patch("app.trust.did.resolver.httpx.AsyncClient", return_value=client):
            with pytest.raises(DidResolutionError, match="timed out"):
                await resolver.resolve(DID)

    @pytest.mark.asyncio
    async def test_invalid_did(self):
        with pytest.raises(DidResolutionError, match="Invalid DID"):
            await DidResolver(base_url="https://resolver.test/").resolve("0xE712878f")


class TestDidDocumentCache:

    @pytest.mark.asyncio
    async def test_lru_eviction(self):
        cache = DidDocumentCache(CacheConfig(ttl_seconds=60, max_entries=2))
        docs = {f"did:example:{i}": parse_did_document(f"did:example:{i}", {"id": f"did:example:{i}"}) for i in range(3)}

        await cache.put("did:example:0", docs["did:example:0"])
        await cache.put("did:example:1", docs["did:example:1"])
        await cache.get("did:example:0")
        await cache.put("did:example:2", docs["did:example:2"])

        assert await cache.get("did:example:1") is None
        assert await cache.get("did:example:0") is not None
        assert cache.size == 2

    @pytest.mark.asyncio
    async def test_expired_entry(self):
        cache = DidDocumentCache(CacheConfig(ttl_seconds=-1, max_entries=10))
        await cache.put(DID, parse_did_document(DID, RESOLUTION_RESULT))

        assert await cache.get(DID) is None
        assert cache.metrics()["misses"] == 1

    @pytest.mark.asyncio
    async def test_invalidate_and_clear(self):
        cache = DidDocumentCache()
        document = parse_did_document(DID, RESOLUTION_RESULT)
        await cache.put(DID, document)

        await cache.invalidate(DID)
        assert await cache.get(DID) is None

        await cache.put(DID, document)
        await cache.clear()
        assert cache.size == 0
