"""Tests for DNS TXT record parsing, the DoH resolver and DNS identity verifiers."""

import httpx
import pytest
from unittest.mock import AsyncMock, patch

from app.trust.api_models import (
    DnsDidIdentityProofCode,
    DnsTxtIdentityProofCode,
    FragmentStatus,
    FragmentType,
)
from app.trust.dns import DnsLookupError, DnsTxtResolver, parse_did_record, parse_txt_record
from app.trust.verifiers import DnsDidIdentityProofVerifier, DnsTxtIdentityProofVerifier
from app.trust.verifiers.dns_identity import _DnsIdentityVerifier

LOCATION = "example.openattestation.com"


class TestRecordParsing:

    def test_txt_record(self):
        record = parse_txt_record("openatts net=ethereum netId=1 addr=0x142Ca30e3b78A840a82192529cA047ED759a6F7e")

        assert record.net == "ethereum"
        assert record.net_id == 1
        assert record.addr == "0x142Ca30e3b78A840a82192529cA047ED759a6F7e"

    def test_txt_record_rejects_other_records(self):
        assert parse_txt_record("v=spf1 include:_spf.google.com ~all") is None
        assert parse_txt_record("openatts net=ethereum") is None
        assert parse_txt_record("openatts net=ethereum netId=abc addr=0x1") is None

    def test_did_record(self):
        record = parse_did_record(
            "openatts a=dns-did; p=did:ethr:0xE712878f6E8d5d4F9e87E10DA604F9cB564C9a89#controller; v=1.0;"
        )

        assert record.algorithm == "dns-did"
        assert record.public_key == "did:ethr:0xE712878f6E8d5d4F9e87E10DA604F9cB564C9a89#controller"
        assert record.version == "1.0"

    def test_did_record_rejects_address_record(self):
        assert parse_did_record("openatts net=ethereum netId=1 addr=0x1") is None


def _doh_client(body=None, side_effect=None):
    client = AsyncMock()
    client.__aenter__.return_value = client
    client.__aexit__.return_value = None
    response = None
    if body is not None:
        response = httpx.Response(200, json=body, request=httpx.Request("GET", "https://dns.test/resolve"))
    client.get = AsyncMock(return_value=response, side_effect=side_effect)
    return client


class TestDnsTxtResolver:

    @pytest.mark.asyncio
    async def test_returns_txt_answers_unquoted(self):
        body = {
            "Status": 0,
            "Answer": [
                {"name": LOCATION, "type": 16, "data": '"openatts net=ethereum netId=1 addr=0xabc"'},
                {"name": LOCATION, "type": 5, "data": "alias.example.com."},
                {"name": LOCATION, "type": 16, "data": '"openatts a=dns-did; " "p=did:ethr:0x1#controller; v=1.0;"'},
            ],
        }
        client = _doh_client(body)

        with patch("app.trust.dns.httpx.AsyncClient", return_value=client):
            records = await DnsTxtResolver("https://dns.test/resolve").query(LOCATION)

        assert records == [
            "openatts net=ethereum netId=1 addr=0xabc",
            "openatts a=dns-did; p=did:ethr:0x1#controller; v=1.0;",
        ]
        assert client.get.call_args.kwargs["params"] == {"name": LOCATION, "type": "TXT"}

    @pytest.mark.asyncio
    async def test_nxdomain_is_empty(self):
        with patch("app.trust.dns.httpx.AsyncClient", return_value=_doh_client({"Status": 3})):
            assert await DnsTxtResolver("https://dns.test/resolve").query("missing.example") == []

    @pytest.mark.asyncio
    async def test_servfail_raises(self):
        with patch("app.trust.dns.httpx.AsyncClient", return_value=_doh_client({"Status": 2})):
            with pytest.raises(DnsLookupError, match="status 2"):
                await DnsTxtResolver("https://dns.test/resolve").query(LOCATION)

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        client = _doh_client(side_effect=httpx.ConnectError("refused"))

        with patch("app.trust.dns.httpx.AsyncClient", return_value=client):
            with pytest.raises(DnsLookupError, match="refused"):
                await DnsTxtResolver("https://dns.test/resolve").query(LOCATION)


class TestDnsTxtIdentityProof:

    @pytest.fixture
    def verifier(self):
        return DnsTxtIdentityProofVerifier()

    def test_applicability(self, verifier, load_document, options):
        assert verifier.test(load_document("v2_token_registry"), options)
        assert verifier.test(load_document("v2_document_store"), options)
        assert not verifier.test(load_document("v2_did_signed"), options)

    @pytest.mark.asyncio
    async def test_skip_is_issuer_identity(self, verifier, load_document, options):
        fragment = await verifier.skip(load_document("v2_did_signed"), options)

        assert fragment.type == FragmentType.ISSUER_IDENTITY
        assert fragment.reason.code == DnsTxtIdentityProofCode.SKIPPED

    @pytest.mark.asyncio
    async def test_matching_record(self, verifier, load_document, options, mock_dns, ids):
        mock_dns.query.return_value = [
            "v=spf1 -all",
            f"openatts net=ethereum netId=1 addr={ids['token_registry'].lower()}",
        ]

        fragment = await verifier.verify(load_document("v2_token_registry"), options)

        assert fragment.status == FragmentStatus.VALID
        assert fragment.data == [{"location": LOCATION, "value": ids["token_registry"], "status": "VALID"}]
        mock_dns.query.assert_awaited_once_with(LOCATION)

    @pytest.mark.asyncio
    async def test_wrong_network(self, verifier, load_document, options, mock_dns, ids):
        mock_dns.query.return_value = [f"openatts net=ethereum netId=5 addr={ids['token_registry']}"]

        fragment = await verifier.verify(load_document("v2_token_registry"), options)

        assert fragment.status == FragmentStatus.INVALID
        assert fragment.reason.code == DnsTxtIdentityProofCode.INVALID_IDENTITY
        assert fragment.reason.message == "Certificate issuer identity is invalid"

    @pytest.mark.asyncio
    async def test_lookup_failure(self, verifier, load_document, options, mock_dns):
        mock_dns.query.side_effect = DnsLookupError("DNS lookup timed out for example.openattestation.com")

        fragment = await verifier.verify(load_document("v2_token_registry"), options)

        assert fragment.status == FragmentStatus.INVALID
        assert fragment.data[0]["reason"] == "DNS lookup timed out for example.openattestation.com"

    @pytest.mark.asyncio
    async def test_v3_single_object(self, verifier, load_document, options, mock_dns, ids):
        mock_dns.query.return_value = [f"openatts net=ethereum netId=1 addr={ids['token_registry']}"]

        fragment = await verifier.verify(load_document("v3_token_registry"), options)

        assert fragment.status == FragmentStatus.VALID
        assert fragment.data["value"] == ids["token_registry"]


class TestDnsDidIdentityProof:

    @pytest.fixture
    def verifier(self):
        return DnsDidIdentityProofVerifier()

    def test_applicability(self, verifier, load_document, options):
        assert verifier.test(load_document("v2_dns_did"), options)
        assert verifier.test(load_document("v3_did_signed"), options)
        assert not verifier.test(load_document("v2_did_signed"), options)

    @pytest.mark.asyncio
    async def test_matching_record(self, verifier, load_document, options, mock_dns, ids):
        mock_dns.query.return_value = [f"openatts a=dns-did; p={ids['key_1']}; v=1.0;"]

        fragment = await verifier.verify(load_document("v2_dns_did"), options)

        assert fragment.status == FragmentStatus.VALID
        assert fragment.data == [{"location": LOCATION, "key": ids["key_1"], "status": "VALID"}]

    @pytest.mark.asyncio
    async def test_no_record(self, verifier, load_document, options, mock_dns):
        mock_dns.query.return_value = []

        fragment = await verifier.verify(load_document("v2_dns_did"), options)

        assert fragment.status == FragmentStatus.INVALID
        assert fragment.reason.code == DnsDidIdentityProofCode.INVALID_IDENTITY


class TestSharedLookup:

    def test_hooks_are_abstract(self):
        class PartialVerifier(_DnsIdentityVerifier):
            name = "Partial"

            def test(self, document, options):
                return True

            def _issuers(self, document):
                return []

        with pytest.raises(TypeError, match="_expected"):
            PartialVerifier()

    def test_concrete_verifiers_implement_hooks(self):
        assert DnsTxtIdentityProofVerifier.__abstractmethods__ == frozenset()
        assert DnsDidIdentityProofVerifier.__abstractmethods__ == frozenset()
