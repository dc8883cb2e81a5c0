"""Shared fixtures: fixture documents and mocked capabilities.

No test reaches the network: chain reads, DID resolution and DNS lookups
are AsyncMock-backed capability objects injected through VerificationOptions.
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.trust.did import DidDocument, VerificationMethod
from app.trust.document import parse_document
from app.trust.options import VerificationOptions

FIXTURES_DIR = Path(__file__).parent / "fixtures"

DID_1 = "did:ethr:0xE712878f6E8d5d4F9e87E10DA604F9cB564C9a89"
DID_2 = "did:ethr:0xB26B4941941C51a4885E5B7D3A1B861E54405f90"
MERKLE_ROOT = "a64d8f7a1c3e5b9d2f4a6c8e0b1d3f5a7c9e2b4d6f8a0c1e3b5d7f9a2c4e6b8d"
TOKEN_REGISTRY = "0x142Ca30e3b78A840a82192529cA047ED759a6F7e"
DOCUMENT_STORE = "0x007d40224f6562461633ccfbaffd359ebb2fc9ba"


@pytest.fixture
def ids():
    """Identifiers used across the fixture documents."""
    return {
        "did_1": DID_1,
        "did_2": DID_2,
        "key_1": f"{DID_1}#controller",
        "key_2": f"{DID_2}#controller",
        "merkle_root": MERKLE_ROOT,
        "token_id": "0x" + MERKLE_ROOT,
        "token_registry": TOKEN_REGISTRY,
        "document_store": DOCUMENT_STORE,
    }


@pytest.fixture
def raw_fixture():
    """Load a fixture document as a raw dict."""
    def _load(name):
        return json.loads((FIXTURES_DIR / f"{name}.json").read_text())
    return _load


@pytest.fixture
def load_document(raw_fixture):
    """Load and parse a fixture document."""
    def _load(name):
        return parse_document(raw_fixture(name))
    return _load


@pytest.fixture
def did_document():
    """Build a resolved DID document with ``#controller`` as its only key."""
    def _build(did, *key_ids):
        key_ids = key_ids or (f"{did}#controller",)
        return DidDocument(
            id=did,
            verification_methods=[
                VerificationMethod(
                    id=key_id,
                    type="EcdsaSecp256k1RecoveryMethod2020",
                    controller=did,
                    blockchain_account_id=f"{did.split(':')[-1]}@eip155:1",
                )
                for key_id in key_ids
            ],
        )
    return _build


@pytest.fixture
def mock_caller():
    caller = MagicMock()
    caller.execute = AsyncMock()
    return caller


@pytest.fixture
def mock_resolver():
    resolver = MagicMock()
    resolver.resolve = AsyncMock()
    return resolver


@pytest.fixture
def mock_dns():
    dns = MagicMock()
    dns.query = AsyncMock(return_value=[])
    return dns


@pytest.fixture
def options(mock_caller, mock_resolver, mock_dns):
    """Mainnet options wired to the mocked capabilities."""
    return VerificationOptions(
        network="mainnet",
        contract_caller=mock_caller,
        did_resolver=mock_resolver,
        dns_resolver=mock_dns,
    )
