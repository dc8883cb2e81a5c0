"""
Document trust verifier configuration constants.

Constants are organized into:
- NORMATIVE: Fixed values the verifiers depend on, not deployment tunable
- CONFIGURABLE: Defaults that may be overridden by deployment policy
- OPERATIONAL: Deployment-specific settings (env vars)
"""

import os

# =============================================================================
# NORMATIVE CONSTANTS
# =============================================================================

# Owner returned by ownerOf() for burnt / unassigned tokens
ZERO_ADDRESS: str = "0x0000000000000000000000000000000000000000"

# Revocation type that marks an issuer as never revoked
REVOCATION_TYPE_NONE: str = "NONE"

# Prefix of the TXT records published for issuer identity proofs
OPENATTS_RECORD_PREFIX: str = "openatts"

# Chain ids for the networks we know how to reach
NETWORK_IDS: dict[str, int] = {
    "mainnet": 1,
    "homestead": 1,
    "ropsten": 3,
    "rinkeby": 4,
    "goerli": 5,
    "sepolia": 11155111,
    "matic": 137,
    "maticmum": 80001,
}

# Public JSON-RPC endpoints per network, used when TRUST_RPC_URL is unset
DEFAULT_RPC_URLS: dict[str, str] = {
    "mainnet": "https://cloudflare-eth.com",
    "homestead": "https://cloudflare-eth.com",
    "goerli": "https://rpc.ankr.com/eth_goerli",
    "sepolia": "https://rpc.sepolia.org",
    "matic": "https://polygon-rpc.com",
    "maticmum": "https://rpc-mumbai.maticvigil.com",
}

# =============================================================================
# CONFIGURABLE DEFAULTS
# =============================================================================

# Network used when the caller does not name one
DEFAULT_NETWORK: str = os.getenv("TRUST_NETWORK", "mainnet")

# Explicit JSON-RPC endpoint (overrides DEFAULT_RPC_URLS)
RPC_URL: str = os.getenv("TRUST_RPC_URL", "")

RPC_TIMEOUT_SECONDS: float = float(os.getenv("TRUST_RPC_TIMEOUT", "10.0"))

# DID resolution endpoint; the DID is appended to this URL
DID_RESOLVER_URL: str = os.getenv(
    "TRUST_DID_RESOLVER_URL", "https://dev.uniresolver.io/1.0/identifiers/"
)

DID_RESOLVER_TIMEOUT_SECONDS: float = float(os.getenv("TRUST_DID_RESOLVER_TIMEOUT", "10.0"))

# Resolved DID documents are cached (positive results only)
DID_CACHE_TTL_SECONDS: int = int(os.getenv("TRUST_DID_CACHE_TTL", "300"))
DID_CACHE_MAX_ENTRIES: int = int(os.getenv("TRUST_DID_CACHE_MAX_ENTRIES", "1000"))

# DNS-over-HTTPS endpoint speaking the JSON API (dns.google / cloudflare)
DOH_URL: str = os.getenv("TRUST_DOH_URL", "https://dns.google/resolve")

DOH_TIMEOUT_SECONDS: float = float(os.getenv("TRUST_DOH_TIMEOUT", "5.0"))

# Upper bound for one whole /verify call. All fragments are dropped on timeout.
VERIFICATION_TIMEOUT_SECONDS: float = float(os.getenv("TRUST_VERIFICATION_TIMEOUT", "30.0"))

# Which failure wins when both ERROR and INVALID fragments are present
# "error" (default): ERROR > INVALID > VALID
# "invalid": INVALID > ERROR > VALID
ERROR_PRECEDENCE: str = os.getenv("TRUST_ERROR_PRECEDENCE", "error").lower()

# =============================================================================
# OPERATIONAL SETTINGS
# =============================================================================

# Controls whether /admin endpoint returns configuration data
ADMIN_ENDPOINT_ENABLED: bool = os.getenv("ADMIN_ENDPOINT_ENABLED", "true").lower() == "true"


def rpc_url_for(network: str) -> str:
    """Return the JSON-RPC endpoint for a network.

    TRUST_RPC_URL always wins. Otherwise the public endpoint table is used.

    Raises:
        ValueError: If no endpoint is known for the network.
    """
    if RPC_URL:
        return RPC_URL
    try:
        return DEFAULT_RPC_URLS[network]
    except KeyError:
        raise ValueError(f"No RPC endpoint configured for network: {network}")


def network_id_for(network: str) -> int:
    """Return the chain id for a network name, or raise ValueError."""
    try:
        return NETWORK_IDS[network]
    except KeyError:
        raise ValueError(f"Unknown network: {network}")
