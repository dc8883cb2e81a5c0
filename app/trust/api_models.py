"""
Document trust verifier API models.

Fragments are the atomic output of a verifier run. The HTTP surface wraps
the fragment list together with the reduced overall status.
"""

from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Fragment Status / Type
# =============================================================================

class FragmentStatus(str, Enum):
    """Outcome of a single verifier run."""
    VALID = "VALID"        # Checked condition holds
    INVALID = "INVALID"    # Checked condition fails
    ERROR = "ERROR"        # Could not be checked (infrastructure / malformed input)
    SKIPPED = "SKIPPED"    # Verifier not applicable to this document


class FragmentType(str, Enum):
    """Fixed category tag carried by every fragment."""
    DOCUMENT_STATUS = "DOCUMENT_STATUS"
    ISSUER_IDENTITY = "ISSUER_IDENTITY"


class OverallStatus(str, Enum):
    """Reduced status of a whole verification run."""
    VALID = "VALID"
    INVALID = "INVALID"
    ERROR = "ERROR"
    NO_APPLICABLE_CHECKS = "NO_APPLICABLE_CHECKS"


# =============================================================================
# Status Codes
# =============================================================================
# Each verifier owns a code table. codeString is always the member name.

class DocumentStoreStatusCode(IntEnum):
    UNEXPECTED_ERROR = 0
    DOCUMENT_NOT_ISSUED = 1
    CONTRACT_ADDRESS_INVALID = 2
    CHAIN_UNHANDLED_ERROR = 3
    SKIPPED = 4
    DOCUMENT_REVOKED = 5
    INVALID_ARGUMENT = 6


class TokenRegistryStatusCode(IntEnum):
    UNEXPECTED_ERROR = 0
    DOCUMENT_NOT_MINTED = 1
    CONTRACT_ADDRESS_INVALID = 2
    CHAIN_UNHANDLED_ERROR = 3
    SKIPPED = 4
    INVALID_ARGUMENT = 5


class DidSignedDocumentStatusCode(IntEnum):
    SKIPPED = 0
    UNEXPECTED_ERROR = 1


class DnsTxtIdentityProofCode(IntEnum):
    UNEXPECTED_ERROR = 0
    INVALID_IDENTITY = 1
    SKIPPED = 2


class DnsDidIdentityProofCode(IntEnum):
    UNEXPECTED_ERROR = 0
    INVALID_IDENTITY = 1
    SKIPPED = 2


# =============================================================================
# Fragment
# =============================================================================

class Reason(BaseModel):
    """Machine-readable failure reason: {code, codeString, message}."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    code: int
    code_string: str = Field(alias="codeString")
    message: str

    @classmethod
    def of(cls, code: IntEnum, message: str) -> "Reason":
        """Build a reason from a status code member."""
        return cls(code=int(code), code_string=code.name, message=message)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class Fragment(BaseModel):
    """Immutable result of one verifier run."""
    model_config = ConfigDict(frozen=True)

    name: str
    type: FragmentType
    status: FragmentStatus
    data: Optional[Any] = None
    reason: Optional[Reason] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the fragment JSON shape (absent keys omitted)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# HTTP Request / Response
# =============================================================================

class VerifyOptions(BaseModel):
    """Caller-supplied options for /verify."""
    network: Optional[str] = None
    verifiers: Optional[List[str]] = None  # restrict to these verifier names


class VerifyRequest(BaseModel):
    """Request body for /verify."""
    document: Dict[str, Any]
    options: VerifyOptions = Field(default_factory=VerifyOptions)


class VerifyResponse(BaseModel):
    """Response schema for /verify."""
    request_id: str
    overall_status: OverallStatus
    valid: bool
    fragments: List[Dict[str, Any]]
