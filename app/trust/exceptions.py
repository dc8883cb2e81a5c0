"""
Document trust verifier exceptions.

Verifiers convert every exception escaping their check into an ERROR
fragment; these classes only decide at which scope a failure is caught.
"""


class TrustError(Exception):
    """Base exception carrying a short code and a message."""

    code = "TRUST_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MalformedDocumentError(TrustError):
    """Document structure cannot be verified at all.

    Raised inside a per-issuer fan-out this fails the whole fragment
    instead of a single issuer entry.
    """

    code = "MALFORMED_DOCUMENT"

    @classmethod
    def proofs_missing(cls) -> "MalformedDocumentError":
        return cls("Document is not signed. Proofs are missing.")

    @classmethod
    def revocation_missing(cls) -> "MalformedDocumentError":
        return cls("revocation block not found for an issuer")


class ConfigurationError(TrustError):
    """A fixed precondition is violated before any capability call."""

    code = "CONFIGURATION_INVALID"

    @classmethod
    def multiple_token_registries(cls, count: int) -> "ConfigurationError":
        return cls(f"Only one token registry is allowed. Found {count}")


class DocumentParseError(TrustError):
    """Raw document could not be normalised into a Document."""

    code = "DOCUMENT_PARSE_FAILED"
