"""Verifier contract and the shared fragment adapter.

A verifier implements ``test`` and ``check``. ``check`` returns an
``Outcome`` (VALID or INVALID with data and reason) or raises;
``Verifier.verify`` is the only place where outcomes and exceptions are
turned into fragments, so no verifier can leak an exception into the batch.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Optional, Type

from app.trust.api_models import Fragment, FragmentStatus, FragmentType, Reason
from app.trust.document import Document, DocumentVersion
from app.trust.options import VerificationOptions

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome:
    """Result of a verifier's check before it is wrapped in a fragment."""
    status: FragmentStatus
    data: Any = None
    reason: Optional[Reason] = None

    @classmethod
    def valid(cls, data: Any = None) -> "Outcome":
        return cls(FragmentStatus.VALID, data)

    @classmethod
    def invalid(cls, data: Any = None, reason: Optional[Reason] = None) -> "Outcome":
        return cls(FragmentStatus.INVALID, data, reason)


def describe(exc: BaseException) -> str:
    """Message of a domain exception, falling back to str() / class name."""
    return getattr(exc, "message", None) or str(exc) or type(exc).__name__


def per_version(document: Document, entries: List[Dict[str, Any]]) -> Any:
    """v3 documents have a single issuer, so details collapse to one object."""
    if document.version == DocumentVersion.V3:
        return entries[0] if entries else None
    return entries


class Verifier(ABC):
    """One fragment-producing check: {skip, test, verify}."""

    name: str
    type: FragmentType = FragmentType.DOCUMENT_STATUS
    codes: Type[IntEnum]
    skip_message: str

    async def skip(self, document: Optional[Document], options: Optional[VerificationOptions]) -> Fragment:
        """Constant SKIPPED fragment carrying this verifier's skip code."""
        return Fragment(
            name=self.name,
            type=self.type,
            status=FragmentStatus.SKIPPED,
            reason=Reason.of(self.codes["SKIPPED"], self.skip_message),
        )

    @abstractmethod
    def test(self, document: Document, options: VerificationOptions) -> bool:
        """Whether this verifier applies to the document. Never raises."""

    @abstractmethod
    async def check(self, document: Document, options: VerificationOptions) -> Outcome:
        """Run the check. May raise; verify() classifies the failure."""

    async def verify(self, document: Document, options: VerificationOptions) -> Fragment:
        try:
            outcome = await self.check(document, options)
        except Exception as e:
            log.warning(f"verifier_error {self.name}: {describe(e)}",
                        extra={"verifier": self.name, "status": FragmentStatus.ERROR.value})
            return self.error_fragment(e)

        log.info(f"verifier_done {self.name} status={outcome.status.value}",
                 extra={"verifier": self.name, "status": outcome.status.value})
        return Fragment(
            name=self.name,
            type=self.type,
            status=outcome.status,
            data=outcome.data,
            reason=outcome.reason,
        )

    def error_fragment(self, exc: Exception) -> Fragment:
        """ERROR fragment with UNEXPECTED_ERROR and the failure description."""
        message = describe(exc)
        return Fragment(
            name=self.name,
            type=self.type,
            status=FragmentStatus.ERROR,
            data={"name": type(exc).__name__, "message": message},
            reason=Reason.of(self.codes["UNEXPECTED_ERROR"], message),
        )
