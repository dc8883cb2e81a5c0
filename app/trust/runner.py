"""Verification runner.

For each verifier: ``test`` decides applicability, inapplicable verifiers
are ``skip``-ped, applicable ones are ``verify``-ed. All verifiers are
dispatched concurrently and joined before the fragment list is returned,
in verifier order. A caller timeout abandons the whole run: fragments are
never emitted partially.
"""

import asyncio
import logging
from typing import Any, List, Optional, Sequence

from .api_models import Fragment
from .document import Document, parse_document
from .options import VerificationOptions, build_options
from .verifiers import Verifier, default_verifiers

log = logging.getLogger(__name__)


class VerificationRunner:
    """Runs a fixed set of verifiers against documents."""

    def __init__(self, verifiers: Optional[Sequence[Verifier]] = None):
        self.verifiers: List[Verifier] = list(verifiers) if verifiers is not None else default_verifiers()

    async def run(
        self,
        document: Document,
        options: Optional[VerificationOptions] = None,
        timeout: Optional[float] = None,
    ) -> List[Fragment]:
        """Produce one fragment per verifier.

        Raises:
            asyncio.TimeoutError: ``timeout`` elapsed; no fragments are returned.
        """
        options = options or build_options()
        if timeout is None:
            return await self._run(document, options)
        return await asyncio.wait_for(self._run(document, options), timeout)

    async def _run(self, document: Document, options: VerificationOptions) -> List[Fragment]:
        fragments = await asyncio.gather(
            *(self._dispatch(verifier, document, options) for verifier in self.verifiers)
        )
        summary = " ".join(f"{f.name}={f.status.value}" for f in fragments)
        log.info(f"verification_complete {summary}")
        return list(fragments)

    async def _dispatch(self, verifier: Verifier, document: Document, options: VerificationOptions) -> Fragment:
        try:
            applicable = verifier.test(document, options)
        except Exception as e:
            log.error(f"verifier_test_failed {verifier.name}: {e}")
            return verifier.error_fragment(e)

        if not applicable:
            return await verifier.skip(document, options)

        try:
            return await verifier.verify(document, options)
        except Exception as e:
            # verify() overrides may raise
            log.error(f"verifier_verify_raised {verifier.name}: {e}")
            return verifier.error_fragment(e)


async def verify_document(
    document: Any,
    options: Optional[VerificationOptions] = None,
    verifiers: Optional[Sequence[Verifier]] = None,
    timeout: Optional[float] = None,
) -> List[Fragment]:
    """Verify a parsed Document or a raw wrapped document dict.

    Raises:
        DocumentParseError: ``document`` is a dict that cannot be parsed.
        asyncio.TimeoutError: ``timeout`` elapsed.
    """
    if not isinstance(document, Document):
        document = parse_document(document)
    return await VerificationRunner(verifiers).run(document, options, timeout=timeout)
