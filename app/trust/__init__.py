"""Verification fragment engine for signed documents."""

from .api_models import Fragment, FragmentStatus, FragmentType, OverallStatus, Reason
from .document import Document, parse_document
from .options import VerificationOptions, build_options
from .reducer import ReductionPolicy, failing_reasons, is_valid, reduce_by_type, reduce_fragments
from .runner import VerificationRunner, verify_document

__all__ = [
    "Fragment",
    "FragmentStatus",
    "FragmentType",
    "OverallStatus",
    "Reason",
    "Document",
    "parse_document",
    "VerificationOptions",
    "build_options",
    "ReductionPolicy",
    "failing_reasons",
    "is_valid",
    "reduce_by_type",
    "reduce_fragments",
    "VerificationRunner",
    "verify_document",
]
