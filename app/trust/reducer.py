"""Fragment reduction.

Folds a fragment list into one overall status:
- SKIPPED fragments are neutral
- Among the rest: ERROR > INVALID > VALID (policy may swap ERROR / INVALID)
- Nothing but SKIPPED (or nothing at all) is NO_APPLICABLE_CHECKS, never VALID
"""

from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from app.core import config
from .api_models import Fragment, FragmentStatus, FragmentType, OverallStatus, Reason


class ReductionPolicy(str, Enum):
    ERROR_FIRST = "error"      # ERROR > INVALID > VALID
    INVALID_FIRST = "invalid"  # INVALID > ERROR > VALID


_PRECEDENCE: Dict[ReductionPolicy, List[FragmentStatus]] = {
    ReductionPolicy.ERROR_FIRST: [FragmentStatus.ERROR, FragmentStatus.INVALID],
    ReductionPolicy.INVALID_FIRST: [FragmentStatus.INVALID, FragmentStatus.ERROR],
}


def default_policy() -> ReductionPolicy:
    """Policy from TRUST_ERROR_PRECEDENCE (unknown values fall back to ERROR_FIRST)."""
    try:
        return ReductionPolicy(config.ERROR_PRECEDENCE)
    except ValueError:
        return ReductionPolicy.ERROR_FIRST


def _considered(fragments: Iterable[Fragment], types: Optional[Iterable[FragmentType]]) -> List[Fragment]:
    wanted = set(types) if types is not None else None
    return [
        f for f in fragments
        if f.status != FragmentStatus.SKIPPED and (wanted is None or f.type in wanted)
    ]


def reduce_fragments(
    fragments: Sequence[Fragment],
    policy: Optional[ReductionPolicy] = None,
    types: Optional[Iterable[FragmentType]] = None,
) -> OverallStatus:
    """Overall status of ``fragments`` (optionally only those of ``types``)."""
    considered = _considered(fragments, types)
    if not considered:
        return OverallStatus.NO_APPLICABLE_CHECKS

    statuses = {f.status for f in considered}
    for status in _PRECEDENCE[policy or default_policy()]:
        if status in statuses:
            return OverallStatus(status.value)
    return OverallStatus.VALID


def reduce_by_type(
    fragments: Sequence[Fragment],
    policy: Optional[ReductionPolicy] = None,
) -> Dict[FragmentType, OverallStatus]:
    """Overall status per fragment type present in ``fragments``."""
    types = list(dict.fromkeys(f.type for f in fragments))
    return {t: reduce_fragments(fragments, policy, types=[t]) for t in types}


def is_valid(
    fragments: Sequence[Fragment],
    types: Optional[Iterable[FragmentType]] = None,
) -> bool:
    """True when every non-skipped fragment is VALID.

    With ``types``, every listed type must reduce to VALID on its own, so a
    listed type whose fragments were all skipped is not valid.
    """
    if types is None:
        return reduce_fragments(fragments) == OverallStatus.VALID
    return all(reduce_fragments(fragments, types=[t]) == OverallStatus.VALID for t in types)


def failing_reasons(fragments: Sequence[Fragment]) -> List[Reason]:
    """Reasons of non-VALID, non-SKIPPED fragments, in fragment order."""
    return [
        f.reason for f in fragments
        if f.status not in (FragmentStatus.VALID, FragmentStatus.SKIPPED) and f.reason is not None
    ]
