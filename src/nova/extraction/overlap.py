"""
Overlap resolution between entity candidates.
"""
from typing import Iterable, List

from ..data_types import EntityMatch


def resolve_overlaps(candidates: Iterable[EntityMatch]) -> List[EntityMatch]:
    """
    Keep a pairwise non-overlapping subset of the candidates.

    Candidates are walked by start offset (longer span first at equal
    start). A candidate overlapping already-accepted entities replaces them
    only when its confidence is strictly higher than each of theirs; on ties
    the earlier-accepted entity stays.

    Returns:
        Accepted entities ordered by start offset
    """
    ordered = sorted(candidates, key=lambda e: (e.start, -(e.end - e.start)))
    accepted: List[EntityMatch] = []

    for candidate in ordered:
        clashing = [e for e in accepted if e.overlaps(candidate)]
        if not clashing:
            accepted.append(candidate)
            continue
        if all(candidate.confidence > e.confidence for e in clashing):
            accepted = [e for e in accepted if e not in clashing]
            accepted.append(candidate)

    accepted.sort(key=lambda e: e.start)
    return accepted
