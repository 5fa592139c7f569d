"""Greedy one-to-one selection of candidate limbs."""

from __future__ import annotations

from typing import Iterable, List

from pafpose.types import CandidateLimb


def match_limbs(candidates: Iterable[CandidateLimb]) -> List[CandidateLimb]:
    """Select candidates so that no peak is used twice on either side.

    Candidates are visited by descending score (ties: lower peak_a, then
    lower peak_b) and accepted while both endpoints are still free. This
    approximates maximum-weight bipartite matching; it is not optimal.

    Returns:
        Accepted candidates in acceptance order.
    """
    ordered = sorted(candidates, key=lambda c: (-c.score, c.peak_a, c.peak_b))

    used_a = set()
    used_b = set()
    accepted: List[CandidateLimb] = []
    for candidate in ordered:
        if candidate.peak_a in used_a or candidate.peak_b in used_b:
            continue
        used_a.add(candidate.peak_a)
        used_b.add(candidate.peak_b)
        accepted.append(candidate)
    return accepted


__all__ = ["match_limbs"]
