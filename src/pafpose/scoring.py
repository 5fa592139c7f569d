"""Candidate limb scoring from part affinity fields.

For every pair (peak of type A, peak of type B) the PAF is sampled at
``num_mid_points`` evenly spaced points on the segment A -> B and
projected onto the segment direction. A pair becomes a CandidateLimb
when enough samples agree with the direction; its score is the mean
projection over the agreeing samples.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from pafpose.types import CandidateLimb, Peak


def _positions(peaks: Sequence[Peak]) -> np.ndarray:
    return np.array([[p.x, p.y] for p in peaks], dtype=np.float64).reshape(-1, 2)


def score_limb(
    limb_type: int,
    peaks_a: Sequence[Peak],
    peaks_b: Sequence[Peak],
    paf_x: np.ndarray,
    paf_y: np.ndarray,
    mid_points_score_threshold: float,
    found_mid_points_ratio_threshold: float,
    num_mid_points: int = 10,
    length_penalty: bool = False,
) -> List[CandidateLimb]:
    """Score all connections between two peak sets for one limb type.

    Samples are read at the nearest pixel, clipped to the grid.

    Args:
        limb_type: Index of the limb in the topology, recorded on candidates.
        peaks_a: Peaks of the limb's start keypoint type.
        peaks_b: Peaks of the limb's end keypoint type.
        paf_x: PAF x-component grid for this limb.
        paf_y: PAF y-component grid for this limb.
        mid_points_score_threshold: A sample counts when its projection
            is strictly greater than this.
        found_mid_points_ratio_threshold: Minimum fraction of counting
            samples for the pair to be accepted.
        num_mid_points: Number of samples per segment, endpoints included.
        length_penalty: Add ``min(0.5 * H / length - 1, 0)`` to the score
            and drop pairs whose score is then not positive.

    Returns:
        Accepted candidates ordered by (index in peaks_a, index in peaks_b).
    """
    if not peaks_a or not peaks_b:
        return []

    paf_x = np.asarray(paf_x)
    paf_y = np.asarray(paf_y)
    height, width = paf_x.shape

    pos_a = _positions(peaks_a)  # (NA, 2)
    pos_b = _positions(peaks_b)  # (NB, 2)

    vec = pos_b[None, :, :] - pos_a[:, None, :]  # (NA, NB, 2)
    norm = np.linalg.norm(vec, axis=-1)  # (NA, NB)
    nonzero = norm > 0
    safe_norm = np.where(nonzero, norm, 1.0)
    unit = vec / safe_norm[..., None]

    steps = np.linspace(0.0, 1.0, num_mid_points)  # (M,)
    samples = pos_a[:, None, None, :] + steps[None, None, :, None] * vec[:, :, None, :]  # (NA, NB, M, 2)
    xs = np.clip(np.rint(samples[..., 0]).astype(np.int64), 0, width - 1)
    ys = np.clip(np.rint(samples[..., 1]).astype(np.int64), 0, height - 1)

    projections = paf_x[ys, xs] * unit[..., 0:1] + paf_y[ys, xs] * unit[..., 1:2]  # (NA, NB, M)
    counting = projections > mid_points_score_threshold
    count = counting.sum(axis=-1)
    scores = np.where(counting, projections, 0.0).sum(axis=-1) / np.maximum(count, 1)

    accepted = nonzero & (count > 0) & (count / num_mid_points >= found_mid_points_ratio_threshold)
    if length_penalty:
        scores = scores + np.minimum(0.5 * height / safe_norm - 1.0, 0.0)
        accepted &= scores > 0

    rows, cols = np.nonzero(accepted)
    return [
        CandidateLimb(
            limb_type=limb_type,
            peak_a=peaks_a[i].id,
            peak_b=peaks_b[j].id,
            score=float(scores[i, j]),
        )
        for i, j in zip(rows.tolist(), cols.tolist())
    ]


__all__ = ["score_limb"]
