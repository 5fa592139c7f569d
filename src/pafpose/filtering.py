"""Final skeleton filtering and conversion to HumanPose."""

from __future__ import annotations

from typing import Iterable, List, Mapping

import numpy as np

from pafpose.types import EMPTY, NOT_FOUND, HumanPose, PartialSkeleton, Peak


def to_human_pose(skeleton: PartialSkeleton, peaks: Mapping[int, Peak]) -> HumanPose:
    """Convert a skeleton to a HumanPose in feature-map coordinates."""
    num_keypoints = len(skeleton.joints)
    keypoints = np.full((num_keypoints, 2), NOT_FOUND, dtype=np.float32)
    scores = np.zeros(num_keypoints, dtype=np.float32)
    for slot, peak_id in enumerate(skeleton.joints):
        if peak_id == EMPTY:
            continue
        peak = peaks[peak_id]
        keypoints[slot] = (peak.x, peak.y)
        scores[slot] = peak.score

    return HumanPose(
        keypoints=keypoints,
        scores=scores,
        score=skeleton.total_score * max(0, skeleton.joint_count - 1),
        total_score=skeleton.total_score,
        joint_count=skeleton.joint_count,
    )


def filter_skeletons(
    skeletons: Iterable[PartialSkeleton],
    peaks: Mapping[int, Peak],
    min_joints_number: int,
    min_subset_score: float,
) -> List[HumanPose]:
    """Keep skeletons with enough joints and a high enough mean score.

    Args:
        skeletons: Assembled skeletons in creation order.
        peaks: All peaks of the decode call, keyed by id.
        min_joints_number: Minimum joint_count.
        min_subset_score: Minimum total_score / joint_count.

    Returns:
        Surviving skeletons as HumanPose, in the input order.
    """
    poses = []
    for skeleton in skeletons:
        if skeleton.joint_count < min_joints_number:
            continue
        if skeleton.total_score / skeleton.joint_count < min_subset_score:
            continue
        poses.append(to_human_pose(skeleton, peaks))
    return poses


__all__ = ["to_human_pose", "filter_skeletons"]
