"""Data types flowing through the decoding pipeline.

heatmaps + PAFs -> Peak -> CandidateLimb -> PartialSkeleton -> HumanPose
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np

# Slot value for a joint that a partial skeleton has not claimed.
EMPTY = -1

# Keypoint coordinate used in HumanPose for joints that were not found.
NOT_FOUND = (-1.0, -1.0)


@dataclass(frozen=True)
class Peak:
    """A local maximum of one keypoint heatmap.

    Attributes:
        id: Peak id, unique across all heatmaps of one decode call.
        x: Column of the peak in feature-map pixels.
        y: Row of the peak in feature-map pixels.
        score: Heatmap value at the peak.
        keypoint_type: Index of the heatmap the peak was found in.
    """

    id: int
    x: float
    y: float
    score: float
    keypoint_type: int

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class CandidateLimb:
    """A scored connection between two peaks for one limb type."""

    limb_type: int
    peak_a: int
    peak_b: int
    score: float


@dataclass
class PartialSkeleton:
    """An in-progress person assembly.

    Attributes:
        joints: One slot per keypoint type holding a peak id or EMPTY.
        total_score: Sum of joint confidences and limb scores added so far.
        joint_count: Number of non-empty slots.
    """

    joints: List[int]
    total_score: float = 0.0
    joint_count: int = 0

    @classmethod
    def empty(cls, num_keypoints: int) -> PartialSkeleton:
        return cls(joints=[EMPTY] * num_keypoints)

    def peak_ids(self) -> List[int]:
        """Peak ids claimed by this skeleton, in slot order."""
        return [peak_id for peak_id in self.joints if peak_id != EMPTY]

    @property
    def mean_score(self) -> float:
        if self.joint_count == 0:
            return 0.0
        return self.total_score / self.joint_count


@dataclass(frozen=True)
class HumanPose:
    """A decoded person skeleton. Frozen; rescaling returns new instances.

    Attributes:
        keypoints: Array of shape (K, 2) with (x, y) per keypoint type;
            joints that were not found hold NOT_FOUND.
        scores: Array of shape (K,) with the peak confidence per joint
            (0 where not found).
        score: Pose confidence, total_score * max(0, joint_count - 1).
        total_score: Summed joint and limb scores of the skeleton.
        joint_count: Number of found joints.
    """

    keypoints: np.ndarray  # Shape: (K, 2) - x, y
    scores: np.ndarray  # Shape: (K,)
    score: float
    total_score: float = 0.0
    joint_count: int = 0
    found: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "found", np.asarray(self.keypoints)[:, 0] >= 0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        return {
            "keypoints": [
                [float(x), float(y)] if ok else None
                for (x, y), ok in zip(self.keypoints, self.found)
            ],
            "scores": [float(s) for s in self.scores],
            "score": float(self.score),
            "total_score": float(self.total_score),
            "joint_count": int(self.joint_count),
        }


__all__ = [
    "EMPTY",
    "NOT_FOUND",
    "Peak",
    "CandidateLimb",
    "PartialSkeleton",
    "HumanPose",
]
