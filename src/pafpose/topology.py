"""Limb topology: which keypoint types a limb connects and which PAF scores it.

The default topology is the 18-keypoint COCO layout used by OpenPose
models (heatmap channel 18 is the background). Each limb reads its PAF
from channels ``2 * paf_index`` (x) and ``2 * paf_index + 1`` (y).

Example:
    >>> topology = LimbTopology.coco18()
    >>> limb = topology.limbs[0]
    >>> topology.keypoint_names[limb.keypoint_a], topology.keypoint_names[limb.keypoint_b]
    ('neck', 'right_shoulder')
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence, Tuple

from pafpose.errors import ConfigError


class KeypointIndex:
    """COCO 18 keypoint indices as produced by OpenPose heatmaps."""

    NOSE = 0
    NECK = 1
    RIGHT_SHOULDER = 2
    RIGHT_ELBOW = 3
    RIGHT_WRIST = 4
    LEFT_SHOULDER = 5
    LEFT_ELBOW = 6
    LEFT_WRIST = 7
    RIGHT_HIP = 8
    RIGHT_KNEE = 9
    RIGHT_ANKLE = 10
    LEFT_HIP = 11
    LEFT_KNEE = 12
    LEFT_ANKLE = 13
    RIGHT_EYE = 14
    LEFT_EYE = 15
    RIGHT_EAR = 16
    LEFT_EAR = 17


COCO18_KEYPOINT_NAMES = (
    "nose",
    "neck",
    "right_shoulder",
    "right_elbow",
    "right_wrist",
    "left_shoulder",
    "left_elbow",
    "left_wrist",
    "right_hip",
    "right_knee",
    "right_ankle",
    "left_hip",
    "left_knee",
    "left_ankle",
    "right_eye",
    "left_eye",
    "right_ear",
    "left_ear",
)

# (paf_index, keypoint_a, keypoint_b) in assembly order. Limbs are
# processed from the neck outwards so that later limbs extend skeletons
# seeded by earlier ones.
COCO18_LIMBS = (
    (6, 1, 2),
    (10, 1, 5),
    (7, 2, 3),
    (8, 3, 4),
    (11, 5, 6),
    (12, 6, 7),
    (0, 1, 8),
    (1, 8, 9),
    (2, 9, 10),
    (3, 1, 11),
    (4, 11, 12),
    (5, 12, 13),
    (14, 1, 0),
    (15, 0, 14),
    (17, 14, 16),
    (16, 0, 15),
    (18, 15, 17),
    (9, 2, 16),
    (13, 5, 17),
)


@dataclass(frozen=True)
class Limb:
    """One limb type.

    Attributes:
        paf_index: PAF channel pair; x is ``2 * paf_index``, y is ``2 * paf_index + 1``.
        keypoint_a: Keypoint type at the start of the limb.
        keypoint_b: Keypoint type at the end of the limb.
    """

    paf_index: int
    keypoint_a: int
    keypoint_b: int

    @property
    def paf_channels(self) -> Tuple[int, int]:
        return (2 * self.paf_index, 2 * self.paf_index + 1)


@dataclass(frozen=True)
class LimbTopology:
    """Immutable ordered limb table.

    Args:
        num_keypoints: Number of keypoint types (K), background excluded.
        limbs: Limb definitions in assembly order.
        keypoint_names: Optional names, one per keypoint type.

    Raises:
        ConfigError: If a limb references an unknown keypoint type,
            connects a keypoint type to itself, or reuses a PAF pair.
    """

    num_keypoints: int
    limbs: Tuple[Limb, ...]
    keypoint_names: Tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        if self.num_keypoints <= 0:
            raise ConfigError(f"num_keypoints must be positive, got {self.num_keypoints}")
        if self.keypoint_names and len(self.keypoint_names) != self.num_keypoints:
            raise ConfigError(
                f"Expected {self.num_keypoints} keypoint names, got {len(self.keypoint_names)}"
            )

        seen_pafs = set()
        for limb in self.limbs:
            for kpt in (limb.keypoint_a, limb.keypoint_b):
                if not 0 <= kpt < self.num_keypoints:
                    raise ConfigError(f"Limb {limb} references unknown keypoint type {kpt}")
            if limb.keypoint_a == limb.keypoint_b:
                raise ConfigError(f"Limb {limb} connects keypoint type {limb.keypoint_a} to itself")
            if limb.paf_index < 0 or limb.paf_index in seen_pafs:
                raise ConfigError(f"Limb {limb} has invalid or duplicate paf_index")
            seen_pafs.add(limb.paf_index)

    @classmethod
    def from_table(
        cls,
        num_keypoints: int,
        table: Sequence[Sequence[int]],
        keypoint_names: Optional[Sequence[str]] = None,
    ) -> LimbTopology:
        """Build a topology from ``(paf_index, keypoint_a, keypoint_b)`` rows."""
        limbs = tuple(Limb(int(p), int(a), int(b)) for p, a, b in table)
        return cls(num_keypoints, limbs, tuple(keypoint_names or ()))

    @classmethod
    def coco18(cls) -> LimbTopology:
        """The 18-keypoint, 19-limb OpenPose COCO topology."""
        return cls.from_table(len(COCO18_KEYPOINT_NAMES), COCO18_LIMBS, COCO18_KEYPOINT_NAMES)

    @property
    def num_paf_channels(self) -> int:
        """Minimum PAF channel count needed by this topology."""
        if not self.limbs:
            return 0
        return 2 * (max(limb.paf_index for limb in self.limbs) + 1)

    def name_of(self, keypoint_type: int) -> str:
        if self.keypoint_names:
            return self.keypoint_names[keypoint_type]
        return str(keypoint_type)

    def __iter__(self) -> Iterator[Limb]:
        return iter(self.limbs)

    def __len__(self) -> int:
        return len(self.limbs)


__all__ = [
    "KeypointIndex",
    "COCO18_KEYPOINT_NAMES",
    "COCO18_LIMBS",
    "Limb",
    "LimbTopology",
]
