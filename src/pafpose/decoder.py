"""OpenPose-style multi-person decoder.

Pipeline per call::

    heatmaps ──> find_all_peaks ──┐
                                  ├─> for limb in topology:
    pafs ─────────────────────────┘       score_limb -> match_limbs -> PoseAssembler
                                      └─> filter_skeletons -> List[HumanPose]

Peak finding runs one task per heatmap; everything after it is
sequential because limb order decides which skeleton owns which joint.

Example:
    >>> decoder = OpenPoseDecoder(DecoderConfig(confidence_threshold=0.1))
    >>> poses = decoder.decode(heatmaps, pafs)  # (19, H, W), (38, H, W)
    >>> for pose in poses:
    ...     print(pose.joint_count, pose.score)
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import numpy as np

from pafpose.assembly import PoseAssembler
from pafpose.config import DecoderConfig
from pafpose.errors import ShapeMismatchError
from pafpose.filtering import filter_skeletons
from pafpose.matching import match_limbs
from pafpose.peaks import find_all_peaks
from pafpose.scaling import ArrayLike, readonly_view
from pafpose.scoring import score_limb
from pafpose.topology import LimbTopology
from pafpose.types import HumanPose

logger = logging.getLogger(__name__)


class OpenPoseDecoder:
    """Decodes heatmaps and part affinity fields into person poses.

    The decoder holds only immutable configuration, so one instance can
    serve concurrent ``decode`` calls.

    Args:
        config: Decoder thresholds (default: DecoderConfig()).
        topology: Limb table (default: LimbTopology.coco18()).
    """

    def __init__(
        self,
        config: Optional[DecoderConfig] = None,
        topology: Optional[LimbTopology] = None,
    ):
        self._config = config or DecoderConfig()
        self._topology = topology or LimbTopology.coco18()

    @property
    def config(self) -> DecoderConfig:
        return self._config

    @property
    def topology(self) -> LimbTopology:
        return self._topology

    def validate_inputs(self, heatmaps: np.ndarray, pafs: np.ndarray) -> None:
        """Check tensor shapes against the topology.

        Heatmaps need at least one channel per keypoint type (the trailing
        background channel is optional); PAFs need every channel the
        topology references; both must share the spatial size.

        Raises:
            ShapeMismatchError: If any check fails.
        """
        num_keypoints = self._topology.num_keypoints
        if heatmaps.ndim != 3:
            raise ShapeMismatchError("heatmaps", heatmaps.shape, "expected (C, H, W)")
        if heatmaps.shape[0] < num_keypoints:
            raise ShapeMismatchError(
                "heatmaps", heatmaps.shape,
                f"expected at least {num_keypoints} channels ({num_keypoints + 1} with background)",
            )
        if pafs.ndim != 3:
            raise ShapeMismatchError("pafs", pafs.shape, "expected (C, H, W)")
        if pafs.shape[0] < self._topology.num_paf_channels:
            raise ShapeMismatchError(
                "pafs", pafs.shape,
                f"expected at least {self._topology.num_paf_channels} channels",
            )
        if pafs.shape[1:] != heatmaps.shape[1:]:
            raise ShapeMismatchError(
                "pafs", pafs.shape,
                f"spatial size does not match heatmaps {heatmaps.shape[1:]}",
            )

    def decode(self, heatmaps: ArrayLike, pafs: ArrayLike) -> List[HumanPose]:
        """Decode one frame.

        Args:
            heatmaps: (K+1, H, W) keypoint heatmaps, background last.
            pafs: (2L, H, W) part affinity fields.

        Returns:
            Poses in feature-map pixel coordinates, in skeleton creation order.

        Raises:
            ShapeMismatchError: If the inputs do not fit the topology.
        """
        config = self._config
        topology = self._topology
        heatmaps = readonly_view(heatmaps)
        pafs = readonly_view(pafs)
        self.validate_inputs(heatmaps, pafs)

        peaks_per_type = find_all_peaks(
            heatmaps,
            topology.num_keypoints,
            config.confidence_threshold,
            config.min_peaks_distance,
            max_workers=config.max_workers,
        )
        peaks_by_id = {peak.id: peak for peaks in peaks_per_type for peak in peaks}

        assembler = PoseAssembler(topology.num_keypoints, peaks_by_id)
        for limb_type, limb in enumerate(topology):
            peaks_a = peaks_per_type[limb.keypoint_a]
            peaks_b = peaks_per_type[limb.keypoint_b]
            if not peaks_a and not peaks_b:
                continue
            if not peaks_a or not peaks_b:
                if config.seed_unpaired_joints:
                    assembler.add_unpaired(peaks_a or peaks_b)
                continue

            x_channel, y_channel = limb.paf_channels
            candidates = score_limb(
                limb_type,
                peaks_a,
                peaks_b,
                pafs[x_channel],
                pafs[y_channel],
                config.mid_points_score_threshold,
                config.found_mid_points_ratio_threshold,
                num_mid_points=config.num_mid_points,
                length_penalty=config.limb_length_penalty,
            )
            matched = match_limbs(candidates)
            applied = assembler.add_limbs(limb, matched)
            logger.debug(
                "Limb %d (%s -> %s): %d candidates, %d matched, %d applied",
                limb_type,
                topology.name_of(limb.keypoint_a),
                topology.name_of(limb.keypoint_b),
                len(candidates),
                len(matched),
                applied,
            )

        skeletons = assembler.skeletons
        poses = filter_skeletons(
            skeletons,
            peaks_by_id,
            config.min_joints_number,
            config.min_subset_score,
        )
        logger.debug("Assembled %d skeletons, kept %d poses", len(skeletons), len(poses))
        return poses


def decode_poses(
    heatmaps: ArrayLike,
    pafs: ArrayLike,
    topology: Optional[LimbTopology] = None,
    **overrides: Any,
) -> List[HumanPose]:
    """Decode with a one-off decoder.

    Example:
        >>> poses = decode_poses(heatmaps, pafs, confidence_threshold=0.2)
    """
    config = DecoderConfig().with_overrides(**overrides)
    return OpenPoseDecoder(config, topology).decode(heatmaps, pafs)


__all__ = ["OpenPoseDecoder", "decode_poses"]
