"""pafpose - Multi-person pose decoding from heatmaps and part affinity fields.

Turns the raw outputs of an OpenPose-style network into person skeletons:
peak extraction, PAF limb scoring, greedy limb matching, skeleton
assembly and filtering.

Quick Start:
    >>> from pafpose import OpenPoseDecoder, DecoderConfig
    >>> decoder = OpenPoseDecoder(DecoderConfig(confidence_threshold=0.1))
    >>> poses = decoder.decode(heatmaps, pafs)  # (19, H, W), (38, H, W)
    >>> for pose in poses:
    ...     print(f"{pose.joint_count} joints, score {pose.score:.2f}")
"""

try:
    from pafpose._version import __version__
except ImportError:
    __version__ = "0.0.0.dev0"

from pafpose.types import (
    EMPTY,
    NOT_FOUND,
    Peak,
    CandidateLimb,
    PartialSkeleton,
    HumanPose,
)
from pafpose.topology import KeypointIndex, COCO18_KEYPOINT_NAMES, Limb, LimbTopology
from pafpose.config import DecoderConfig
from pafpose.errors import DecoderError, ConfigError, ShapeMismatchError, MissingArrayError
from pafpose.peaks import find_peaks, find_all_peaks
from pafpose.scoring import score_limb
from pafpose.matching import match_limbs
from pafpose.assembly import PoseAssembler
from pafpose.filtering import filter_skeletons
from pafpose.decoder import OpenPoseDecoder, decode_poses
from pafpose.scaling import readonly_view, upsample_feature_maps, rescale_poses

__all__ = [
    # Decoder
    "OpenPoseDecoder",
    "decode_poses",
    "DecoderConfig",
    # Topology
    "KeypointIndex",
    "COCO18_KEYPOINT_NAMES",
    "Limb",
    "LimbTopology",
    # Data types
    "EMPTY",
    "NOT_FOUND",
    "Peak",
    "CandidateLimb",
    "PartialSkeleton",
    "HumanPose",
    # Stages
    "find_peaks",
    "find_all_peaks",
    "score_limb",
    "match_limbs",
    "PoseAssembler",
    "filter_skeletons",
    # Scaling
    "readonly_view",
    "upsample_feature_maps",
    "rescale_poses",
    # Errors
    "DecoderError",
    "ConfigError",
    "ShapeMismatchError",
    "MissingArrayError",
]
