"""Feature-map plumbing around the decoder.

- ``readonly_view``: float32 (C, H, W) views over caller buffers that the
  decoder cannot write through.
- ``upsample_feature_maps``: bicubic upsampling applied to network
  outputs before decoding.
- ``rescale_poses``: map decoded keypoints from upsampled feature-map
  pixels back to image pixels.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Union

import cv2
import numpy as np

from pafpose.types import HumanPose

ArrayLike = Union[np.ndarray, Sequence[np.ndarray]]


def readonly_view(maps: ArrayLike) -> np.ndarray:
    """Return a read-only float32 array over ``maps``.

    No copy is made when ``maps`` is already a float32 ndarray; the
    returned view shares memory with the caller's buffer but cannot be
    written to.
    """
    if isinstance(maps, np.ndarray):
        array = maps.astype(np.float32, copy=False)
    elif len(maps) == 0:
        array = np.empty((0, 0, 0), dtype=np.float32)
    else:
        array = np.stack([np.asarray(m, dtype=np.float32) for m in maps])
    view = array.view()
    view.flags.writeable = False
    return view


def upsample_feature_maps(maps: ArrayLike, upsample_ratio: float) -> np.ndarray:
    """Bicubically resize every (H, W) channel by ``upsample_ratio``.

    Args:
        maps: (C, H, W) array or sequence of (H, W) arrays.
        upsample_ratio: Scale factor applied to both axes.

    Returns:
        (C, H * ratio, W * ratio) float32 array.
    """
    channels = [
        cv2.resize(
            np.ascontiguousarray(m, dtype=np.float32),
            None,
            fx=upsample_ratio,
            fy=upsample_ratio,
            interpolation=cv2.INTER_CUBIC,
        )
        for m in maps
    ]
    if not channels:
        return np.empty((0, 0, 0), dtype=np.float32)
    return np.stack(channels)


def rescale_poses(
    poses: Iterable[HumanPose],
    stride: float,
    upsample_ratio: float,
    scale_x: float = 1.0,
    scale_y: float = 1.0,
) -> List[HumanPose]:
    """Map keypoints from feature-map pixels to image pixels.

    Each found keypoint becomes ``p * stride / upsample_ratio * scale``
    (network stride, then input-to-image scale).
    Keypoints that were not found keep the NOT_FOUND sentinel.

    Args:
        poses: Poses returned by the decoder.
        stride: Network output stride.
        upsample_ratio: Factor the feature maps were upsampled by.
        scale_x: Image width / model input width.
        scale_y: Image height / model input height.

    Returns:
        New HumanPose objects; the inputs are not modified.
    """
    factor = np.array(
        [stride / upsample_ratio * scale_x, stride / upsample_ratio * scale_y],
        dtype=np.float32,
    )
    rescaled = []
    for pose in poses:
        keypoints = pose.keypoints.copy()
        keypoints[pose.found] = keypoints[pose.found] * factor
        rescaled.append(
            HumanPose(
                keypoints=keypoints,
                scores=pose.scores.copy(),
                score=pose.score,
                total_score=pose.total_score,
                joint_count=pose.joint_count,
            )
        )
    return rescaled


__all__ = ["readonly_view", "upsample_feature_maps", "rescale_poses"]
