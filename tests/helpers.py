"""Synthetic heatmap and PAF builders for pafpose tests."""

import numpy as np


# Upright COCO-18 person on a 64x64 map, (x, y) per keypoint type.
COCO18_PERSON = [
    (32, 8),   # nose
    (32, 16),  # neck
    (24, 16),  # right_shoulder
    (20, 26),  # right_elbow
    (18, 36),  # right_wrist
    (40, 16),  # left_shoulder
    (44, 26),  # left_elbow
    (46, 36),  # left_wrist
    (28, 36),  # right_hip
    (28, 46),  # right_knee
    (28, 56),  # right_ankle
    (36, 36),  # left_hip
    (36, 46),  # left_knee
    (36, 56),  # left_ankle
    (30, 6),   # right_eye
    (34, 6),   # left_eye
    (27, 7),   # right_ear
    (37, 7),   # left_ear
]


def gaussian_heatmaps(num_keypoints, height, width, points, sigma=1.0, peak=1.0):
    """Build (K+1, H, W) heatmaps with a Gaussian blob per point.

    Args:
        points: Dict mapping keypoint type to a list of (x, y) centres.
    """
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
    heatmaps = np.zeros((num_keypoints + 1, height, width), dtype=np.float32)
    for kpt, centres in points.items():
        for cx, cy in centres:
            blob = peak * np.exp(-((xs - cx) ** 2 + (ys - cy) ** 2) / (2 * sigma ** 2))
            heatmaps[kpt] = np.maximum(heatmaps[kpt], blob)
    heatmaps[num_keypoints] = np.clip(1.0 - heatmaps[:num_keypoints].max(axis=0), 0.0, 1.0)
    return heatmaps


def band_pafs(num_channels, height, width, segments, half_width=1.5):
    """Build PAFs with the unit limb direction set near each segment.

    Args:
        segments: List of (paf_index, (xa, ya), (xb, yb)).
    """
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    pafs = np.zeros((num_channels, height, width), dtype=np.float32)
    for paf_index, (xa, ya), (xb, yb) in segments:
        vx, vy = xb - xa, yb - ya
        length = np.hypot(vx, vy)
        ux, uy = vx / length, vy / length
        t = np.clip(((xs - xa) * ux + (ys - ya) * uy) / length, 0.0, 1.0)
        dist = np.hypot(xs - (xa + t * vx), ys - (ya + t * vy))
        near = dist <= half_width
        pafs[2 * paf_index][near] = ux
        pafs[2 * paf_index + 1][near] = uy
    return pafs


def constant_pafs(num_channels, height, width, segments):
    """Build PAFs whose channels hold the unit limb direction everywhere."""
    pafs = np.zeros((num_channels, height, width), dtype=np.float32)
    for paf_index, (xa, ya), (xb, yb) in segments:
        vx, vy = xb - xa, yb - ya
        length = np.hypot(vx, vy)
        pafs[2 * paf_index] = vx / length
        pafs[2 * paf_index + 1] = vy / length
    return pafs


