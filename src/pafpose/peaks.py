"""Peak extraction from keypoint heatmaps.

A peak is a pixel whose thresholded value beats its four neighbours and
survives non-maximum suppression within ``min_peaks_distance``. Each
heatmap is independent, so ``find_all_peaks`` fans the work out over a
thread pool and numbers the peaks once every heatmap is done.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import List, Optional, Sequence

import numpy as np

from pafpose.types import Peak

logger = logging.getLogger(__name__)


def _local_maxima(heatmap: np.ndarray, confidence_threshold: float):
    """Return (values, ys, xs) of 4-neighbourhood maxima in raster order.

    Values below the threshold are zeroed first, and pixels outside the
    grid count as zero.
    """
    hm = np.where(heatmap >= confidence_threshold, heatmap, 0.0)
    padded = np.pad(hm, 1, mode="constant", constant_values=0.0)
    center = padded[1:-1, 1:-1]
    mask = (
        (center > padded[1:-1, 2:])
        & (center > padded[1:-1, :-2])
        & (center > padded[2:, 1:-1])
        & (center > padded[:-2, 1:-1])
    )
    ys, xs = np.nonzero(mask)
    return hm[ys, xs], ys, xs


def _suppress(values: np.ndarray, ys: np.ndarray, xs: np.ndarray, min_peaks_distance: float) -> np.ndarray:
    """Greedy NMS: strongest first, ties broken by raster order."""
    n = len(values)
    keep = np.zeros(n, dtype=bool)
    suppressed = np.zeros(n, dtype=bool)
    min_dist_sq = float(min_peaks_distance) ** 2

    order = np.argsort(-values, kind="stable")
    for i in order:
        if suppressed[i]:
            continue
        keep[i] = True
        dist_sq = (xs - xs[i]) ** 2 + (ys - ys[i]) ** 2
        suppressed |= dist_sq < min_dist_sq
    return keep


def find_peaks(
    heatmap: np.ndarray,
    confidence_threshold: float,
    min_peaks_distance: float,
    keypoint_type: int = 0,
) -> List[Peak]:
    """Extract peaks from a single heatmap.

    Args:
        heatmap: 2-D confidence grid.
        confidence_threshold: Minimum value for a pixel to be a peak.
        min_peaks_distance: Peaks closer than this to a stronger (or equally
            strong, earlier in raster order) peak are dropped.
        keypoint_type: Keypoint type recorded on each Peak.

    Returns:
        Peaks in raster-scan order with local ids 0..n-1.
    """
    values, ys, xs = _local_maxima(np.asarray(heatmap), confidence_threshold)
    if len(values) == 0:
        return []

    keep = _suppress(values, ys.astype(np.int64), xs.astype(np.int64), min_peaks_distance)
    return [
        Peak(id=local_id, x=float(xs[i]), y=float(ys[i]), score=float(values[i]), keypoint_type=keypoint_type)
        for local_id, i in enumerate(np.flatnonzero(keep))
    ]


def number_peaks(peaks_per_type: Sequence[List[Peak]]) -> List[List[Peak]]:
    """Offset local peak ids by the count of peaks in lower-indexed heatmaps.

    The result ids form the contiguous range [0, total).
    """
    numbered: List[List[Peak]] = []
    offset = 0
    for peaks in peaks_per_type:
        numbered.append([replace(peak, id=peak.id + offset) for peak in peaks])
        offset += len(peaks)
    return numbered


def find_all_peaks(
    heatmaps: Sequence[np.ndarray],
    num_keypoints: int,
    confidence_threshold: float,
    min_peaks_distance: float,
    max_workers: Optional[int] = None,
) -> List[List[Peak]]:
    """Find peaks in the first ``num_keypoints`` heatmaps and number them globally.

    Heatmaps are processed in parallel, each task filling its own slot.
    Numbering starts only after all tasks have finished.

    Args:
        heatmaps: Sequence or (C, H, W) array of heatmaps; channels past
            ``num_keypoints`` (the background) are ignored.
        num_keypoints: Number of keypoint heatmaps to process.
        confidence_threshold: See ``find_peaks``.
        min_peaks_distance: See ``find_peaks``.
        max_workers: Thread pool size; 1 runs inline.

    Returns:
        One list of peaks per keypoint type with globally unique ids.
    """
    slots: List[List[Peak]] = [[] for _ in range(num_keypoints)]

    if max_workers == 1 or num_keypoints <= 1:
        for k in range(num_keypoints):
            slots[k] = find_peaks(heatmaps[k], confidence_threshold, min_peaks_distance, k)
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = [
                pool.submit(find_peaks, heatmaps[k], confidence_threshold, min_peaks_distance, k)
                for k in range(num_keypoints)
            ]
            for k, future in enumerate(futures):
                slots[k] = future.result()

    numbered = number_peaks(slots)
    logger.debug(
        "Found %d peaks across %d heatmaps: %s",
        sum(len(p) for p in numbered),
        num_keypoints,
        [len(p) for p in numbered],
    )
    return numbered


__all__ = ["find_peaks", "number_peaks", "find_all_peaks"]
