"""Tests for peak extraction and global peak numbering."""

import numpy as np
import pytest

from pafpose.peaks import find_all_peaks, find_peaks, number_peaks
from pafpose.types import Peak

from helpers import gaussian_heatmaps


def spikes(height, width, values):
    """Heatmap with single-pixel spikes, ``values`` maps (x, y) -> value."""
    hm = np.zeros((height, width), dtype=np.float32)
    for (x, y), v in values.items():
        hm[y, x] = v
    return hm


class TestFindPeaks:
    def test_empty_heatmap(self):
        """All-below-threshold heatmap yields no peaks."""
        hm = np.full((16, 16), 0.05, dtype=np.float32)
        assert find_peaks(hm, 0.1, 3.0) == []

    def test_single_blob(self):
        hm = gaussian_heatmaps(1, 32, 32, {0: [(12, 20)]})[0]
        peaks = find_peaks(hm, 0.1, 3.0, keypoint_type=5)

        assert len(peaks) == 1
        assert peaks[0].position == (12.0, 20.0)
        assert peaks[0].score == pytest.approx(1.0)
        assert peaks[0].keypoint_type == 5
        assert peaks[0].id == 0

    def test_values_at_least_threshold(self):
        rng = np.random.default_rng(3)
        hm = rng.random((40, 40)).astype(np.float32)
        peaks = find_peaks(hm, 0.6, 2.0)

        assert peaks
        for p in peaks:
            assert hm[int(p.y), int(p.x)] >= 0.6
            assert p.score >= 0.6

    def test_min_distance_between_peaks(self):
        rng = np.random.default_rng(11)
        hm = rng.random((50, 50)).astype(np.float32)
        peaks = find_peaks(hm, 0.3, 4.0)

        assert len(peaks) > 1
        for i, a in enumerate(peaks):
            for b in peaks[i + 1:]:
                assert np.hypot(a.x - b.x, a.y - b.y) >= 4.0

    def test_stronger_peak_suppresses_weaker(self):
        """Diagonal neighbours are both candidates; NMS keeps the stronger."""
        hm = spikes(10, 10, {(5, 5): 0.5, (6, 6): 0.9})
        peaks = find_peaks(hm, 0.1, 3.0)

        assert len(peaks) == 1
        assert peaks[0].position == (6.0, 6.0)

    def test_tie_keeps_first_in_raster_order(self):
        hm = spikes(10, 10, {(7, 5): 1.0, (5, 5): 1.0})
        peaks = find_peaks(hm, 0.1, 3.0)

        assert [p.position for p in peaks] == [(5.0, 5.0)]

    def test_plateau_is_not_a_peak(self):
        """Equal 4-neighbours are not strictly greater than each other."""
        hm = spikes(10, 10, {(4, 4): 0.8, (5, 4): 0.8})
        assert find_peaks(hm, 0.1, 3.0) == []

    def test_raster_order_output(self):
        hm = spikes(20, 30, {(25, 2): 0.3, (3, 10): 0.9, (15, 10): 0.5})
        peaks = find_peaks(hm, 0.1, 3.0)

        assert [p.position for p in peaks] == [(25.0, 2.0), (3.0, 10.0), (15.0, 10.0)]
        assert [p.id for p in peaks] == [0, 1, 2]

    def test_border_pixels_can_be_peaks(self):
        hm = spikes(8, 8, {(0, 0): 0.7, (7, 7): 0.7})
        peaks = find_peaks(hm, 0.1, 3.0)
        assert [p.position for p in peaks] == [(0.0, 0.0), (7.0, 7.0)]

    def test_zero_distance_disables_suppression(self):
        hm = spikes(10, 10, {(5, 5): 0.5, (6, 6): 0.9})
        assert len(find_peaks(hm, 0.1, 0.0)) == 2


class TestNumbering:
    def test_number_peaks_offsets(self):
        local = [
            [Peak(0, 1, 1, 0.5, 0), Peak(1, 5, 5, 0.5, 0)],
            [],
            [Peak(0, 2, 2, 0.5, 2)],
        ]
        numbered = number_peaks(local)
        assert [[p.id for p in peaks] for peaks in numbered] == [[0, 1], [], [2]]

    def test_ids_contiguous_across_heatmaps(self):
        points = {0: [(5, 5), (20, 20)], 1: [(10, 3)], 2: [], 3: [(3, 3), (12, 12), (25, 5)]}
        heatmaps = gaussian_heatmaps(4, 32, 32, points)
        peaks = find_all_peaks(heatmaps, 4, 0.1, 3.0)

        ids = [p.id for per_type in peaks for p in per_type]
        assert ids == list(range(6))
        assert [len(p) for p in peaks] == [2, 1, 0, 3]
        assert all(p.keypoint_type == k for k, per_type in enumerate(peaks) for p in per_type)

    def test_background_channel_ignored(self):
        heatmaps = gaussian_heatmaps(2, 16, 16, {0: [(4, 4)], 1: [(10, 10)]})
        peaks = find_all_peaks(heatmaps, 2, 0.1, 3.0)
        assert len(peaks) == 2

    def test_parallel_matches_inline(self):
        rng = np.random.default_rng(5)
        heatmaps = rng.random((8, 24, 24)).astype(np.float32)

        inline = find_all_peaks(heatmaps, 7, 0.5, 2.0, max_workers=1)
        parallel = find_all_peaks(heatmaps, 7, 0.5, 2.0, max_workers=4)
        assert inline == parallel
