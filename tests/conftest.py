"""Shared fixtures for pafpose tests.

All heatmaps and PAFs are synthetic, no network outputs needed.
"""

import importlib.util
import sys
from pathlib import Path

import pytest

from pafpose.topology import LimbTopology

# Load helpers module from the tests directory using importlib to avoid
# polluting sys.path.
_helpers_path = Path(__file__).resolve().parent / "helpers.py"
_spec = importlib.util.spec_from_file_location("helpers", _helpers_path)
_helpers = importlib.util.module_from_spec(_spec)
sys.modules["helpers"] = _helpers
_spec.loader.exec_module(_helpers)

from helpers import COCO18_PERSON, band_pafs, constant_pafs, gaussian_heatmaps  # noqa: E402


@pytest.fixture
def chain_topology():
    """Four keypoints connected 0-1-2-3."""
    return LimbTopology.from_table(4, [(0, 0, 1), (1, 1, 2), (2, 2, 3)])


@pytest.fixture
def coco18():
    return LimbTopology.coco18()


@pytest.fixture
def single_person_maps(coco18):
    """Scenario A inputs: one peak per type, unit PAFs along every limb."""
    height = width = 64
    points = {k: [xy] for k, xy in enumerate(COCO18_PERSON)}
    heatmaps = gaussian_heatmaps(coco18.num_keypoints, height, width, points)
    segments = [
        (limb.paf_index, COCO18_PERSON[limb.keypoint_a], COCO18_PERSON[limb.keypoint_b])
        for limb in coco18
    ]
    pafs = constant_pafs(coco18.num_paf_channels, height, width, segments)
    return heatmaps, pafs


@pytest.fixture
def two_people_maps(chain_topology):
    """Two vertical 4-joint chains at x=10 and x=50."""
    height, width = 48, 64
    people = [
        [(10, 5), (10, 15), (10, 25), (10, 35)],
        [(50, 5), (50, 15), (50, 25), (50, 35)],
    ]
    points = {k: [person[k] for person in people] for k in range(4)}
    heatmaps = gaussian_heatmaps(4, height, width, points)
    segments = [
        (limb.paf_index, person[limb.keypoint_a], person[limb.keypoint_b])
        for person in people
        for limb in chain_topology
    ]
    pafs = band_pafs(chain_topology.num_paf_channels, height, width, segments)
    return heatmaps, pafs, people
