"""Incremental assembly of matched limbs into person skeletons.

Limb types are fed in topology order. Every accepted limb either starts
a new skeleton, extends the skeleton owning one of its endpoints, merges
the two skeletons owning its endpoints, or is dropped because it would
close a cycle. An owner index maps each claimed peak id to its skeleton,
so a peak never belongs to two skeletons.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional

from pafpose.topology import Limb
from pafpose.types import EMPTY, CandidateLimb, PartialSkeleton, Peak

logger = logging.getLogger(__name__)


class PoseAssembler:
    """Grows partial skeletons from matched limbs.

    Args:
        num_keypoints: Number of joint slots per skeleton.
        peaks: All peaks of the decode call, keyed by peak id.

    Example:
        >>> assembler = PoseAssembler(18, {p.id: p for p in all_peaks})
        >>> for limb_type, limb in enumerate(topology):
        ...     assembler.add_limbs(limb, matched[limb_type])
        >>> skeletons = assembler.skeletons
    """

    def __init__(self, num_keypoints: int, peaks: Mapping[int, Peak]):
        self.num_keypoints = num_keypoints
        self._peaks = peaks

        # Insertion order of this dict is skeleton creation order.
        self._skeletons: Dict[int, PartialSkeleton] = {}
        self._owner: Dict[int, int] = {}
        self._next_key = 0

    @property
    def skeletons(self) -> List[PartialSkeleton]:
        """Current partial skeletons in creation order."""
        return list(self._skeletons.values())

    def owner_of(self, peak_id: int) -> Optional[PartialSkeleton]:
        """Skeleton that claims ``peak_id``, or None."""
        key = self._owner.get(peak_id)
        return None if key is None else self._skeletons[key]

    def add_limbs(self, limb: Limb, matched: Iterable[CandidateLimb]) -> int:
        """Apply the matched limbs of one limb type.

        Args:
            limb: Limb definition the candidates belong to.
            matched: Candidates accepted by the matcher, in acceptance order.

        Returns:
            Number of limbs that changed the skeleton set.
        """
        applied = 0
        for candidate in matched:
            if self._add_limb(limb, candidate):
                applied += 1
        return applied

    def add_unpaired(self, peaks: Iterable[Peak]) -> int:
        """Start a one-joint skeleton for every peak nobody owns yet.

        Used for limb types where only one endpoint type has peaks.

        Returns:
            Number of skeletons created.
        """
        created = 0
        for peak in peaks:
            if peak.id in self._owner:
                continue
            skeleton = PartialSkeleton.empty(self.num_keypoints)
            skeleton.joints[peak.keypoint_type] = peak.id
            skeleton.joint_count = 1
            skeleton.total_score = peak.score
            self._register(skeleton)
            created += 1
        return created

    def _add_limb(self, limb: Limb, candidate: CandidateLimb) -> bool:
        key_a = self._owner.get(candidate.peak_a)
        key_b = self._owner.get(candidate.peak_b)

        if key_a is None and key_b is None:
            self._create(limb, candidate)
            return True

        if key_a is not None and key_b is not None:
            if key_a == key_b:
                logger.debug(
                    "Skipping limb %d->%d: both ends already in one skeleton",
                    candidate.peak_a, candidate.peak_b,
                )
                return False
            return self._merge(key_a, key_b, candidate.score)

        if key_a is not None:
            return self._extend(key_a, limb.keypoint_a, candidate.peak_a,
                                limb.keypoint_b, candidate.peak_b, candidate.score)
        return self._extend(key_b, limb.keypoint_b, candidate.peak_b,
                            limb.keypoint_a, candidate.peak_a, candidate.score)

    def _register(self, skeleton: PartialSkeleton) -> int:
        key = self._next_key
        self._next_key += 1
        self._skeletons[key] = skeleton
        for peak_id in skeleton.peak_ids():
            self._owner[peak_id] = key
        return key

    def _create(self, limb: Limb, candidate: CandidateLimb) -> None:
        skeleton = PartialSkeleton.empty(self.num_keypoints)
        skeleton.joints[limb.keypoint_a] = candidate.peak_a
        skeleton.joints[limb.keypoint_b] = candidate.peak_b
        skeleton.joint_count = 2
        skeleton.total_score = (
            self._peaks[candidate.peak_a].score
            + self._peaks[candidate.peak_b].score
            + candidate.score
        )
        self._register(skeleton)

    def _extend(
        self,
        key: int,
        owned_slot: int,
        owned_peak: int,
        free_slot: int,
        free_peak: int,
        limb_score: float,
    ) -> bool:
        skeleton = self._skeletons[key]
        if skeleton.joints[owned_slot] != owned_peak or skeleton.joints[free_slot] != EMPTY:
            logger.debug(
                "Skipping limb %d->%d: slot %d already holds peak %d",
                owned_peak, free_peak, free_slot, skeleton.joints[free_slot],
            )
            return False

        skeleton.joints[free_slot] = free_peak
        skeleton.joint_count += 1
        skeleton.total_score += self._peaks[free_peak].score + limb_score
        self._owner[free_peak] = key
        return True

    def _merge(self, key_a: int, key_b: int, limb_score: float) -> bool:
        # The earlier skeleton absorbs the later one.
        keep_key, drop_key = min(key_a, key_b), max(key_a, key_b)
        keep = self._skeletons[keep_key]
        drop = self._skeletons[drop_key]

        for slot, (kept, dropped) in enumerate(zip(keep.joints, drop.joints)):
            if kept != EMPTY and dropped != EMPTY:
                logger.debug(
                    "Skipping merge of skeletons %d and %d: both hold keypoint type %d",
                    keep_key, drop_key, slot,
                )
                return False

        for slot, peak_id in enumerate(drop.joints):
            if peak_id != EMPTY:
                keep.joints[slot] = peak_id
                self._owner[peak_id] = keep_key
        keep.joint_count += drop.joint_count
        keep.total_score += drop.total_score + limb_score
        del self._skeletons[drop_key]
        return True


__all__ = ["PoseAssembler"]
