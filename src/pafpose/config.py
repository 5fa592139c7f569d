"""Decoder configuration.

Example:
    >>> from pafpose.config import DecoderConfig
    >>> config = DecoderConfig(confidence_threshold=0.2, min_joints_number=4)
    >>> config = DecoderConfig.from_dict({"min_subset_score": 0.3})
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from pafpose.errors import ConfigError


@dataclass(frozen=True)
class DecoderConfig:
    """Thresholds and options for OpenPoseDecoder.

    Attributes:
        confidence_threshold: Minimum heatmap value for a peak (default: 0.1).
        min_peaks_distance: Suppression radius between peaks of one
            heatmap, in feature-map pixels (default: 3.0).
        mid_points_score_threshold: Minimum PAF alignment for a sample
            along a candidate limb to count (default: 0.05).
        found_mid_points_ratio_threshold: Minimum fraction of counting
            samples for a candidate limb to be accepted (default: 0.8).
        min_joints_number: Minimum joints per output pose (default: 3).
        min_subset_score: Minimum average score per joint (default: 0.2).
        num_mid_points: Samples taken along each candidate limb (default: 10).
        limb_length_penalty: Add the ``min(0.5 * H / length - 1, 0)`` term to
            limb scores, penalising limbs longer than half the map height
            (default: False).
        seed_unpaired_joints: When only one side of a limb type has peaks,
            start one-joint skeletons from them (default: True).
        upsample_ratio: Factor the feature maps were upsampled by before
            decoding (default: 4).
        stride: Network output stride relative to the input image (default: 8).
        max_workers: Thread pool size for peak finding; None uses the
            executor default, 1 runs inline (default: None).
    """

    confidence_threshold: float = 0.1
    min_peaks_distance: float = 3.0
    mid_points_score_threshold: float = 0.05
    found_mid_points_ratio_threshold: float = 0.8
    min_joints_number: int = 3
    min_subset_score: float = 0.2
    num_mid_points: int = 10

    limb_length_penalty: bool = False
    seed_unpaired_joints: bool = True

    # Coordinate mapping back to the model input
    upsample_ratio: int = 4
    stride: int = 8

    max_workers: Optional[int] = None

    def __post_init__(self) -> None:
        if self.min_peaks_distance < 0:
            raise ConfigError(f"min_peaks_distance must be >= 0, got {self.min_peaks_distance}")
        if self.num_mid_points < 2:
            raise ConfigError(f"num_mid_points must be >= 2, got {self.num_mid_points}")
        if self.min_joints_number < 1:
            raise ConfigError(f"min_joints_number must be >= 1, got {self.min_joints_number}")
        if self.upsample_ratio <= 0 or self.stride <= 0:
            raise ConfigError(
                f"upsample_ratio and stride must be positive, got "
                f"{self.upsample_ratio} and {self.stride}"
            )
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigError(f"max_workers must be >= 1 or None, got {self.max_workers}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> DecoderConfig:
        """Create a DecoderConfig from a dictionary (e.g. loaded from JSON).

        Raises:
            ConfigError: If the dictionary has unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigError(str(e)) from e

    @classmethod
    def from_json(cls, path: str | Path) -> DecoderConfig:
        """Load a DecoderConfig from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    def with_overrides(self, **overrides: Any) -> DecoderConfig:
        """Return a copy with the given non-None fields replaced."""
        overrides = {k: v for k, v in overrides.items() if v is not None}
        if not overrides:
            return self
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
        return replace(self, **overrides)


__all__ = ["DecoderConfig"]
