"""Exception hierarchy for pafpose.

The decoding core never raises on valid input: empty heatmaps, missing
limbs and rejected candidates all degrade to smaller output. These errors
cover the boundary where callers hand in configuration and tensors.
"""


class DecoderError(Exception):
    """Base class for all pafpose errors."""


class ConfigError(DecoderError, ValueError):
    """Raised when a decoder configuration or limb topology is invalid."""


class ShapeMismatchError(DecoderError, ValueError):
    """Raised when heatmap/PAF tensors do not match the topology.

    Attributes:
        name: Which input was rejected ("heatmaps" or "pafs").
        shape: Shape of the rejected array.
    """

    def __init__(self, name: str, shape: tuple, reason: str):
        self.name = name
        self.shape = tuple(shape)
        super().__init__(f"Invalid {name} shape {self.shape}: {reason}")


class MissingArrayError(DecoderError, LookupError):
    """Raised when an input archive lacks a required array.

    Attributes:
        path: Archive that was read.
        missing: Names of the absent arrays.
        available: Names the archive does contain.
    """

    def __init__(self, path, missing, available):
        self.path = str(path)
        self.missing = list(missing)
        self.available = list(available)
        super().__init__(
            f"{self.path} has no array(s) {', '.join(self.missing)}; found {self.available}"
        )


__all__ = ["DecoderError", "ConfigError", "ShapeMismatchError", "MissingArrayError"]
