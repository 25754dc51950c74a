"""
Exception types.

Fatal conditions abort the current call and surface as one of the
exceptions below. Conditions with a defined fallback (a box that
covers no pixel, an image without annotations) are not errors and
never raise.
"""


class SegGtError(Exception):
    """Base class for all seggt errors."""


class ConfigError(SegGtError, ValueError):
    """Invalid layer configuration."""


class GroundTruthError(SegGtError, ValueError):
    """Malformed ground-truth data."""


class BoxOutOfBoundsError(GroundTruthError):
    """
    A box whose pixel bounds fall outside the label map.

    Carries enough context to locate the offending annotation
    in the upstream data.
    """

    def __init__(self, image_index: int, box_index: int, bound: str, value: int, limit: int):
        self.image_index = image_index
        self.box_index = box_index
        self.bound = bound
        self.value = value
        self.limit = limit
        op = ">=" if bound in ("xmin", "ymin") else "<="
        super().__init__(
            f"Box {box_index} of image {image_index}: {bound} pixel index {value} "
            f"violates {bound} {op} {limit}."
        )


class GradientNotSupportedError(SegGtError, RuntimeError):
    """Raised when gradients are requested through the ground-truth input."""
