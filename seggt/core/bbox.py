"""
Normalized bounding box data structure.

Represents a single annotated object instance consisting of:
    - Box coordinates [xmin, ymin, xmax, ymax] as fractions of the
      image width and height
    - Semantic class label
    - Difficult flag
"""

import math
from dataclasses import dataclass

import numpy as np


@dataclass
class NormalizedBBox:
    """
    Represents a single ground-truth box in normalized coordinates.

    Coordinates are fractions of the image size in [0, 1], so the
    same box can be rasterized at any output resolution.
    """

    xmin: float
    """Left edge as a fraction of the image width."""

    ymin: float
    """Top edge as a fraction of the image height."""

    xmax: float
    """Right edge as a fraction of the image width."""

    ymax: float
    """Bottom edge as a fraction of the image height."""

    label: int
    """Semantic class index."""

    difficult: bool = False
    """Annotation-quality flag."""

    @property
    def area(self) -> float:
        """
        Area in normalized units, at most 1.0 for a legal box.

        An inverted box (xmax < xmin or ymax < ymin) has area 0.
        """
        if self.xmax < self.xmin or self.ymax < self.ymin:
            return 0.0
        xmin, ymin, xmax, ymax = (np.float32(v) for v in (self.xmin, self.ymin, self.xmax, self.ymax))
        return float((ymax - ymin) * (xmax - xmin))

    def is_finite(self) -> bool:
        """True if no coordinate is NaN or infinite."""
        return all(math.isfinite(v) for v in (self.xmin, self.ymin, self.xmax, self.ymax))

    def to_pixel_bounds(self, height: int, width: int) -> tuple[int, int, int, int]:
        """
        Converts the box to pixel-index bounds by truncating downwards.

        Products are evaluated in float32, the precision of the raw
        ground-truth buffer, so 0.9 of 10 pixels gives index 9 whether
        the box was decoded from a tensor or built from Python floats.

        Args:
            height: Label map height H.
            width: Label map width W.

        Returns
        -------
            bounds: (xmin_idx, ymin_idx, xmax_idx, ymax_idx); the box
                covers columns [xmin_idx, xmax_idx) and rows [ymin_idx, ymax_idx).
        """
        w = np.float32(width)
        h = np.float32(height)
        return (
            int(np.floor(w * np.float32(self.xmin))),
            int(np.floor(h * np.float32(self.ymin))),
            int(np.floor(w * np.float32(self.xmax))),
            int(np.floor(h * np.float32(self.ymax))),
        )
