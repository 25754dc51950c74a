"""
Box-to-label-map rasterization.

Converts per-image lists of normalized boxes into a dense per-pixel
label map for a batch:
    1. Start every pixel at the background label.
    2. Paint each box onto the pixels it covers.
    3. Where boxes overlap, keep the label of the smallest box.

Step 3 is tracked with a scratch buffer holding, for every pixel,
the area of the smallest box that has claimed it so far. A box only
claims a pixel if its area is strictly smaller, so among boxes of
equal area the first one in buffer order keeps the pixel.
"""

import logging

import torch
from tqdm import tqdm

from .bbox import NormalizedBBox
from .errors import BoxOutOfBoundsError, GroundTruthError
from .ground_truth import GroundTruthSet, decode_ground_truth

logger = logging.getLogger(__name__)


class BoxRasterizer:
    """
    Rasterizes ground-truth boxes into per-pixel label maps.

    The min-area scratch buffer is owned by the rasterizer and sized
    to (N, H, W). It is reallocated whenever the requested shape
    changes, so reshape() only needs to be called explicitly by code
    that wants to allocate ahead of the first rasterize() call.

    An instance is not safe to share between concurrent callers.
    """

    SENTINEL_AREA = 10.0
    """Larger than any legal box area (areas are at most 1.0)."""

    def __init__(self, background_label_id: int = 0, use_difficult_gt: bool = True):
        """
        Args:
            background_label_id: Class id of pixels covered by no box.
            use_difficult_gt: Whether difficult boxes take part when
                decoding raw ground truth.
        """
        self.background_label_id = background_label_id
        self.use_difficult_gt = use_difficult_gt
        self._min_area: torch.Tensor | None = None

    @property
    def is_ready(self) -> bool:
        """True once a buffer has been allocated."""
        return self._min_area is not None

    @property
    def shape(self) -> tuple[int, int, int] | None:
        """Current (N, H, W) of the scratch buffer, or None."""
        if self._min_area is None:
            return None
        return tuple(self._min_area.shape)

    def reshape(self, num: int, height: int, width: int):
        """
        Sizes the scratch buffer for a batch of N images of H x W.

        Args:
            num: Batch size N.
            height: Label map height H.
            width: Label map width W.
        """
        if num <= 0 or height <= 0 or width <= 0:
            raise ValueError(f"Invalid label map shape (N={num}, H={height}, W={width}).")

        if self.shape == (num, height, width):
            return

        logger.debug("Allocating min-area buffer for shape (%d, %d, %d)", num, height, width)
        self._min_area = torch.empty((num, height, width), dtype=torch.float32)

    def _check_bounds(self, bounds: tuple[int, int, int, int], height: int, width: int, i: int, j: int):
        xmin_idx, ymin_idx, xmax_idx, ymax_idx = bounds
        if xmin_idx < 0:
            raise BoxOutOfBoundsError(i, j, "xmin", xmin_idx, 0)
        if ymin_idx < 0:
            raise BoxOutOfBoundsError(i, j, "ymin", ymin_idx, 0)
        if xmax_idx > width:
            raise BoxOutOfBoundsError(i, j, "xmax", xmax_idx, width)
        if ymax_idx > height:
            raise BoxOutOfBoundsError(i, j, "ymax", ymax_idx, height)

    def _paint(
        self,
        labels: torch.Tensor,
        min_area: torch.Tensor,
        bbox: NormalizedBBox,
        bounds: tuple[int, int, int, int],
    ):
        """Claims the pixels of one box where it is the smallest so far."""
        xmin_idx, ymin_idx, xmax_idx, ymax_idx = bounds
        area = bbox.area

        region = min_area[ymin_idx:ymax_idx, xmin_idx:xmax_idx]
        claimed = region > area
        region[claimed] = area
        labels[ymin_idx:ymax_idx, xmin_idx:xmax_idx][claimed] = bbox.label

    def rasterize(
        self,
        boxes: GroundTruthSet,
        num: int,
        height: int,
        width: int,
        verbose: bool = False,
    ) -> torch.Tensor:
        """
        Builds the label map for a batch.

        Args:
            boxes: Dict mapping image index to its list of boxes.
                Images without an entry stay background.
            num: Batch size N.
            height: Label map height H.
            width: Label map width W.
            verbose: Whether to show a progress bar over images.

        Returns
        -------
            label_map: (N, 1, H, W) float32 tensor of class ids, with
                0 for pixels covered by no box.

        Raises
        ------
            GroundTruthError: If a box has a NaN or infinite coordinate.
            BoxOutOfBoundsError: If a box maps outside the label map.
                No partial result is returned.
        """
        self.reshape(num, height, width)
        min_area = self._min_area
        min_area.fill_(self.SENTINEL_AREA)

        label_map = torch.zeros((num, 1, height, width), dtype=torch.float32)

        for item_id in boxes:
            if not 0 <= item_id < num:
                logger.debug("Ignoring boxes of image %d outside batch of %d", item_id, num)

        iterator = range(num)
        if verbose:
            iterator = tqdm(iterator, desc="SegGt: rasterizing images")

        for i in iterator:
            gt_bboxes = boxes.get(i)
            if gt_bboxes is None:
                logger.debug("Image %d has no ground truth, leaving background", i)
                continue

            for j, bbox in enumerate(gt_bboxes):
                if not bbox.is_finite():
                    raise GroundTruthError(f"Box {j} of image {i} has non-finite coordinates: {bbox}.")

                bounds = bbox.to_pixel_bounds(height, width)
                self._check_bounds(bounds, height, width, i, j)

                xmin_idx, ymin_idx, xmax_idx, ymax_idx = bounds
                if xmin_idx >= xmax_idx or ymin_idx >= ymax_idx:
                    logger.debug("Box %d of image %d covers no pixel at %dx%d", j, i, height, width)
                    continue

                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug("Image %d box %d label %d bounds %s area %.6f", i, j, bbox.label, bounds, bbox.area)
                self._paint(label_map[i, 0], min_area[i], bbox, bounds)

        return label_map

    def decode_and_rasterize(
        self,
        gt_data,
        num: int,
        height: int,
        width: int,
        verbose: bool = False,
    ) -> torch.Tensor:
        """
        Decodes a raw ground-truth buffer and rasterizes it.

        Args:
            gt_data: Raw buffer of 8-value rows (see ground_truth).
            num: Batch size N.
            height: Label map height H.
            width: Label map width W.
            verbose: Whether to show a progress bar over images.

        Returns
        -------
            label_map: (N, 1, H, W) float32 tensor.
        """
        all_gt_bboxes = decode_ground_truth(
            gt_data,
            background_label_id=self.background_label_id,
            use_difficult_gt=self.use_difficult_gt,
        )
        return self.rasterize(all_gt_bboxes, num, height, width, verbose=verbose)
