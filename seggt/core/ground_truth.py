"""
Ground-truth decoding.

The raw ground-truth buffer follows the annotated-data layout used
by SSD-style detection pipelines: one row of 8 values per annotated
instance,

    [item_id, label, instance_id, xmin, ymin, xmax, ymax, difficult]

where item_id is the image index within the batch (-1 marks a
padding row) and the coordinates are normalized to [0, 1].
"""

import logging

import numpy as np
import torch

from .bbox import NormalizedBBox
from .errors import GroundTruthError

logger = logging.getLogger(__name__)

GT_ROW_SIZE = 8

GroundTruthSet = dict[int, list[NormalizedBBox]]
"""Mapping from image index to its boxes, in buffer order."""


def _as_rows(gt_data) -> np.ndarray:
    if isinstance(gt_data, torch.Tensor):
        gt_data = gt_data.detach().cpu().numpy()
    data = np.asarray(gt_data, dtype=np.float64)
    if data.size % GT_ROW_SIZE != 0:
        raise GroundTruthError(
            f"Ground-truth buffer holds {data.size} values, which is not a multiple of {GT_ROW_SIZE}."
        )
    return data.reshape(-1, GT_ROW_SIZE)


def decode_ground_truth(
    gt_data,
    background_label_id: int = 0,
    use_difficult_gt: bool = True,
) -> GroundTruthSet:
    """
    Decodes a raw ground-truth buffer into per-image box lists.

    Args:
        gt_data: Tensor, array or nested sequence whose values form
            rows of 8 (typically shaped (1, 1, num_gt, 8)).
        background_label_id: Label reserved for the background. An
            annotation carrying it is malformed.
        use_difficult_gt: If False, difficult boxes are dropped here
            and never reach the rasterizer.

    Returns
    -------
        all_gt_bboxes: Dict mapping image index to a list of
            NormalizedBBox in buffer order. Images without
            annotations have no entry.
    """
    rows = _as_rows(gt_data)
    all_gt_bboxes: GroundTruthSet = {}

    for i, row in enumerate(rows):
        item_id = int(row[0])
        if item_id == -1:
            continue

        label = int(row[1])
        if label == background_label_id:
            raise GroundTruthError(f"Found background label {label} in ground-truth row {i}.")

        difficult = bool(row[7])
        if difficult and not use_difficult_gt:
            logger.debug("Dropping difficult box at row %d (image %d)", i, item_id)
            continue

        if not np.all(np.isfinite(row[3:7])):
            raise GroundTruthError(f"Non-finite coordinates {row[3:7].tolist()} in ground-truth row {i}.")

        bbox = NormalizedBBox(
            xmin=float(row[3]),
            ymin=float(row[4]),
            xmax=float(row[5]),
            ymax=float(row[6]),
            label=label,
            difficult=difficult,
        )
        all_gt_bboxes.setdefault(item_id, []).append(bbox)

    return all_gt_bboxes


def encode_ground_truth(all_gt_bboxes: GroundTruthSet) -> torch.Tensor:
    """
    Encodes per-image box lists back into the raw buffer layout.

    Images are written in ascending index order; instance ids count
    boxes within each image.

    Args:
        all_gt_bboxes: Dict mapping image index to a list of boxes.

    Returns
    -------
        gt_data: (1, 1, num_gt, 8) float32 tensor. An empty set
            yields a single padding row, as annotated-data layers do.
    """
    rows = []
    for item_id in sorted(all_gt_bboxes):
        for instance_id, b in enumerate(all_gt_bboxes[item_id]):
            rows.append(
                [item_id, b.label, instance_id, b.xmin, b.ymin, b.xmax, b.ymax, float(b.difficult)]
            )

    if not rows:
        rows.append([-1.0] * GT_ROW_SIZE)

    return torch.tensor(rows, dtype=torch.float32).view(1, 1, -1, GT_ROW_SIZE)
