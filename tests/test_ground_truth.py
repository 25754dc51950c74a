# tests/test_ground_truth.py
import numpy as np
import pytest
import torch

from seggt.core.bbox import NormalizedBBox
from seggt.core.errors import GroundTruthError
from seggt.core.ground_truth import decode_ground_truth, encode_ground_truth


def gt_tensor(rows):
    return torch.tensor(rows, dtype=torch.float32).view(1, 1, -1, 8)


def test_area_and_pixel_bounds():
    b = NormalizedBBox(xmin=0.0, ymin=0.25, xmax=0.5, ymax=0.75, label=3)
    assert b.area == pytest.approx(0.25)
    assert b.to_pixel_bounds(10, 10) == (0, 2, 5, 7)
    # truncation, not rounding
    assert NormalizedBBox(0.19, 0.19, 0.99, 0.99, 1).to_pixel_bounds(10, 10) == (1, 1, 9, 9)


def test_inverted_box_has_zero_area():
    assert NormalizedBBox(xmin=0.6, ymin=0.0, xmax=0.4, ymax=1.0, label=1).area == 0.0


def test_decode_groups_by_image_in_buffer_order():
    gt = gt_tensor(
        [
            [1, 2, 0, 0.0, 0.0, 0.5, 0.5, 0],
            [0, 1, 0, 0.1, 0.1, 0.2, 0.2, 0],
            [1, 3, 1, 0.5, 0.5, 1.0, 1.0, 0],
        ]
    )
    boxes = decode_ground_truth(gt)
    assert sorted(boxes) == [0, 1]
    assert [b.label for b in boxes[1]] == [2, 3]
    assert boxes[0][0].xmax == pytest.approx(0.2)


def test_decode_skips_padding_rows():
    gt = gt_tensor([[-1] * 8, [0, 1, 0, 0.0, 0.0, 1.0, 1.0, 0]])
    boxes = decode_ground_truth(gt)
    assert list(boxes) == [0]
    assert len(boxes[0]) == 1


def test_decode_filters_difficult_boxes():
    gt = gt_tensor([[0, 1, 0, 0.0, 0.0, 1.0, 1.0, 1], [0, 2, 1, 0.0, 0.0, 0.5, 0.5, 0]])

    kept = decode_ground_truth(gt, use_difficult_gt=True)
    assert [b.difficult for b in kept[0]] == [True, False]

    filtered = decode_ground_truth(gt, use_difficult_gt=False)
    assert [b.label for b in filtered[0]] == [2]


def test_decode_rejects_background_label():
    gt = gt_tensor([[0, 0, 0, 0.0, 0.0, 1.0, 1.0, 0]])
    with pytest.raises(GroundTruthError, match="background label"):
        decode_ground_truth(gt, background_label_id=0)


def test_decode_accepts_numpy_and_rejects_ragged_buffer():
    boxes = decode_ground_truth(np.array([0, 4, 0, 0.0, 0.0, 1.0, 1.0, 0]))
    assert boxes[0][0].label == 4

    with pytest.raises(GroundTruthError, match="multiple of 8"):
        decode_ground_truth(np.zeros(7))


def test_encode_layout_and_empty_set():
    gt = encode_ground_truth({2: [NormalizedBBox(0.0, 0.0, 0.5, 0.5, label=7, difficult=True)]})
    assert gt.shape == (1, 1, 1, 8)
    assert gt[0, 0, 0].tolist() == [2.0, 7.0, 0.0, 0.0, 0.0, 0.5, 0.5, 1.0]

    empty = encode_ground_truth({})
    assert decode_ground_truth(empty) == {}


def test_decode_rejects_non_finite_coordinates():
    gt = gt_tensor([[0, 1, 0, 0.0, 0.0, 1.0, 1.0, 0], [0, 2, 1, 0.0, float("nan"), 0.5, 0.5, 0]])
    with pytest.raises(GroundTruthError, match="row 1"):
        decode_ground_truth(gt)
