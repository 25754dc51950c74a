"""
SegGt layer.

Turns the box annotations of a batch into a per-pixel label map at
the spatial resolution of a reference tensor (typically the feature
map the segmentation loss is computed on). The label map is a
training target, so it has no meaningful derivative with respect to
the ground truth: any attempt to backpropagate through it fails.
"""

import logging

import torch

from ..config import SegGtConfig
from ..errors import GradientNotSupportedError
from ..rasterizer import BoxRasterizer
from ..registry import register
from .base import BaseLayer

logger = logging.getLogger(__name__)


class _SegGtFunction(torch.autograd.Function):
    """Autograd op around the rasterizer with a failing backward."""

    @staticmethod
    def forward(ctx, gt_data, rasterizer, num, height, width, verbose):
        return rasterizer.decode_and_rasterize(gt_data, num, height, width, verbose=verbose)

    @staticmethod
    def backward(ctx, grad_output):
        raise GradientNotSupportedError("SegGt cannot propagate gradients to the ground-truth input.")


def _spatial_shape(reference: torch.Tensor) -> tuple[int, int, int]:
    if reference.dim() != 4:
        raise ValueError(f"Reference tensor must be 4-D (N, C, H, W), got shape {tuple(reference.shape)}.")
    return reference.shape[0], reference.shape[2], reference.shape[3]


@register("SegGt")
class SegGtLayer(BaseLayer):
    """
    Rasterizes ground-truth boxes into a (N, 1, H, W) label map.

    N, H and W are read from the reference tensor on every call, so
    batch size or resolution changes are picked up without an
    explicit reshape().
    """

    layer_type = "SegGt"

    def __init__(self, config: SegGtConfig | None = None, verbose: bool = False, **params):
        """
        Args:
            config: Layer parameters. If None, built from params.
            verbose: Whether to show a progress bar over images.
            **params: SegGtConfig fields, used when config is None.
        """
        super().__init__()
        if config is None:
            config = SegGtConfig(**params)
        elif params:
            raise TypeError(f"Pass either a config or parameters, not both: {sorted(params)}.")

        self.config = config
        self.verbose = verbose
        self.rasterizer = BoxRasterizer(
            background_label_id=config.background_label_id,
            use_difficult_gt=config.use_difficult_gt,
        )

    def reshape(self, gt_data: torch.Tensor, reference: torch.Tensor):
        """Allocates the rasterizer buffer for the reference shape."""
        num, height, width = _spatial_shape(reference)
        self.rasterizer.reshape(num, height, width)

    def forward(self, gt_data: torch.Tensor, reference: torch.Tensor) -> torch.Tensor:
        """
        Builds the label map for the current batch.

        Args:
            gt_data: Raw ground truth, rows of
                [item_id, label, instance_id, xmin, ymin, xmax, ymax, difficult].
            reference: (N, C, H, W) tensor whose batch size and
                spatial size the label map must match.

        Returns
        -------
            label_map: (N, 1, H, W) float32 tensor on the reference device.
        """
        num, height, width = _spatial_shape(reference)
        label_map = _SegGtFunction.apply(gt_data, self.rasterizer, num, height, width, self.verbose)
        return label_map.to(reference.device)

    def extra_repr(self) -> str:
        return (
            f"background_label_id={self.config.background_label_id}, "
            f"use_difficult_gt={self.config.use_difficult_gt}"
        )
