"""
Visualization utilities for label maps.

Provides functions to colorize label maps, overlay them on images
and draw the source boxes for visual checks of the rasterized
ground truth.
"""

import matplotlib.pyplot as plt
import numpy as np
import torch
from matplotlib import patches

from .bbox import NormalizedBBox


def _as_numpy_map(label_map) -> np.ndarray:
    if isinstance(label_map, torch.Tensor):
        label_map = label_map.detach().cpu().numpy()
    label_map = np.asarray(label_map)
    # Accept (1, H, W) and (1, 1, H, W) slices of a batch.
    while label_map.ndim > 2 and label_map.shape[0] == 1:
        label_map = label_map[0]
    if label_map.ndim != 2:
        raise ValueError(f"Expected a single (H, W) label map, got shape {label_map.shape}.")
    return label_map.astype(np.int64)


class LabelMapVisualizer:
    """Visualization utilities for rasterized label maps."""

    @staticmethod
    def colorize(
        label_map,
        num_classes: int | None = None,
        colormap: str = "tab20",
    ) -> np.ndarray:
        """
        Maps class ids to RGB colors. Background (0) is black.

        Args:
            label_map: (H, W) label map (array or tensor).
            num_classes: Number of classes used to spread the colormap.
                Defaults to the largest label present plus one.
            colormap: Matplotlib colormap name.

        Returns
        -------
            colored: (H, W, 3) uint8 image.
        """
        labels = _as_numpy_map(label_map)
        if num_classes is None:
            num_classes = int(labels.max()) + 1 if labels.size else 1

        cmap = plt.get_cmap(colormap)
        palette = (cmap(np.linspace(0, 1, max(num_classes, 2)))[:, :3] * 255).astype(np.uint8)
        palette[0] = 0

        return palette[np.clip(labels, 0, len(palette) - 1)]

    @staticmethod
    def overlay_label_map(
        image: np.ndarray,
        label_map,
        alpha: float = 0.5,
        num_classes: int | None = None,
    ) -> np.ndarray:
        """
        Overlays a colorized label map on an image.

        Background pixels keep the original image.

        Args:
            image: (H, W, 3) RGB image with values in [0, 255].
            label_map: (H, W) label map.
            alpha: Blending factor for labelled pixels.
            num_classes: See colorize().

        Returns
        -------
            overlay: (H, W, 3) blended image with values in [0, 255].
        """
        labels = _as_numpy_map(label_map)
        colored = LabelMapVisualizer.colorize(labels, num_classes=num_classes)

        image_float = image.astype(np.float32)
        blended = (1 - alpha) * image_float + alpha * colored.astype(np.float32)
        overlay = np.where((labels > 0)[..., None], blended, image_float)
        return np.clip(overlay, 0, 255).astype(np.uint8)

    @staticmethod
    def visualize_label_map(
        label_map,
        boxes: list[NormalizedBBox] | None = None,
        image: torch.Tensor | None = None,
        class_names: list[str] | None = None,
        figsize: tuple[int, int] = (8, 8),
        save_path: str | None = None,
        show: bool = True,
    ):
        """
        Shows a label map with its source boxes drawn on top.

        Args:
            label_map: (H, W) label map.
            boxes: Boxes of this image in normalized coordinates.
            image: Optional (3, H, W) image tensor in [0, 1] to blend under
                the label map.
            class_names: Optional list of class name strings.
            figsize: Figure size (width, height).
            save_path: If provided, saves the figure to this path.
            show: Whether to call plt.show().

        Returns
        -------
            fig: The matplotlib figure.
        """
        labels = _as_numpy_map(label_map)
        H, W = labels.shape

        if image is not None:
            img_np = (image.permute(1, 2, 0).cpu().numpy() * 255).astype(np.uint8)
            shown = LabelMapVisualizer.overlay_label_map(img_np, labels)
        else:
            shown = LabelMapVisualizer.colorize(labels)

        fig, ax = plt.subplots(1, 1, figsize=figsize)
        ax.imshow(shown)
        ax.set_title(f"Label map {H}x{W}", fontsize=12)

        for b in boxes or []:
            x1, y1 = b.xmin * W, b.ymin * H
            rect = patches.Rectangle(
                (x1 - 0.5, y1 - 0.5),
                (b.xmax - b.xmin) * W,
                (b.ymax - b.ymin) * H,
                linewidth=2,
                edgecolor="lime" if not b.difficult else "orange",
                facecolor="none",
            )
            ax.add_patch(rect)
            name = class_names[b.label] if class_names and b.label < len(class_names) else str(b.label)
            ax.text(
                x1,
                y1,
                name,
                color="lime",
                fontsize=10,
                bbox=dict(boxstyle="round,pad=0.2", facecolor="black", alpha=0.7),
            )
        ax.axis("off")

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches="tight")

        if show:
            plt.show()

        return fig
