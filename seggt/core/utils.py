"""Utility functions."""

from pathlib import Path

import numpy as np
import torch
from PIL import Image

from .visualization import LabelMapVisualizer


def label_map_to_image(label_map: torch.Tensor, num_classes: int | None = None) -> Image.Image:
    """
    Converts a single label map to a palette PNG-ready image.

    Pixel values are the class ids; the palette gives each class a
    distinct color so the file is readable in any image viewer.

    Args:
        label_map: (H, W), (1, H, W) or (1, 1, H, W) label map.
        num_classes: Number of classes for the palette.

    Returns
    -------
        image: PIL image in 'P' mode.
    """
    if isinstance(label_map, torch.Tensor):
        label_map = label_map.detach().cpu().numpy()
    labels = np.asarray(label_map).squeeze()
    if labels.ndim != 2:
        raise ValueError(f"Expected a single (H, W) label map, got shape {labels.shape}.")
    if labels.min() < 0 or labels.max() > 255:
        raise ValueError("Palette images hold class ids in [0, 255] only.")

    labels = labels.astype(np.uint8)
    if num_classes is None:
        num_classes = int(labels.max()) + 1

    palette_rows = LabelMapVisualizer.colorize(
        np.arange(num_classes).reshape(1, -1),
        num_classes=num_classes,
    )[0]

    img = Image.fromarray(labels)
    # putpalette switches the "L" image to "P" mode.
    img.putpalette(palette_rows.flatten().tolist())
    return img


def save_label_map(label_map: torch.Tensor, path: str | Path, num_classes: int | None = None) -> Path:
    """
    Saves a single label map as a palette PNG.

    Args:
        label_map: (H, W) label map.
        path: Destination file.
        num_classes: Number of classes for the palette.

    Returns
    -------
        path: The written path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    label_map_to_image(label_map, num_classes=num_classes).save(path)
    return path


def load_label_map(path: str | Path) -> torch.Tensor:
    """Loads a label map saved by save_label_map() as a (H, W) int64 tensor."""
    img = Image.open(path)
    return torch.from_numpy(np.array(img, dtype=np.int64))
