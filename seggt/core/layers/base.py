"""
Base class for layers.

A layer is a torch module with a type tag under which the registry
knows it. Subclassing BaseLayer and implementing forward() is all
that is needed to plug a layer into registry.build().
"""

import torch


class BaseLayer(torch.nn.Module):
    """
    Abstract base class for registered layers.

    Subclasses must implement forward(). reshape() is the explicit
    shape-change hook; layers that size internal state from their
    inputs override it.
    """

    layer_type: str = ""
    """Tag under which the layer is registered."""

    def reshape(self, *inputs: torch.Tensor):
        """Adapts internal state to the shapes of the given inputs."""

    def forward(self, *inputs: torch.Tensor) -> torch.Tensor:
        """
        Runs the layer.

        Returns
        -------
            output: Layer output tensor.
        """
        raise NotImplementedError("Subclasses must implement the forward() method.")
