"""Class for Sensitivity Operator."""

import torch
from einops import reduce

from bpsense.data.dims import COIL_DIM, MAPS_DIM, N_DIMS
from bpsense.operators.LinearOperator import LinearOperator


class SensitivityOp(LinearOperator):
    """Sensitivity operator class.

    The forward operator expands an image with one or more maps, shape ``(x y z 1 maps)``,
    to coil images of shape ``(x y z coils 1)``: each map set is multiplied with its image and the
    results are summed over the map axis.
    The adjoint operator multiplies coil images with the conjugated maps and sums over the coil axis,
    resulting in one image per map set.
    """

    def __init__(self, maps: torch.Tensor) -> None:
        """Initialize a Sensitivity Operator.

        Parameters
        ----------
        maps
           coil sensitivity maps with shape ``(x y z coils maps)``
        """
        super().__init__()
        if maps.ndim != N_DIMS:
            raise ValueError(f'Sensitivity maps must have {N_DIMS} dimensions, got shape {tuple(maps.shape)}')
        self.maps = maps

    @property
    def n_maps(self) -> int:
        """Number of sensitivity map sets."""
        return self.maps.shape[MAPS_DIM]

    @property
    def n_coils(self) -> int:
        """Number of coils."""
        return self.maps.shape[COIL_DIM]

    def forward(self, img: torch.Tensor) -> tuple[torch.Tensor,]:
        """Expand an image to coil images.

        Parameters
        ----------
        img
            image with shape ``(x y z 1 maps)``

        Returns
        -------
            coil images with shape ``(x y z coils 1)``
        """
        return (reduce(self.maps * img, 'x y z coils maps -> x y z coils 1', 'sum'),)

    def adjoint(self, coil_img: torch.Tensor) -> tuple[torch.Tensor,]:
        """Combine coil images.

        Parameters
        ----------
        coil_img
            coil images with shape ``(x y z coils 1)``

        Returns
        -------
            image with shape ``(x y z 1 maps)``
        """
        return (reduce(self.maps.conj() * coil_img, 'x y z coils maps -> x y z 1 maps', 'sum'),)
