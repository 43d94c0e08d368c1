"""Parallel imaging encoding operator."""

import torch

from bpsense.data.dims import COIL_DIM, MAPS_DIM, SPATIAL_DIMS, image_shape, select_dims
from bpsense.operators.FastFourierOp import FastFourierOp
from bpsense.operators.LinearOperator import LinearOperator
from bpsense.operators.SamplingOp import SamplingOp
from bpsense.operators.SensitivityOp import SensitivityOp


class EncodingOp(LinearOperator):
    r"""SENSE encoding operator.

    :math:`A = P F S`, mapping an image ``(x y z 1 maps)`` to sampled multi-coil k-space ``(x y z coils 1)``.
    Here, :math:`S` is the `SensitivityOp` (multiplication with the maps and summation over map sets),
    :math:`F` the unitary `FastFourierOp` along the spatial dimensions, and :math:`P` the `SamplingOp`.

    The Fourier transform does not perform any shifts: k-space data and maps are expected to be
    modulated such that the k-space center is the first entry: maps with `~bpsense.utils.fftmod`,
    k-space with `~bpsense.utils.ifftmod`.
    """

    def __init__(self, maps: torch.Tensor, pattern: torch.Tensor) -> None:
        """Initialize the encoding operator.

        Parameters
        ----------
        maps
            sensitivity maps ``(x y z coils maps)``
        pattern
            real-valued sampling pattern ``(x y z 1 1)``

        Raises
        ------
        ValueError
            If the pattern does not match the spatial shape of the maps or varies along coils or maps.
        """
        super().__init__()
        if pattern.ndim != maps.ndim or pattern.shape[COIL_DIM] != 1 or pattern.shape[MAPS_DIM] != 1:
            raise ValueError(f'Pattern must have shape (x y z 1 1), got {tuple(pattern.shape)}')
        if select_dims(pattern.shape, SPATIAL_DIMS) != select_dims(maps.shape, SPATIAL_DIMS):
            raise ValueError(
                f'Pattern {tuple(pattern.shape)} does not match the spatial dimensions of the maps {tuple(maps.shape)}'
            )
        self.sensitivity_op = SensitivityOp(maps)
        self.fourier_op = FastFourierOp(dim=SPATIAL_DIMS)
        self.sampling_op = SamplingOp(pattern)
        self._image_shape = image_shape(maps.shape)
        self._operator = self.sampling_op @ self.fourier_op @ self.sensitivity_op

    @property
    def image_shape(self) -> tuple[int, ...]:
        """Shape of the images in the domain of the operator."""
        return self._image_shape

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Encode an image to sampled k-space.

        Parameters
        ----------
        x
            image ``(x y z 1 maps)``

        Returns
        -------
            sampled k-space ``(x y z coils 1)``
        """
        return self._operator(x)

    def adjoint(self, y: torch.Tensor) -> tuple[torch.Tensor,]:
        """Zero-filled, coil-combined reconstruction of sampled k-space.

        Parameters
        ----------
        y
            k-space ``(x y z coils 1)``

        Returns
        -------
            image ``(x y z 1 maps)``
        """
        return self._operator.adjoint(y)

    @property
    def gram(self) -> LinearOperator:
        """Gram operator :math:`S^H F^H P^2 F S`."""
        return self._operator.gram
