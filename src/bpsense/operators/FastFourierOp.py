"""Class for Fast Fourier Operator."""

from collections.abc import Sequence

import torch

from bpsense.data.dims import SPATIAL_DIMS
from bpsense.operators.LinearOperator import LinearOperator


class FastFourierOp(LinearOperator):
    """Fast Fourier operator class.

    Applies a Fast Fourier Transformation along selected dimensions.

    The transformation is done with 'ortho' normalization, i.e. the normalization constant is split between
    forward and adjoint [FFT]_, making the operator unitary.

    Remark regarding the fftshift/ifftshift:
    The reconstruction moves the k-space center to the first entry by modulating the data with
    `~bpsense.utils.fftmod` once, before the iterations start. Thus, by default, no shifts are performed.
    With ``centered=True``, the zero-frequency is assumed to be in the center of the data for input and output,
    and ifftshift, fftn and fftshift are applied.

    References
    ----------
    .. [FFT] FFT https://numpy.org/doc/stable/reference/routines.fft.html
    """

    def __init__(self, dim: Sequence[int] = SPATIAL_DIMS, centered: bool = False) -> None:
        """Initialize a Fast Fourier Operator.

        Parameters
        ----------
        dim
            dim along which FFT and IFFT are applied, by default the spatial dimensions
        centered
            if True, the zero-frequency and the image center are in the center of the data,
            otherwise they are the first entries.
        """
        super().__init__()
        self._dim = tuple(dim)
        self._centered = centered

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """FFT from image space to k-space.

        Parameters
        ----------
        x
            image data on Cartesian grid

        Returns
        -------
            FFT of x
        """
        if not self._centered:
            return (torch.fft.fftn(x, dim=self._dim, norm='ortho'),)
        y = torch.fft.fftshift(
            torch.fft.fftn(torch.fft.ifftshift(x, dim=self._dim), dim=self._dim, norm='ortho'),
            dim=self._dim,
        )
        return (y,)

    def adjoint(self, y: torch.Tensor) -> tuple[torch.Tensor,]:
        """IFFT from k-space to image space.

        Parameters
        ----------
        y
            k-space data on Cartesian grid

        Returns
        -------
            IFFT of y
        """
        if not self._centered:
            return (torch.fft.ifftn(y, dim=self._dim, norm='ortho'),)
        x = torch.fft.fftshift(
            torch.fft.ifftn(torch.fft.ifftshift(y, dim=self._dim), dim=self._dim, norm='ortho'),
            dim=self._dim,
        )
        return (x,)
