"""Modulation for FFTs with the zero frequency in the center."""

from collections.abc import Sequence

import torch

from bpsense.data.dims import SPATIAL_DIMS


def _modulation(n: int, device: torch.device, inverse: bool) -> torch.Tensor:
    r"""Phase ramp :math:`\exp(\pm 2\pi i (j - c/2) c / n)` with :math:`c = n // 2`."""
    center = n // 2
    j = torch.arange(n, dtype=torch.float64, device=device)
    phase = 2 * torch.pi * (j - center / 2) * center / n
    return torch.polar(torch.ones_like(phase), -phase if inverse else phase)


def _apply(x: torch.Tensor, dim: Sequence[int], inverse: bool) -> torch.Tensor:
    dtype = x.dtype if x.is_complex() else torch.complex64
    for d in dim:
        d = d % x.ndim
        n = x.shape[d]
        if n == 1:
            continue
        shape = [1] * x.ndim
        shape[d] = n
        x = x * _modulation(n, x.device, inverse).to(dtype).reshape(shape)
    return x


def fftmod(x: torch.Tensor, dim: Sequence[int] = SPATIAL_DIMS) -> torch.Tensor:
    """Modulate data such that an uncentered FFT acts as a centered FFT.

    For even sizes ``fftmod(fft(fftmod(x)))`` equals ``fftshift(fft(ifftshift(x)))``.
    The modulation is applied once to the k-space data and the sensitivity maps before a reconstruction,
    which allows the encoding operator to use FFTs without any shifts.

    Parameters
    ----------
    x
        data to modulate
    dim
        dimensions along which the data is modulated. Dimensions of size 1 are unchanged.

    Returns
    -------
        modulated data, a new tensor
    """
    return _apply(x, dim, inverse=False)


def ifftmod(x: torch.Tensor, dim: Sequence[int] = SPATIAL_DIMS) -> torch.Tensor:
    """Undo `fftmod`.

    Parameters
    ----------
    x
        modulated data
    dim
        dimensions along which the data is modulated

    Returns
    -------
        demodulated data, a new tensor
    """
    return _apply(x, dim, inverse=True)
