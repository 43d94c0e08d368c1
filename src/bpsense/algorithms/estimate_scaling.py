"""Estimation of the intensity scaling of k-space data."""

import math

import torch
from einops import reduce

from bpsense.data.dims import N_DIMS, SPATIAL_DIMS

CALIBRATION_SIZE = 32
"""Size of the central k-space region used for the estimation, per spatial dimension."""

PERCENTILE = 0.9
"""Quantile of the low-resolution image magnitude used as scaling."""


def estimate_scaling(kspace: torch.Tensor, calibration_size: int = CALIBRATION_SIZE) -> float:
    """Estimate a scaling factor that normalizes the image intensity.

    A low-resolution image is reconstructed from the center of k-space (at most ``calibration_size``
    entries per spatial dimension) as the root-sum-of-squares of the coil images. The scaling is
    the 90th percentile of its magnitude, corrected for the size of the cropped region such that
    it approximates the image intensity at full resolution.

    The k-space data is expected in centered layout, i.e. before any modulation with `fftmod`.

    Parameters
    ----------
    kspace
        k-space data ``(x y z coils 1)``
    calibration_size
        maximum size of the central region per spatial dimension

    Returns
    -------
        the scaling factor, 0.0 for all-zero data
    """
    if kspace.ndim != N_DIMS:
        raise ValueError(f'k-space data must have {N_DIMS} dimensions, got shape {tuple(kspace.shape)}')
    if calibration_size < 1:
        raise ValueError(f'calibration_size must be positive, got {calibration_size}')

    # central region, the center of a dimension of size n is n // 2
    center = kspace
    for d in SPATIAL_DIMS:
        n = kspace.shape[d]
        size = min(n, calibration_size)
        start = n // 2 - size // 2
        center = center.narrow(d, start, size)

    low_resolution = torch.fft.fftshift(
        torch.fft.ifftn(torch.fft.ifftshift(center, dim=SPATIAL_DIMS), dim=SPATIAL_DIMS, norm='ortho'),
        dim=SPATIAL_DIMS,
    )
    rss = reduce(low_resolution.abs().square(), 'x y z coils maps -> (x y z maps)', 'sum').sqrt()

    # undo the change of the ortho normalization for the smaller region
    n_full = math.prod(kspace.shape[d] for d in SPATIAL_DIMS)
    n_center = math.prod(center.shape[d] for d in SPATIAL_DIMS)
    rss = rss * math.sqrt(n_center / n_full)

    if not torch.any(rss > 0):
        return 0.0
    return torch.quantile(rss.to(torch.float64), PERCENTILE).item()
