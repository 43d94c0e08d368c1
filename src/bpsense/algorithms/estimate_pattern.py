"""Estimation of the sampling pattern from k-space data."""

import torch

from bpsense.data.dims import COIL_DIM, N_DIMS


def estimate_pattern(kspace: torch.Tensor) -> torch.Tensor:
    """Estimate the sampling pattern of undersampled k-space data.

    A k-space location is considered sampled if any coil has a non-zero value there.

    Parameters
    ----------
    kspace
        k-space data ``(x y z coils 1)`` with zeros at locations that were not acquired

    Returns
    -------
        binary pattern ``(x y z 1 1)`` in the real dtype matching the data
    """
    if kspace.ndim != N_DIMS:
        raise ValueError(f'k-space data must have {N_DIMS} dimensions, got shape {tuple(kspace.shape)}')
    sampled = (kspace != 0).any(dim=COIL_DIM, keepdim=True)
    return sampled.to(kspace.real.dtype)
