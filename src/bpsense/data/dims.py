"""Named dimensions of the multi-dimensional arrays.

All arrays handled by bpsense are 5-dimensional tensors with the axes

===========  =====  =====================================
name         index  meaning
===========  =====  =====================================
READ_DIM     0      readout (k0 / x)
PHS1_DIM     1      first phase encoding (k1 / y)
PHS2_DIM     2      second phase encoding (k2 / z)
COIL_DIM     3      receiver coils
MAPS_DIM     4      sensitivity map sets (ESPIRiT)
===========  =====  =====================================

Axes that an array does not use have size 1, e.g. an image has shape ``(x, y, z, 1, maps)``.
"""

from collections.abc import Sequence

import torch

READ_DIM = 0
PHS1_DIM = 1
PHS2_DIM = 2
COIL_DIM = 3
MAPS_DIM = 4
N_DIMS = 5

SPATIAL_DIMS = (READ_DIM, PHS1_DIM, PHS2_DIM)


def as_array(x: torch.Tensor) -> torch.Tensor:
    """Bring a tensor to the 5-dimensional array layout.

    Missing trailing axes are added with size 1. Additional trailing axes are removed if they are singleton.

    Parameters
    ----------
    x
        tensor with at most `N_DIMS` non-singleton leading axes

    Returns
    -------
        view of x with exactly `N_DIMS` axes

    Raises
    ------
    ValueError
        If x has non-singleton axes beyond `MAPS_DIM`.
    """
    if x.ndim < N_DIMS:
        return x.reshape(*x.shape, *((1,) * (N_DIMS - x.ndim)))
    if any(s != 1 for s in x.shape[N_DIMS:]):
        raise ValueError(f'Only {N_DIMS} dimensions are supported, got an array of shape {tuple(x.shape)}')
    return x.reshape(x.shape[:N_DIMS])


def select_dims(shape: Sequence[int], keep: Sequence[int]) -> tuple[int, ...]:
    """Collapse all axes not in `keep` to size 1.

    Example:
        ``select_dims((64, 64, 1, 8, 2), SPATIAL_DIMS)`` is ``(64, 64, 1, 1, 1)``.
    """
    keep = {d % len(shape) for d in keep}
    return tuple(s if i in keep else 1 for i, s in enumerate(shape))


def spatial_shape(shape: Sequence[int]) -> tuple[int, ...]:
    """Sizes of the spatial axes."""
    return tuple(shape[d] for d in SPATIAL_DIMS)


def active_dims(shape: Sequence[int], dims: Sequence[int] = SPATIAL_DIMS) -> tuple[int, ...]:
    """Axes in `dims` with more than one entry."""
    return tuple(d for d in dims if shape[d] > 1)


def image_shape(maps_shape: Sequence[int]) -> tuple[int, ...]:
    """Shape of the image reconstructed with sensitivity maps of the given shape."""
    return tuple(1 if i == COIL_DIM else s for i, s in enumerate(maps_shape))


def check_compatible(kspace_shape: Sequence[int], maps_shape: Sequence[int]) -> None:
    """Check that k-space data and sensitivity maps can be used together.

    Parameters
    ----------
    kspace_shape
        shape of the k-space array ``(x, y, z, coils, 1)``
    maps_shape
        shape of the sensitivity maps ``(x, y, z, coils, maps)``

    Raises
    ------
    ValueError
        If the spatial or coil dimensions do not match or if the k-space has more than one map.
    """
    if len(kspace_shape) != N_DIMS or len(maps_shape) != N_DIMS:
        raise ValueError(f'Expected {N_DIMS}-dimensional arrays, got {tuple(kspace_shape)} and {tuple(maps_shape)}')
    if tuple(kspace_shape[:MAPS_DIM]) != tuple(maps_shape[:MAPS_DIM]):
        raise ValueError(
            'Dimensions of kspace and sensitivities do not match: '
            f'{tuple(kspace_shape[:MAPS_DIM])} != {tuple(maps_shape[:MAPS_DIM])}'
        )
    if kspace_shape[MAPS_DIM] != 1:
        raise ValueError(f'k-space data must not have more than one map, got {kspace_shape[MAPS_DIM]}')
