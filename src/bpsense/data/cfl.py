"""Reading and writing of arrays in the cfl format.

A cfl array consists of two files: ``name.hdr``, a text header with the array dimensions,
and ``name.cfl``, the raw complex64 data in column-major (Fortran) order.
"""

from os import PathLike
from pathlib import Path

import numpy as np
import torch

from bpsense.data.dims import N_DIMS, as_array


def _base_name(name: str | PathLike) -> Path:
    path = Path(name)
    if path.suffix in ('.cfl', '.hdr'):
        path = path.with_suffix('')
    return path


def read_cfl(name: str | PathLike) -> torch.Tensor:
    """Read a cfl array.

    Parameters
    ----------
    name
        base name of the array, with or without ``.cfl``/``.hdr`` suffix

    Returns
    -------
        complex64 tensor with `N_DIMS` axes

    Raises
    ------
    ValueError
        If the header is malformed, the data file has the wrong size or the array
        has non-singleton axes beyond the supported ones.
    """
    base = _base_name(name)
    lines = base.with_suffix('.hdr').read_text().splitlines()
    try:
        dims_line = lines[lines.index('# Dimensions') + 1]
    except (ValueError, IndexError):
        raise ValueError(f'{base}.hdr does not contain a "# Dimensions" entry') from None
    shape = [int(d) for d in dims_line.split()]
    data = np.fromfile(base.with_suffix('.cfl'), dtype=np.complex64)
    if data.size != np.prod(shape):
        raise ValueError(f'{base}.cfl holds {data.size} values, but the header describes shape {shape}')
    array = torch.from_numpy(data.reshape(shape, order='F').copy())
    return as_array(array)


def write_cfl(name: str | PathLike, array: torch.Tensor) -> None:
    """Write a tensor as cfl array.

    Parameters
    ----------
    name
        base name of the array, with or without ``.cfl``/``.hdr`` suffix
    array
        tensor to save. Converted to complex64.
    """
    base = _base_name(name)
    data = array.detach().cpu().to(torch.complex64).numpy()
    shape = list(data.shape) + [1] * max(0, N_DIMS - data.ndim)
    base.with_suffix('.hdr').write_text('# Dimensions\n' + ' '.join(str(s) for s in shape) + '\n')
    np.asfortranarray(data).ravel(order='F').tofile(base.with_suffix('.cfl'))
