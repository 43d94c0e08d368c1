"""Wavelet operator."""

from collections.abc import Sequence
from typing import Literal

import numpy as np
import pywt
import torch
from ptwt.conv_transform import wavedec, waverec
from ptwt.conv_transform_2 import wavedec2, waverec2
from ptwt.conv_transform_3 import wavedec3, waverec3

from bpsense.data.dims import SPATIAL_DIMS, active_dims
from bpsense.operators.LinearOperator import LinearOperator

# Only orthogonal wavelets result in an isometric transform.
# fmt: off
WaveletType = Literal[
    'haar',
    'db1', 'db2', 'db3', 'db4', 'db5', 'db6', 'db7', 'db8', 'db9', 'db10',
    'sym2', 'sym3', 'sym4', 'sym5', 'sym6', 'sym7', 'sym8',
    'coif1', 'coif2', 'coif3', 'coif4', 'coif5',
]
# fmt: on

_DIRECTIONS_3D = ('aad', 'ada', 'add', 'daa', 'dad', 'dda', 'ddd')


def wavelet_level(
    domain_shape: Sequence[int], min_block_size: int | Sequence[int], wavelet_name: WaveletType = 'db4'
) -> int:
    """Number of decomposition levels for a domain.

    Decomposition stops before the approximation coefficients get smaller than the minimal block size
    in any dimension, and before the wavelet filter becomes longer than the signal.

    Parameters
    ----------
    domain_shape
        size of each transformed dimension
    min_block_size
        minimal size of the coarsest scale, either one value for all dimensions or one per dimension
    wavelet_name
        name of the wavelet

    Returns
    -------
        number of levels, 0 if no decomposition is possible
    """
    if isinstance(min_block_size, int):
        min_block_size = (min_block_size,) * len(domain_shape)
    if len(min_block_size) != len(domain_shape):
        raise ValueError(f'Expected {len(domain_shape)} block sizes, got {len(min_block_size)}')
    if any(b < 1 for b in min_block_size):
        raise ValueError(f'Block sizes must be positive, got {tuple(min_block_size)}')
    if not domain_shape:
        return 0
    filter_length = pywt.Wavelet(wavelet_name).dec_len
    level = min(
        min(int(np.floor(np.log2(n / b))), pywt.dwt_max_level(n, filter_length))
        for n, b in zip(domain_shape, min_block_size, strict=True)
    )
    return max(level, 0)


class WaveletOp(LinearOperator):
    """Wavelet operator class."""

    def __init__(
        self,
        domain_shape: Sequence[int],
        dim: Sequence[int] = (-2, -1),
        wavelet_name: WaveletType = 'db4',
        level: int | None = None,
    ):
        """Wavelet operator.

        For complex images the wavelet coefficients are calculated for real and imaginary part separately.
        The transform uses zero padding at the boundaries. As the coefficients of all levels are kept, the
        adjoint of the forward operator is the identity (the operator is an isometry).

        For a 2D image, the coefficients are labeled [aa, (ad_n, da_n, dd_n), ..., (ad_1, da_1, dd_1)] where a refers
        to the approximation coefficients and d to the detail coefficients. The index indicates the level.
        The coefficients are flattened and stacked along the first dimension in `dim`.

        Parameters
        ----------
        domain_shape
            Shape of the domain along the dimensions in `dim`.
        dim
            Dimensions (axes) where wavelets are calculated
        wavelet_name
            Name of wavelets
        level
            Number of levels. If set to None, the highest possible level is used.
            With level 0, the operator is the identity.

        Raises
        ------
        ValueError
            If wavelets are calculated for more than three dimensions.
        ValueError
            If wavelet dimensions and domain shape do not match.
        ValueError
            If the level is negative.
        """
        super().__init__()
        if not 1 <= len(dim) <= 3:
            raise ValueError('Only 1D, 2D and 3D wavelet transforms are supported.')
        if len(dim) != len(domain_shape):
            raise ValueError(
                f'Number of wavelet dimensions {len(dim)} must match the domain shape {tuple(domain_shape)}.'
            )
        self._domain_shape = tuple(domain_shape)
        self._wavelet_name = wavelet_name
        self._dim = tuple(dim)

        # number of detail coefficient sets per level
        self.n_wavelet_directions = 2 ** len(dim) - 1

        filter_length = pywt.Wavelet(wavelet_name).dec_len
        max_level = min(pywt.dwt_max_level(n, filter_length) for n in domain_shape)
        if level is None:
            level = max_level
        elif level < 0:
            raise ValueError(f'Level must be non-negative, got {level}')
        self.level = level

        # shape of the coefficients at each level, matching pywt.dwt_coeff_len in zero mode
        current_shape = torch.as_tensor(domain_shape)
        coefficients_shape: list[tuple[int, ...]] = []
        for _ in range(level):
            current_shape = (current_shape / 2).ceil() + filter_length // 2 - 1
            coefficients_shape.extend([tuple(current_shape.to(dtype=torch.int64).tolist())] * self.n_wavelet_directions)
        coefficients_shape = coefficients_shape[::-1]
        coefficients_shape.insert(0, coefficients_shape[0] if level else self._domain_shape)
        self.coefficients_shape = coefficients_shape

    @property
    def dim(self) -> tuple[int, ...]:
        """Dimensions along which wavelets are calculated."""
        return self._dim

    @classmethod
    def from_block_size(
        cls,
        shape: Sequence[int],
        min_block_size: int | Sequence[int] = 16,
        wavelet_name: WaveletType = 'db4',
        dim: Sequence[int] = SPATIAL_DIMS,
    ) -> 'WaveletOp':
        """Create a wavelet operator for all dimensions with more than one entry.

        Parameters
        ----------
        shape
            full shape of the images to transform
        min_block_size
            minimal size of the coarsest scale, see `wavelet_level`
        wavelet_name
            name of the wavelet
        dim
            candidate dimensions. Dimensions of size 1 are not transformed.

        Raises
        ------
        ValueError
            If all candidate dimensions have size 1 or there are more than three non-singleton dimensions.
        """
        transform_dim = active_dims(shape, dim)
        if not transform_dim:
            raise ValueError(f'No dimension in {tuple(dim)} has more than one entry for shape {tuple(shape)}.')
        if not isinstance(min_block_size, int):
            min_block_size = [min_block_size[tuple(dim).index(d)] for d in transform_dim]
        domain_shape = [shape[d] for d in transform_dim]
        level = wavelet_level(domain_shape, min_block_size, wavelet_name)
        return cls(domain_shape, transform_dim, wavelet_name, level)

    def _normalized_dim(self, ndim: int) -> tuple[int, ...]:
        dim = tuple(d % ndim for d in self._dim)
        if len(dim) != len(set(dim)):
            raise ValueError(f'Axis must be unique. Normalized axis are {dim}')
        return dim

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Calculate wavelet coefficients from image data.

        Parameters
        ----------
        x
            image data

        Returns
        -------
            Wavelet coefficients stacked along one dimension.
            For level 0, the input is returned unchanged.
        """
        if self.level == 0:
            return (x,)
        dim = self._normalized_dim(x.ndim)

        # move axes where wavelets are calculated to the end
        x = torch.moveaxis(x, dim, list(range(-len(dim), 0)))

        # the ptwt functions work only for real data, thus we handle complex inputs as an additional channel
        x_real = torch.view_as_real(x).moveaxis(-1, 0) if x.is_complex() else x

        coefficients_list: list[torch.Tensor]
        if len(dim) == 1:
            coefficients_list = wavedec(x_real, self._wavelet_name, level=self.level, mode='zero', axis=-1)
        elif len(dim) == 2:
            coeffs_2d = wavedec2(x_real, self._wavelet_name, level=self.level, mode='zero', axes=(-2, -1))
            coefficients_list = [coeffs_2d[0]]
            for c_tuple in coeffs_2d[1:]:
                coefficients_list.extend(c_tuple)
        else:
            coeffs_3d = wavedec3(x_real, self._wavelet_name, level=self.level, mode='zero', axes=(-3, -2, -1))
            coefficients_list = [coeffs_3d[0]]
            for c_dict in coeffs_3d[1:]:
                coefficients_list.extend(c_dict[key] for key in _DIRECTIONS_3D)

        # stack multi-resolution wavelets along single dimension
        coefficients_stack = torch.cat([coeff.flatten(start_dim=-len(dim)) for coeff in coefficients_list], dim=-1)
        if x.is_complex():
            # +1 because first dim is real/imag
            coefficients_stack = torch.moveaxis(coefficients_stack, -1, min(dim) + 1)
            coefficients_stack = torch.view_as_complex(coefficients_stack.moveaxis(0, -1).contiguous())
        else:
            coefficients_stack = torch.moveaxis(coefficients_stack, -1, min(dim))
        return (coefficients_stack,)

    def adjoint(self, coefficients_stack: torch.Tensor) -> tuple[torch.Tensor,]:
        """Transform wavelet coefficients to image data.

        Parameters
        ----------
        coefficients_stack
            Wavelet coefficients stacked along one dimension

        Returns
        -------
            image data
        """
        if self.level == 0:
            return (coefficients_stack,)
        dim = self._normalized_dim(coefficients_stack.ndim + len(self._dim) - 1)

        coefficients_stack = torch.moveaxis(coefficients_stack, min(dim), -1)
        is_complex = coefficients_stack.is_complex()
        if is_complex:
            coefficients_stack = torch.view_as_real(coefficients_stack).moveaxis(-1, 0)

        split = torch.split(coefficients_stack, [int(np.prod(shape)) for shape in self.coefficients_shape], dim=-1)
        coefficients = [
            coeff.reshape(*coeff.shape[:-1], *shape) for coeff, shape in zip(split, self.coefficients_shape, strict=True)
        ]
        detail = [
            coefficients[i : i + self.n_wavelet_directions]
            for i in range(1, len(coefficients), self.n_wavelet_directions)
        ]

        if len(dim) == 1:
            data = waverec(coefficients, self._wavelet_name, axis=-1)
        elif len(dim) == 2:
            data = waverec2([coefficients[0], *(tuple(d) for d in detail)], self._wavelet_name, axes=(-2, -1))
        else:
            coeffs_3d = [coefficients[0], *(dict(zip(_DIRECTIONS_3D, d, strict=True)) for d in detail)]
            data = waverec3(coeffs_3d, self._wavelet_name, axes=(-3, -2, -1))

        # odd sizes are padded by one entry before the decomposition
        data = data[(..., *(slice(0, n) for n in self._domain_shape))]

        # undo moving of axes
        if is_complex:
            # +1 because first dim is real/imag
            data = torch.moveaxis(data, list(range(-len(dim), 0)), [d + 1 for d in dim])
            data = torch.view_as_complex(data.moveaxis(0, -1).contiguous())
        else:
            data = torch.moveaxis(data, list(range(-len(dim), 0)), dim)
        return (data,)
