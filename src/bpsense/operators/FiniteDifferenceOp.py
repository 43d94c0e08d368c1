"""Finite difference operator for total variation."""

from collections.abc import Sequence
from typing import Literal

import torch

from bpsense.operators.LinearOperator import LinearOperator


def _shift(x: torch.Tensor, shift: Literal[-1, 1], dim: int, circular: bool) -> torch.Tensor:
    """Shift by one entry along `dim`, ``out[i] = x[i - shift]``, wrapping around or filling with zeros."""
    shifted = torch.roll(x, shift, dim)
    if not circular:
        shifted.select(dim, 0 if shift > 0 else -1).zero_()
    return shifted


class FiniteDifferenceOp(LinearOperator):
    r"""Finite Difference Operator.

    Calculates, at each voxel, the finite differences of an image along a set of directions ``dim``
    and stacks them along a new first dimension.
    For forward differences with unit spacing in direction :math:`i`,

    .. math::

        (\nabla u)_i(x) = u(x + e_i) - u(x).

    With circular boundaries, the Gram operator :math:`\nabla^H \nabla` is the negative of the
    periodic discrete Laplacian. Together with `~bpsense.operators.functionals.L21Norm` this is
    isotropic total variation.
    """

    def __init__(
        self,
        dim: Sequence[int],
        mode: Literal['forward', 'backward'] = 'forward',
        pad_mode: Literal['zeros', 'circular'] = 'circular',
    ) -> None:
        """Initialize the finite difference operator.

        Parameters
        ----------
        dim
            Dimensions along which finite differences are calculated.
        mode
            ``'forward'`` for :math:`u(x + e_i) - u(x)`, ``'backward'`` for :math:`u(x) - u(x - e_i)`.
        pad_mode
            Boundary condition. ``'circular'`` results in periodic differences,
            ``'zeros'`` treats values outside of the image as zero.
        """
        super().__init__()
        if not dim:
            raise ValueError('At least one dimension is required for finite differences.')
        if mode not in ('forward', 'backward'):
            raise ValueError(f'mode should be forward or backward, not {mode}')
        self.dim = tuple(dim)
        self.mode = mode
        self.circular = pad_mode == 'circular'

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Calculate finite differences.

        Parameters
        ----------
        x
            Input tensor.

        Returns
        -------
            Finite differences of x along the dimensions in `dim`, stacked along the first dimension.
        """
        if self.mode == 'forward':
            differences = [_shift(x, -1, d, self.circular) - x for d in self.dim]
        else:
            differences = [x - _shift(x, 1, d, self.circular) for d in self.dim]
        return (torch.stack(differences),)

    def adjoint(self, y: torch.Tensor) -> tuple[torch.Tensor,]:
        """Apply the adjoint, i.e. the negative divergence.

        Parameters
        ----------
        y
            finite differences stacked along the first dimension

        Returns
        -------
            Sum of the adjoint directional finite differences.

        Raises
        ------
        ValueError
            If the first dimension of `y` does not match the number of finite difference directions.
        """
        if y.shape[0] != len(self.dim):
            raise ValueError(
                f'First dimension of input tensor ({y.shape[0]}) has to match '
                f'the number of finite difference directions ({len(self.dim)}).'
            )
        if self.mode == 'forward':
            terms = [_shift(yi, 1, d, self.circular) - yi for d, yi in zip(self.dim, y, strict=True)]
        else:
            terms = [yi - _shift(yi, -1, d, self.circular) for d, yi in zip(self.dim, y, strict=True)]
        return (torch.stack(terms).sum(dim=0),)
