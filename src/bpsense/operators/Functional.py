"""Functionals and their proximal mappings."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

import torch

from bpsense.operators.Operator import Operator


class Functional(Operator):
    """Operator mapping a tensor to a real value, or to a batch of real values."""

    def __call__(self, x: torch.Tensor) -> tuple[torch.Tensor,]:  # type: ignore[override]
        """Evaluate the functional."""
        return super().__call__(x)  # type: ignore[return-value]

    @staticmethod
    def _throw_if_negative_or_complex(
        x: torch.Tensor | complex, message: str = 'sigma must be real and non-negative'
    ) -> None:
        """Raise a ValueError with `message` unless x is real and non-negative everywhere."""
        if isinstance(x, torch.Tensor):
            valid = not x.dtype.is_complex and bool((x >= 0).all())
        else:
            valid = isinstance(x, float | int) and x >= 0
        if not valid:
            raise ValueError(message)


class ProximableFunctional(Functional, ABC):
    r"""Functional :math:`f` with a proximal mapping.

    The proximal mapping with step size :math:`\sigma` is
    :math:`\mathrm{prox}_{\sigma f}(x) = \mathrm{argmin}_p\, \sigma f(p) + \frac{1}{2}\|x - p\|_2^2`.
    """

    @abstractmethod
    def prox(self, x: torch.Tensor, sigma: torch.Tensor | float = 1.0) -> tuple[torch.Tensor,]:
        """Apply the proximal mapping.

        Parameters
        ----------
        x
            input tensor
        sigma
            step size, real and non-negative

        Returns
        -------
            The minimizer of ``sigma * f(p) + 1/2 ||x - p||^2``
        """

    def __rmul__(self, scalar: torch.Tensor | float) -> ProximableFunctional:
        """Scale the functional by a non-negative number, ``(a * f)(x) = a f(x)``."""
        if not isinstance(scalar, int | float | torch.Tensor):
            return NotImplemented
        return ScaledProximableFunctional(self, scalar)


class ElementaryProximableFunctional(ProximableFunctional):
    r"""Proximable functional of the form :math:`f(x) = \phi(w (x - t))`.

    :math:`w` is a real, non-negative weight and :math:`t` a target, both broadcast against
    the input. The result is reduced over `dim`, remaining axes are batch axes.
    """

    def __init__(
        self,
        target: torch.Tensor | None | complex = None,
        weight: torch.Tensor | float = 1.0,
        dim: int | Sequence[int] | None = None,
        keepdim: bool = False,
    ) -> None:
        """Initialize the functional.

        Parameters
        ----------
        target
            target :math:`t`, zero if `None`
        weight
            weight :math:`w`
        dim
            axes to reduce over, all axes if `None`
        keepdim
            keep reduced axes as singletons
        """
        super().__init__()
        weight = torch.as_tensor(weight)
        self._throw_if_negative_or_complex(weight, 'weight must be real and non-negative')
        self.register_buffer('weight', weight)
        self.register_buffer('target', torch.as_tensor(0.0 if target is None else target))
        self.dim = (dim,) if isinstance(dim, int) else (tuple(dim) if dim is not None else None)
        self.keepdim = keepdim


class ScaledProximableFunctional(ProximableFunctional):
    r"""Functional :math:`\alpha g` for a proximable :math:`g` and a non-negative :math:`\alpha`.

    The proximal mapping is that of :math:`g` with the step size :math:`\alpha\sigma`.
    """

    def __init__(self, functional: ProximableFunctional, scale: torch.Tensor | float) -> None:
        super().__init__()
        scale = torch.as_tensor(scale)
        self._throw_if_negative_or_complex(scale, 'scale must be real and non-negative')
        self.functional = functional
        self.register_buffer('scale', scale)

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Evaluate and scale the wrapped functional."""
        return (self.scale * self.functional(x)[0],)

    def prox(self, x: torch.Tensor, sigma: torch.Tensor | float = 1.0) -> tuple[torch.Tensor,]:
        """Apply the proximal mapping of the wrapped functional with the scaled step size."""
        return self.functional.prox(x, sigma * self.scale)
