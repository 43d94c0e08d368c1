"""Mixed L2/L1 Norm."""

import torch

from bpsense.operators.Functional import ElementaryProximableFunctional


class L21Norm(ElementaryProximableFunctional):
    r"""Functional class for the mixed L2,1 norm.

    This implements the functional given by
    :math:`f: C^N -> [0, \infty), x -> \sum_j \| W (x-b)_{:,j}\|_2`,
    i.e. the L2 norm along `group_dim` followed by the L1 norm over all other entries.
    Applied to stacked finite differences, this is the isotropic total variation.
    """

    def __init__(
        self,
        target: torch.Tensor | None | complex = None,
        weight: torch.Tensor | float = 1.0,
        group_dim: int = 0,
    ) -> None:
        """Initialize the L2,1 norm.

        Parameters
        ----------
        target
            target element
        weight
            real, non-negative weight
        group_dim
            dimension along which the L2 norm is calculated
        """
        super().__init__(target=target, weight=weight)
        self.group_dim = group_dim

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Apply forward of L21Norm.

        Note: Do not use. Instead, call the instance of the Operator as operator(x)"""
        value = torch.linalg.vector_norm(self.weight * (x - self.target), dim=self.group_dim)
        return (value.sum(),)

    def prox(self, x: torch.Tensor, sigma: torch.Tensor | float = 1.0) -> tuple[torch.Tensor,]:
        """Proximal Mapping of the L2,1 norm.

        Each group is shrunk towards zero by ``sigma * weight`` in L2 norm and set to zero
        if its norm is smaller.

        Parameters
        ----------
        x
            input tensor
        sigma
            scaling factor

        Returns
        -------
            Proximal mapping applied to the input tensor
        """
        self._throw_if_negative_or_complex(sigma)
        diff = x - self.target
        threshold = self.weight * sigma
        norm = torch.linalg.vector_norm(diff, dim=self.group_dim, keepdim=True)
        # groups with zero norm are zero anyway, clamp avoids division by zero
        factor = torch.relu(1 - threshold / norm.clamp_min(torch.finfo(norm.dtype).tiny))
        x_out = diff * factor + self.target
        return (x_out.to(torch.result_type(x, x_out)),)
