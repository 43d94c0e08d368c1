"""L1 Norm."""

import torch

from bpsense.operators.Functional import ElementaryProximableFunctional


class L1Norm(ElementaryProximableFunctional):
    r"""Functional class for the L1 Norm.

    This implements the functional given by
    :math:`f: C^N -> [0, \infty), x ->  \| W (x-b)\|_1`,
    where W is a either a scalar or tensor that corresponds to a diagonal operator
    that is applied to the input.

    For complex inputs, the absolute value of each element is used, i.e. real and imaginary part
    are thresholded jointly.
    """

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Apply forward of L1Norm.

        Note: Do not use. Instead, call the instance of the Operator as operator(x)"""
        value = (self.weight * (x - self.target)).abs()
        return (torch.sum(value, dim=self.dim, keepdim=self.keepdim),)

    def prox(self, x: torch.Tensor, sigma: torch.Tensor | float = 1.0) -> tuple[torch.Tensor,]:
        """Proximal Mapping of the L1 Norm.

        Soft thresholding with threshold ``sigma * weight``. For ``sigma = 0``, the input is returned unchanged.

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
        x_out = torch.sgn(diff) * torch.relu(diff.abs() - threshold) + self.target
        return (x_out.to(torch.result_type(x, x_out)),)
