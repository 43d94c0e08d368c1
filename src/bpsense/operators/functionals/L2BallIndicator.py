"""Indicator function of an L2 ball."""

import torch

from bpsense.operators.Functional import ProximableFunctional


class L2BallIndicator(ProximableFunctional):
    r"""Indicator function of the L2 ball around a target.

    .. math::

        f(x) = \begin{cases} 0 & \|x - y\|_2 \leq \epsilon \\ \infty & \text{else} \end{cases}

    Used as data consistency constraint :math:`\|Ax - y\|_2 \leq \epsilon`.
    The norm is taken over all entries of the input.
    """

    def __init__(self, target: torch.Tensor, radius: float) -> None:
        r"""Initialize the indicator.

        Parameters
        ----------
        target
            center :math:`y` of the ball
        radius
            radius :math:`\epsilon` of the ball, must be non-negative
        """
        super().__init__()
        self._throw_if_negative_or_complex(radius, 'radius must be real and non-negative')
        self.register_buffer('target', target)
        self.radius = radius

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Evaluate the indicator, i.e. 0 inside the ball and infinity outside."""
        inside = torch.linalg.vector_norm(x - self.target) <= self.radius
        zero = torch.zeros((), dtype=x.real.dtype, device=x.device)
        return (torch.where(inside, zero, zero + torch.inf),)

    def prox(self, x: torch.Tensor, sigma: torch.Tensor | float = 1.0) -> tuple[torch.Tensor,]:
        """Projection onto the L2 ball.

        The prox of an indicator function does not depend on `sigma`.

        Parameters
        ----------
        x
            input tensor
        sigma
            scaling factor, ignored apart from validation

        Returns
        -------
            closest point to x within the ball
        """
        self._throw_if_negative_or_complex(sigma)
        diff = x - self.target
        norm = torch.linalg.vector_norm(diff)
        if norm <= self.radius:
            return (x,)
        return (self.target + diff * (self.radius / norm),)
