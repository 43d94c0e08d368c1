"""Conjugate gradient solver."""

from collections.abc import Callable

import torch

from bpsense.algorithms.optimizers.OptimizerStatus import OptimizerStatus
from bpsense.operators.LinearOperator import LinearOperator


class CGStatus(OptimizerStatus):
    """Status of the conjugate gradient algorithm."""

    residual: tuple[torch.Tensor,]
    """Residual of the current estimate."""

    previous_residual: tuple[torch.Tensor,]
    """Residual before the update of the current iteration."""


def cg(
    operator: LinearOperator | Callable[[torch.Tensor], tuple[torch.Tensor,]],
    right_hand_side: torch.Tensor,
    *,
    initial_value: torch.Tensor | None = None,
    max_iterations: int = 128,
    tolerance: float = 1e-4,
    callback: Callable[[CGStatus], bool | None] | None = None,
) -> tuple[torch.Tensor,]:
    r"""Solve :math:`Hx=b` with the method of conjugate gradients.

    :math:`H` has to be self-adjoint and positive semidefinite, which holds for the normal
    equations of the ADMM image update. This is not checked.

    Starting from :math:`x_0` with residual :math:`r_0 = b - Hx_0` and search direction :math:`p_0 = r_0`,
    each iteration takes the step :math:`\alpha_k = \|r_k\|^2 / (p_k^H H p_k)` along :math:`p_k`,
    updates the residual as :math:`r_{k+1} = r_k - \alpha_k H p_k` and makes the next search direction
    :math:`p_{k+1} = r_{k+1} + (\|r_{k+1}\|^2 / \|r_k\|^2) p_k` conjugate to the previous ones [Hestenes1952]_.

    Parameters
    ----------
    operator
        Operator :math:`H`, a `LinearOperator` or a function returning a tuple.
    right_hand_side
        :math:`b`
    initial_value
        Warm start :math:`x_0`. Zero if `None`.
    max_iterations
        Maximum number of iterations.
    tolerance
        Iterations stop once :math:`\|r_k\|_2` is at most this value. They also stop for an exact
        solution or if the search direction lies in the null space of :math:`H`.
    callback
        Called after every iteration with a `CGStatus`. Returning False stops the iterations.

    Returns
    -------
        Approximate solution :math:`x`.

    References
    ----------
    .. [Hestenes1952] Hestenes, M. R., & Stiefel, E. (1952). Methods of conjugate gradients for solving linear systems.
       Journal of Research of the National Bureau of Standards, 49(6), 409-436
    """
    if initial_value is None:
        solution = torch.zeros_like(right_hand_side)
        residual = right_hand_side
    else:
        if initial_value.shape != right_hand_side.shape:
            raise ValueError(
                f'Shape mismatch: initial_value {tuple(initial_value.shape)}, '
                f'right_hand_side {tuple(right_hand_side.shape)}'
            )
        solution = initial_value
        residual = right_hand_side - operator(initial_value)[0]

    conjugate = residual
    residual_dot_residual_old: torch.Tensor | None = None

    for iteration in range(max_iterations):
        residual_dot_residual = torch.vdot(residual.flatten(), residual.flatten()).real

        # an exact solution stops the iterations even for tolerance 0
        if residual_dot_residual <= tolerance**2:
            break

        if residual_dot_residual_old is not None:
            beta = residual_dot_residual / residual_dot_residual_old
            conjugate = residual + beta * conjugate
        (operator_conjugate,) = operator(conjugate)
        curvature = torch.vdot(conjugate.flatten(), operator_conjugate.flatten()).real
        if curvature <= 0:
            # search direction in the null space of the operator, no further progress possible
            break
        alpha = residual_dot_residual / curvature
        solution = solution + alpha * conjugate
        previous_residual = residual
        residual = residual - alpha * operator_conjugate
        residual_dot_residual_old = residual_dot_residual

        if callback is not None:
            continue_iterations = callback(
                {
                    'solution': (solution,),
                    'iteration_number': iteration,
                    'residual': (residual,),
                    'previous_residual': (previous_residual,),
                }
            )
            if continue_iterations is False:
                break

    return (solution,)
