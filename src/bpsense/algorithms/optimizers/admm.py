"""Alternating Direction Method of Multipliers (ADMM)."""

from __future__ import annotations

import functools
import math
import operator
import warnings
from collections.abc import Callable, Sequence
from typing import Literal

import torch

from bpsense.algorithms.optimizers.cg import CGStatus, cg
from bpsense.algorithms.optimizers.OptimizerStatus import OptimizerStatus
from bpsense.operators import IdentityOp, LinearOperator, ProximableFunctional
from bpsense.utils.stacklevel import external_stacklevel

StopReason = Literal['converged', 'max_iterations_reached', 'aborted']


class ADMMStatus(OptimizerStatus):
    """Status of the ADMM algorithm."""

    primal_residual: float
    """Norm of the constraint violation :math:`\\|Gx - z\\|`."""

    dual_residual: float
    """Norm of the change of the auxiliary variables :math:`\\rho \\|G^H (z - z_{old})\\|`."""

    primal_tolerance: float
    """Tolerance for the primal residual in the current iteration."""

    dual_tolerance: float
    """Tolerance for the dual residual in the current iteration."""

    cg_divergences: int
    """Number of x-updates in which the conjugate gradient residual increased."""

    stop_reason: StopReason | None
    """Why the iterations stopped, None while iterating."""


def _norm(*values: torch.Tensor) -> float:
    """L2 norm of the stack of tensors."""
    return math.sqrt(sum(torch.vdot(value.flatten(), value.flatten()).real.item() for value in values))


def admm(
    constraints: Sequence[tuple[LinearOperator, ProximableFunctional]],
    initial_value: torch.Tensor,
    *,
    rho: float = 10.0,
    l2_weight: float = 0.0,
    max_iterations: int = 50,
    absolute_tolerance: float = 1e-4,
    relative_tolerance: float = 1e-3,
    cg_max_iterations: int = 10,
    cg_tolerance: float = 1e-6,
    projection: Callable[[torch.Tensor], tuple[torch.Tensor,]] | None = None,
    callback: Callable[[ADMMStatus], bool | None] | None = None,
) -> tuple[torch.Tensor, ADMMStatus]:
    r"""Alternating Direction Method of Multipliers (ADMM).

    Solves the problem

    .. math::

        \min_x \frac{\lambda}{2} \|x\|_2^2 + \sum_i f_i(G_i x)

    with linear operators :math:`G_i` and proximable functionals :math:`f_i` by splitting
    :math:`z_i = G_i x` and iterating the scaled form of ADMM [Boyd2011]_:

    .. math::

        x_{k+1} &= \left(\lambda I + \rho \sum_i G_i^H G_i\right)^{-1} \rho \sum_i G_i^H (z_{i,k} - u_{i,k}) \\
        z_{i,k+1} &= \mathrm{prox}_{f_i / \rho}(G_i x_{k+1} + u_{i,k}) \\
        u_{i,k+1} &= u_{i,k} + G_i x_{k+1} - z_{i,k+1}

    The x-update is solved approximately with `cg`, warm-started at the current estimate.
    The auxiliary variables are initialized as :math:`z_i = G_i x_0`, the scaled duals :math:`u_i` with zero.

    The iterations stop if both the primal residual :math:`r = \|Gx - z\|` and the dual residual
    :math:`s = \rho \|G^H(z - z_{old})\|` are below their tolerances

    .. math::

        \epsilon_{pri} &= \epsilon_{abs} \sqrt{n_z} + \epsilon_{rel} \max(\|Gx\|, \|z\|) \\
        \epsilon_{dual} &= \epsilon_{abs} \sqrt{n_x} + \epsilon_{rel} \rho \|G^H u\|,

    after `max_iterations` or if the callback returns False.
    Here, :math:`G` denotes all :math:`G_i` stacked and :math:`n` the number of elements.

    Parameters
    ----------
    constraints
        pairs :math:`(G_i, f_i)` of linear operators and proximable functionals
    initial_value
        initial value :math:`x_0`
    rho
        penalty parameter :math:`\rho > 0`
    l2_weight
        weight :math:`\lambda \geq 0` of the L2 regularization of x
    max_iterations
        maximum number of ADMM iterations
    absolute_tolerance
        absolute tolerance :math:`\epsilon_{abs}` of the stopping criterion
    relative_tolerance
        relative tolerance :math:`\epsilon_{rel}` of the stopping criterion
    cg_max_iterations
        maximum number of conjugate gradient iterations per x-update
    cg_tolerance
        tolerance of the conjugate gradient residual
    projection
        operator applied to x after each x-update, e.g. a projection onto real values
    callback
        function called after each iteration with the current `ADMMStatus`.
        If it returns False, the iterations are stopped.

    Returns
    -------
        the solution and the final status

    Raises
    ------
    ValueError
        If no constraints are given or the parameters are out of range.

    References
    ----------
    .. [Boyd2011] Boyd S, Parikh N, Chu E, Peleato B, Eckstein J (2011) Distributed Optimization and Statistical
       Learning via the Alternating Direction Method of Multipliers. Foundations and Trends in Machine Learning 3(1).
    """
    if not constraints:
        raise ValueError('At least one constraint is required.')
    if rho <= 0:
        raise ValueError(f'rho must be positive, got {rho}')
    if l2_weight < 0:
        raise ValueError(f'l2_weight must be non-negative, got {l2_weight}')
    if max_iterations < 1:
        raise ValueError(f'max_iterations must be at least 1, got {max_iterations}')

    operators = [g for g, _ in constraints]
    functionals = [f for _, f in constraints]

    normal_operator: LinearOperator = rho * functools.reduce(operator.add, [g.gram for g in operators])
    if l2_weight > 0:
        normal_operator = normal_operator + l2_weight * IdentityOp()

    def adjoint_sum(values: Sequence[torch.Tensor]) -> torch.Tensor:
        """Calculate sum_i G_i^H v_i."""
        return functools.reduce(operator.add, (g.adjoint(v)[0] for g, v in zip(operators, values, strict=True)))

    x = initial_value
    z = [g(x)[0] for g in operators]
    u = [torch.zeros_like(zi) for zi in z]
    n_x = x.numel()
    n_z = sum(zi.numel() for zi in z)
    cg_divergences = 0
    cg_residuals: list[float] = []

    def track_cg(status: CGStatus) -> None:
        if not cg_residuals:
            cg_residuals.append(_norm(*status['previous_residual']))
        cg_residuals.append(_norm(*status['residual']))

    for iteration in range(max_iterations):
        # x-update
        right_hand_side = rho * adjoint_sum([zi - ui for zi, ui in zip(z, u, strict=True)])
        cg_residuals.clear()
        (x,) = cg(
            normal_operator,
            right_hand_side,
            initial_value=x,
            max_iterations=cg_max_iterations,
            tolerance=cg_tolerance,
            callback=track_cg,
        )
        if cg_residuals and cg_residuals[-1] > cg_residuals[0]:
            cg_divergences += 1
            warnings.warn(
                f'Conjugate gradient diverged in ADMM iteration {iteration}: '
                f'residual increased from {cg_residuals[0]:.3g} to {cg_residuals[-1]:.3g}',
                RuntimeWarning,
                stacklevel=external_stacklevel(),
            )
        if projection is not None:
            (x,) = projection(x)

        # z-update
        gx = [g(x)[0] for g in operators]
        z_old = z
        z = [f.prox(gxi + ui, 1 / rho)[0] for f, gxi, ui in zip(functionals, gx, u, strict=True)]

        # dual update
        u = [ui + gxi - zi for ui, gxi, zi in zip(u, gx, z, strict=True)]

        # residuals
        primal_residual = _norm(*(gxi - zi for gxi, zi in zip(gx, z, strict=True)))
        dual_residual = rho * _norm(adjoint_sum([zi - zi_old for zi, zi_old in zip(z, z_old, strict=True)]))
        primal_tolerance = absolute_tolerance * math.sqrt(n_z) + relative_tolerance * max(_norm(*gx), _norm(*z))
        dual_tolerance = absolute_tolerance * math.sqrt(n_x) + relative_tolerance * rho * _norm(adjoint_sum(u))

        status: ADMMStatus = {
            'solution': (x,),
            'iteration_number': iteration,
            'primal_residual': primal_residual,
            'dual_residual': dual_residual,
            'primal_tolerance': primal_tolerance,
            'dual_tolerance': dual_tolerance,
            'cg_divergences': cg_divergences,
            'stop_reason': None,
        }
        continue_iterations = callback(status) if callback is not None else None

        if primal_residual <= primal_tolerance and dual_residual <= dual_tolerance:
            status['stop_reason'] = 'converged'
            break
        if continue_iterations is False:
            status['stop_reason'] = 'aborted'
            break
    else:
        status['stop_reason'] = 'max_iterations_reached'

    return x, status
