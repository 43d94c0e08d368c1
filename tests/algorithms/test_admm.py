"""Tests for the alternating direction method of multipliers."""

import pytest
import torch
from bpsense.algorithms.optimizers import ADMMStatus, admm
from bpsense.operators import IdentityOp, RealPartOp
from bpsense.operators.functionals import L1Norm, L2BallIndicator

from tests import RandomGenerator


def test_admm_ball_projection() -> None:
    """Minimal L2 norm in a ball around y is y shrunk towards zero."""
    y = RandomGenerator(seed=0).float64_tensor(size=(10,), low=-1.0, high=1.0)
    radius = 0.5
    constraints = [(IdentityOp(), L2BallIndicator(y, radius))]
    x, status = admm(
        constraints,
        torch.zeros_like(y),
        rho=1.0,
        l2_weight=1.0,
        max_iterations=1000,
        absolute_tolerance=1e-10,
        relative_tolerance=1e-8,
        cg_tolerance=1e-12,
    )
    expected = y * (1 - radius / torch.linalg.vector_norm(y))
    torch.testing.assert_close(x, expected, rtol=1e-5, atol=1e-6)
    assert status['stop_reason'] == 'converged'
    assert status['cg_divergences'] == 0
    assert status['primal_residual'] <= status['primal_tolerance']
    assert status['dual_residual'] <= status['dual_tolerance']


def test_admm_basis_pursuit_denoising() -> None:
    """Minimal L1 norm in a ball around y is soft thresholding of y."""
    random_generator = RandomGenerator(seed=1)
    magnitude = random_generator.float64_tensor(size=(10,), low=0.5, high=1.5)
    sign = torch.where(random_generator.bool_tensor(size=(10,)), 1.0, -1.0).to(torch.float64)
    y = sign * magnitude
    radius = 0.5
    constraints = [(IdentityOp(), L1Norm()), (IdentityOp(), L2BallIndicator(y, radius))]
    x, _ = admm(
        constraints,
        torch.zeros_like(y),
        rho=1.0,
        max_iterations=3000,
        absolute_tolerance=1e-9,
        relative_tolerance=1e-7,
        cg_tolerance=1e-12,
    )
    threshold = (y - x).abs().max()
    expected = torch.sgn(y) * torch.relu(y.abs() - threshold)
    torch.testing.assert_close(x, expected, rtol=1e-3, atol=1e-3)
    assert torch.linalg.vector_norm(x - y).item() == pytest.approx(radius, rel=1e-3)


def test_admm_projection() -> None:
    """The projection is applied after each x-update."""
    random_generator = RandomGenerator(seed=2)
    y = random_generator.complex128_tensor(size=(8,))
    constraints = [(RealPartOp(), L2BallIndicator(y.real.to(torch.complex128), 0.1))]
    x, _ = admm(constraints, torch.zeros_like(y), l2_weight=1.0, projection=RealPartOp(), max_iterations=20)
    assert (x.imag == 0).all()


def test_admm_callback_abort() -> None:
    """The iterations stop if the callback returns False."""
    y = RandomGenerator(seed=3).complex64_tensor(size=(16,), low=0.5)
    statuses: list[ADMMStatus] = []

    def callback(status: ADMMStatus) -> bool:
        statuses.append(status)
        return False

    _, status = admm(
        [(IdentityOp(), L1Norm()), (IdentityOp(), L2BallIndicator(y, 0.1))], torch.zeros_like(y), callback=callback
    )
    assert len(statuses) == 1
    assert status['stop_reason'] == 'aborted'
    assert status['iteration_number'] == 0


def test_admm_max_iterations() -> None:
    """The status reports if the maximal number of iterations was reached."""
    y = RandomGenerator(seed=4).complex64_tensor(size=(16,), low=0.5)
    iterations: list[int] = []

    def callback(status: ADMMStatus) -> None:
        iterations.append(status['iteration_number'])
        assert status['stop_reason'] is None

    _, status = admm(
        [(IdentityOp(), L1Norm()), (IdentityOp(), L2BallIndicator(y, 0.1))],
        torch.zeros_like(y),
        max_iterations=3,
        absolute_tolerance=0.0,
        relative_tolerance=0.0,
        callback=callback,
    )
    assert iterations == [0, 1, 2]
    assert status['stop_reason'] == 'max_iterations_reached'
    assert status['iteration_number'] == 2


def test_admm_large_radius() -> None:
    """If zero is feasible, it is the solution and it is found in the first iteration."""
    y = RandomGenerator(seed=5).complex64_tensor(size=(16,))
    x, status = admm([(IdentityOp(), L1Norm()), (IdentityOp(), L2BallIndicator(y, 100.0))], torch.zeros_like(y))
    assert (x == 0).all()
    assert status['stop_reason'] == 'converged'
    assert status['iteration_number'] == 0


@pytest.mark.parametrize(
    ('kwargs', 'match'),
    [
        ({'rho': 0.0}, 'rho'),
        ({'l2_weight': -1.0}, 'l2_weight'),
        ({'max_iterations': 0}, 'max_iterations'),
    ],
)
def test_admm_invalid_parameters(kwargs, match) -> None:
    """Parameters out of range are rejected."""
    with pytest.raises(ValueError, match=match):
        admm([(IdentityOp(), L1Norm())], torch.zeros(4), **kwargs)


def test_admm_no_constraints() -> None:
    """At least one constraint is required."""
    with pytest.raises(ValueError, match='constraint'):
        admm([], torch.zeros(4))
