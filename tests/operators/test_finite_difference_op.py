"""Tests for finite difference operator."""

import pytest
import torch
from bpsense.operators import FiniteDifferenceOp

from tests import RandomGenerator, dotproduct_adjointness_test


@pytest.mark.parametrize('mode', ['forward', 'backward'])
def test_finite_difference_op_forward(mode: str) -> None:
    """Test correct finite difference of simple object."""
    # Test object with positive linear gradient in real and negative linear gradient imaginary part
    linear_gradient_object = (
        torch.arange(1, 21)[None, :] - 1j * torch.arange(1, 21)[None, :] + torch.zeros(2, 1)
    ).to(torch.complex64)

    # Generate and apply finite difference operator
    finite_difference_op = FiniteDifferenceOp(dim=(-1,), mode=mode, pad_mode='zeros')
    (finite_difference_of_object,) = finite_difference_op(linear_gradient_object)

    # Zero padding leads to a different result at the boundary, thus it is excluded
    torch.testing.assert_close(
        finite_difference_of_object[..., 1:-1], (1 - 1j) * torch.ones(1, 2, 18, dtype=torch.complex64)
    )


def test_finite_difference_op_circular_boundary() -> None:
    """Circular forward differences wrap around."""
    x = torch.tensor([[1.0, 2.0, 4.0, 8.0]])
    (difference,) = FiniteDifferenceOp(dim=(1,), mode='forward', pad_mode='circular')(x)
    torch.testing.assert_close(difference, torch.tensor([[[1.0, 2.0, 4.0, -7.0]]]))


@pytest.mark.parametrize('pad_mode', ['zeros', 'circular'])
@pytest.mark.parametrize('mode', ['forward', 'backward'])
@pytest.mark.parametrize('dim', [(0,), (0, 1), (0, 1, 2)])
def test_finite_difference_op_adjointness(dim: tuple[int, ...], mode: str, pad_mode: str) -> None:
    """Test finite difference operator adjoint property."""
    random_generator = RandomGenerator(seed=0)
    im_shape = (8, 6, 5, 1, 2)
    finite_difference_op = FiniteDifferenceOp(dim=dim, mode=mode, pad_mode=pad_mode)
    u = random_generator.complex64_tensor(size=im_shape)
    v = random_generator.complex64_tensor(size=(len(dim), *im_shape))
    dotproduct_adjointness_test(finite_difference_op, u, v)


def test_finite_difference_op_gram_is_negative_laplacian() -> None:
    """With circular boundaries, the Gram operator of forward differences is the negative periodic Laplacian."""
    random_generator = RandomGenerator(seed=1)
    u = random_generator.complex64_tensor(size=(8, 6, 1, 1, 1))
    dim = (0, 1)
    finite_difference_op = FiniteDifferenceOp(dim=dim, mode='forward', pad_mode='circular')
    laplacian = sum(torch.roll(u, 1, d) + torch.roll(u, -1, d) - 2 * u for d in dim)
    torch.testing.assert_close(finite_difference_op.gram(u)[0], -laplacian)


def test_finite_difference_op_wrong_adjoint_input() -> None:
    """The first dimension of the adjoint input must match the number of directions."""
    finite_difference_op = FiniteDifferenceOp(dim=(0, 1))
    with pytest.raises(ValueError, match='number of finite difference directions'):
        finite_difference_op.adjoint(torch.zeros(3, 4, 4))


def test_finite_difference_op_no_dim() -> None:
    """At least one direction is required."""
    with pytest.raises(ValueError, match='At least one dimension'):
        FiniteDifferenceOp(dim=())


def test_finite_difference_op_invalid_mode() -> None:
    """Only forward and backward differences are supported."""
    with pytest.raises(ValueError, match='forward or backward'):
        FiniteDifferenceOp(dim=(0,), mode='central')  # type: ignore[arg-type]


def test_finite_difference_op_backward_is_shifted_forward() -> None:
    """Circular backward differences are forward differences shifted by one entry."""
    u = RandomGenerator(seed=2).complex64_tensor(size=(7, 5))
    (forward,) = FiniteDifferenceOp(dim=(0,), mode='forward')(u)
    (backward,) = FiniteDifferenceOp(dim=(0,), mode='backward')(u)
    torch.testing.assert_close(backward, torch.roll(forward, 1, dims=1))
