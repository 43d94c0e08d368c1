"""Helper/Utilities for test functions."""

import torch
from bpsense.operators import LinearOperator, Operator


def dotproduct_adjointness_test(
    operator: LinearOperator,
    u: torch.Tensor,
    v: torch.Tensor,
    relative_tolerance: float = 1e-3,
    absolute_tolerance=1e-5,
):
    """Test the adjointness of linear operator and operator.H.

    Test if
         <Operator(u),v> == <u, Operator^H(v)>
         for one u ∈ domain and one v ∈ range of Operator.
    and if the shapes match.

    Note: This property should hold for all u and v.
    Commonly, this function is called with two random vectors u and v.

    Parameters
    ----------
    operator
        linear operator
    u
        element of the domain of the operator
    v
        element of the range of the operator
    relative_tolerance
        default is pytorch's default for float16
    absolute_tolerance
        default is pytorch's default for float16

    Raises
    ------
    AssertionError
        if the adjointness property does not hold
    AssertionError
        if the shape of operator(u) and v does not match
        if the shape of u and operator.H(v) does not match
    """
    (forward_u,) = operator(u)
    (adjoint_v,) = operator.adjoint(v)

    # explicitly check the shapes, as flatten makes the dot product insensitive to wrong shapes
    assert forward_u.shape == v.shape
    assert adjoint_v.shape == u.shape

    dotproduct_range = torch.vdot(forward_u.flatten(), v.flatten())
    dotproduct_domain = torch.vdot(u.flatten(), adjoint_v.flatten())
    torch.testing.assert_close(dotproduct_range, dotproduct_domain, rtol=relative_tolerance, atol=absolute_tolerance)


def operator_isometry_test(
    operator: Operator,
    u: torch.Tensor,
    relative_tolerance: float = 1e-3,
    absolute_tolerance=1e-5,
):
    """Test the isometry of a operator.

    Test if
         ||Operator(u)|| == ||u||
         for u ∈ domain of Operator.

    Raises
    ------
    AssertionError
        if the isometry property does not hold
    """
    torch.testing.assert_close(
        torch.linalg.vector_norm(u),
        torch.linalg.vector_norm(operator(u)[0]),
        rtol=relative_tolerance,
        atol=absolute_tolerance,
    )


def linear_operator_unitary_test(
    operator: LinearOperator, u: torch.Tensor, relative_tolerance: float = 1e-3, absolute_tolerance=1e-5
):
    """Test if a linear operator is unitary.

    Test if
         Operator.adjoint(Operator(u)) == u
         for u ∈ domain of Operator.

    Raises
    ------
    AssertionError
        if the property does not hold
    """
    torch.testing.assert_close(u, operator.adjoint(operator(u)[0])[0], rtol=relative_tolerance, atol=absolute_tolerance)


def gram_test(
    operator: LinearOperator, u: torch.Tensor, relative_tolerance: float = 1e-3, absolute_tolerance=1e-5
):
    """Test that the gram operator matches the adjoint of the forward.

    Raises
    ------
    AssertionError
        if operator.gram(u) differs from operator.adjoint(operator(u))
    """
    expected = operator.adjoint(operator(u)[0])[0]
    torch.testing.assert_close(operator.gram(u)[0], expected, rtol=relative_tolerance, atol=absolute_tolerance)
