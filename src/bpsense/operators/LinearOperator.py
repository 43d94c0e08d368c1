"""Linear operators and their algebra."""

from __future__ import annotations

import functools
import operator
from abc import abstractmethod

import torch

import bpsense.operators
from bpsense.operators.Operator import Operator

Scalar = torch.Tensor | complex


def _is_one(value: object) -> bool:
    return isinstance(value, complex | float | int) and value == 1


def _conj(value: Scalar) -> Scalar:
    return value.conj() if isinstance(value, torch.Tensor) else value.conjugate()


class LinearOperator(Operator):
    r"""Linear operator with a single input and a single output tensor.

    A linear operator :math:`A` satisfies :math:`A(ax + by) = aA(x) + bA(y)`.
    Subclasses implement `forward` and `adjoint`. The adjoint is used by `H` and `gram`.

    Operators form an algebra:

    - ``A @ B`` applies ``B`` first and then ``A``,
    - ``A + B`` adds the outputs,
    - ``a * A`` scales the output and ``A * a`` scales the input.
    """

    def __call__(self, x: torch.Tensor) -> tuple[torch.Tensor,]:  # type: ignore[override]
        """Apply the operator."""
        return super().__call__(x)  # type: ignore[return-value]

    @abstractmethod
    def adjoint(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Apply the adjoint operator."""
        ...

    @property
    def H(self) -> LinearOperator:  # noqa: N802
        """Adjoint operator, with ``A.H.H`` being ``A``."""
        return AdjointLinearOperator(self)

    @property
    def gram(self) -> LinearOperator:
        r"""Self-adjoint operator :math:`A^H A`.

        Subclasses can override this with a cheaper equivalent.
        """
        return self.H @ self

    def __matmul__(self, other: LinearOperator) -> LinearOperator:
        """Compose, ``(self @ other)(x) = self(other(x))``."""
        if not isinstance(other, LinearOperator):
            return NotImplemented  # type: ignore[unreachable]
        if isinstance(other, bpsense.operators.IdentityOp):
            return self
        if isinstance(self, bpsense.operators.IdentityOp):
            return other
        return LinearOperatorComposition(self, other)

    def __add__(self, other: LinearOperator) -> LinearOperator:
        """Add, ``(self + other)(x) = self(x) + other(x)``."""
        if not isinstance(other, LinearOperator):
            return NotImplemented  # type: ignore[unreachable]
        return LinearOperatorSum(self, other)

    def __mul__(self, other: Scalar) -> LinearOperator:
        """Scale the input, ``(self * other)(x) = self(other * x)``."""
        if _is_one(other):
            return self
        if not isinstance(other, complex | float | int | torch.Tensor):
            return NotImplemented  # type: ignore[unreachable]
        return LinearOperatorElementwiseProductLeft(self, other)

    def __rmul__(self, other: Scalar) -> LinearOperator:
        """Scale the output, ``(other * self)(x) = other * self(x)``."""
        if _is_one(other):
            return self
        if not isinstance(other, complex | float | int | torch.Tensor):
            return NotImplemented  # type: ignore[unreachable]
        return LinearOperatorElementwiseProductRight(self, other)


class LinearOperatorComposition(LinearOperator):
    """Chain of two linear operators, the inner one is applied first."""

    def __init__(self, outer: LinearOperator, inner: LinearOperator) -> None:
        """Initialize the composition.

        Parameters
        ----------
        outer
            operator applied last
        inner
            operator applied first
        """
        super().__init__()
        self.outer = outer
        self.inner = inner

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Apply inner, then outer operator."""
        (y,) = self.inner(x)
        return self.outer(y)

    def adjoint(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Apply the adjoint of the outer, then of the inner operator."""
        (y,) = self.outer.adjoint(x)
        return self.inner.adjoint(y)

    @property
    def gram(self) -> LinearOperator:
        """Gram operator, using the Gram operator of the outer operator."""
        return self.inner.H @ self.outer.gram @ self.inner


class LinearOperatorSum(LinearOperator):
    """Sum of linear operators with the same domain and range.

    Nested sums are flattened into a single list of summands.
    """

    def __init__(self, *summands: LinearOperator) -> None:
        """Initialize the sum from at least one operator."""
        super().__init__()
        if not summands:
            raise ValueError('A sum requires at least one operator.')
        flat: list[LinearOperator] = []
        for summand in summands:
            flat.extend(summand._operators if isinstance(summand, LinearOperatorSum) else (summand,))  # type: ignore[arg-type]
        self._operators = torch.nn.ModuleList(flat)

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Add the outputs of all summands."""
        return (functools.reduce(operator.add, [summand(x)[0] for summand in self._operators]),)

    def adjoint(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Add the adjoints of all summands."""
        return (functools.reduce(operator.add, [summand.adjoint(x)[0] for summand in self._operators]),)


class LinearOperatorElementwiseProductRight(LinearOperator):
    """Multiplication of the output of a linear operator with a scalar or tensor."""

    def __init__(self, operator: LinearOperator, factor: Scalar) -> None:
        super().__init__()
        self._operator = operator
        self._factor = factor

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Apply the operator and scale the result."""
        return (self._operator(x)[0] * self._factor,)

    def adjoint(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Scale with the conjugate factor and apply the adjoint operator."""
        return self._operator.adjoint(x * _conj(self._factor))

    @property
    def gram(self) -> LinearOperator:
        """Gram operator, moving scalar factors out of the operator."""
        squared = _conj(self._factor) * self._factor
        if isinstance(self._factor, torch.Tensor) and self._factor.numel() > 1:
            return self._operator.H @ (squared * self._operator)
        return squared * self._operator.gram


class LinearOperatorElementwiseProductLeft(LinearOperator):
    """Multiplication of the input of a linear operator with a scalar or tensor."""

    def __init__(self, operator: LinearOperator, factor: Scalar) -> None:
        super().__init__()
        self._operator = operator
        self._factor = factor

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Scale the input and apply the operator."""
        return self._operator(x * self._factor)

    def adjoint(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Apply the adjoint operator and scale with the conjugate factor."""
        return (self._operator.adjoint(x)[0] * _conj(self._factor),)


class AdjointLinearOperator(LinearOperator):
    """Operator whose forward is the adjoint of another operator."""

    def __init__(self, operator: LinearOperator) -> None:
        super().__init__()
        self._operator = operator

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Apply the adjoint of the wrapped operator."""
        return self._operator.adjoint(x)

    def adjoint(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Apply the wrapped operator."""
        return self._operator.forward(x)

    @property
    def H(self) -> LinearOperator:  # noqa: N802
        """The wrapped operator."""
        return self._operator
