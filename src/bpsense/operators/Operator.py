"""General Operators."""

from abc import ABC, abstractmethod

import torch


class Operator(ABC, torch.nn.Module):
    """The general Operator class.

    Operators take one or more tensors and return a tuple of tensors.
    """

    @abstractmethod
    def forward(self, *args: torch.Tensor) -> tuple[torch.Tensor, ...]:
        """Apply forward operator."""
        ...

    def __call__(self, *args: torch.Tensor) -> tuple[torch.Tensor, ...]:
        """Apply the forward operator."""
        return super().__call__(*args)
