"""Selection of the compute device."""

from dataclasses import dataclass

import torch


class BackendUnavailableError(RuntimeError):
    """The requested compute device is not available."""


@dataclass(frozen=True)
class Backend:
    """Compute device used for a reconstruction.

    The backend is chosen once, before any data is loaded, and all inputs are moved to its device.
    """

    device: torch.device = torch.device('cpu')
    """Device of all tensors of a reconstruction."""

    def __post_init__(self) -> None:
        """Check that the device can be used.

        Raises
        ------
        BackendUnavailableError
            If a CUDA device is requested but CUDA is not available.
        """
        device = torch.device(self.device)
        object.__setattr__(self, 'device', device)
        if device.type == 'cuda' and not torch.cuda.is_available():
            raise BackendUnavailableError('CUDA was requested, but no CUDA device is available.')

    @classmethod
    def from_accelerator(cls, use_accelerator: bool = False) -> 'Backend':
        """Create the CPU backend or the CUDA backend.

        Parameters
        ----------
        use_accelerator
            if True, use the default CUDA device

        Raises
        ------
        BackendUnavailableError
            If the accelerator is requested but not available.
        """
        return cls(torch.device('cuda') if use_accelerator else torch.device('cpu'))

    def to_device(self, x: torch.Tensor) -> torch.Tensor:
        """Move a tensor to the device of the backend."""
        return x.to(device=self.device)
