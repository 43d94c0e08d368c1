"""Configuration of the basis pursuit SENSE reconstruction."""

from dataclasses import dataclass
from typing import Literal

from bpsense.operators.WaveletOp import WaveletType


@dataclass(frozen=True)
class BPSenseConfig:
    """Settings of a basis pursuit denoising SENSE reconstruction.

    All values are validated on creation.
    """

    eps: float = 0.01
    """Radius of the data consistency constraint, in units of the normalized k-space."""

    l2_weight: float = 0.0
    """Weight of an additional L2 regularization of the image."""

    rho: float = 10.0
    """ADMM penalty parameter."""

    max_iterations: int = 50
    """Maximum number of ADMM iterations."""

    real_value_constraint: bool = False
    """Restrict the image to real values."""

    regularizer: Literal['wavelet', 'tv'] = 'wavelet'
    """Sparsifying transform, wavelets or total variation."""

    min_block_size: int | tuple[int, int, int] = 16
    """Minimal size of the coarsest wavelet scale, per spatial dimension."""

    wavelet_name: WaveletType = 'db4'
    """Name of the wavelet."""

    random_shift: bool = True
    """Apply random cyclic shifts in the wavelet thresholding."""

    cg_max_iterations: int = 10
    """Maximum number of conjugate gradient iterations per ADMM iteration."""

    cg_tolerance: float = 1e-6
    """Tolerance of the conjugate gradient residual."""

    absolute_tolerance: float = 1e-4
    """Absolute tolerance of the ADMM stopping criterion."""

    relative_tolerance: float = 1e-3
    """Relative tolerance of the ADMM stopping criterion."""

    scaling: bool = True
    """Normalize the k-space data with an estimated scaling factor."""

    seed: int | None = None
    """Seed for the random shifts. If None, the shifts are not reproducible."""

    def __post_init__(self) -> None:
        """Validate the settings.

        Raises
        ------
        ValueError
            If any setting is out of range.
        """
        if not self.eps > 0:
            raise ValueError(f'eps must be positive, got {self.eps}')
        if not self.l2_weight >= 0:
            raise ValueError(f'l2_weight must be non-negative, got {self.l2_weight}')
        if not self.rho > 0:
            raise ValueError(f'rho must be positive, got {self.rho}')
        if self.max_iterations < 1:
            raise ValueError(f'max_iterations must be at least 1, got {self.max_iterations}')
        if self.regularizer not in ('wavelet', 'tv'):
            raise ValueError(f"regularizer must be 'wavelet' or 'tv', got {self.regularizer!r}")
        block_sizes = (self.min_block_size,) if isinstance(self.min_block_size, int) else self.min_block_size
        if len(block_sizes) not in (1, 3) or any(b < 1 for b in block_sizes):
            raise ValueError(
                f'min_block_size must be one positive value or one per spatial dimension, got {self.min_block_size}'
            )
        if self.cg_max_iterations < 1:
            raise ValueError(f'cg_max_iterations must be at least 1, got {self.cg_max_iterations}')
        if self.cg_tolerance < 0 or self.absolute_tolerance < 0 or self.relative_tolerance < 0:
            raise ValueError('Tolerances must be non-negative.')
