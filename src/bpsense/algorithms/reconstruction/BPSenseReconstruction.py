"""Basis pursuit denoising SENSE reconstruction."""

from __future__ import annotations

import warnings
from collections.abc import Callable
from dataclasses import dataclass, field

import torch
from tqdm import tqdm

from bpsense.algorithms.estimate_pattern import estimate_pattern
from bpsense.algorithms.estimate_scaling import estimate_scaling
from bpsense.algorithms.optimizers.admm import ADMMStatus, StopReason, admm
from bpsense.algorithms.reconstruction.BPSenseConfig import BPSenseConfig
from bpsense.data.dims import (
    COIL_DIM,
    MAPS_DIM,
    SPATIAL_DIMS,
    active_dims,
    as_array,
    check_compatible,
    select_dims,
)
from bpsense.operators import EncodingOp, FiniteDifferenceOp, IdentityOp, LinearOperator, ProximableFunctional
from bpsense.operators import RealPartOp, WaveletOp
from bpsense.operators.functionals import L2BallIndicator, L21Norm, WaveletL1Norm
from bpsense.utils.backend import Backend
from bpsense.utils.fftmod import fftmod, ifftmod
from bpsense.utils.nrmse import nrmse
from bpsense.utils.stacklevel import external_stacklevel


@dataclass(frozen=True)
class SamplingStatistics:
    """Size and undersampling of an acquisition."""

    n_voxels: int
    """Number of k-space locations of the full grid."""

    n_samples: float
    """Number of acquired locations, i.e. the squared L2 norm of the pattern."""

    @property
    def acceleration(self) -> float:
        """Undersampling factor, infinity for an empty pattern."""
        return self.n_voxels / self.n_samples if self.n_samples > 0 else float('inf')

    @classmethod
    def from_pattern(cls, pattern: torch.Tensor) -> SamplingStatistics:
        """Calculate the statistics of a sampling pattern ``(x y z 1 1)``."""
        return cls(n_voxels=pattern.numel(), n_samples=pattern.square().sum().item())


@dataclass
class BPSenseResult:
    """Result of a basis pursuit SENSE reconstruction."""

    image: torch.Tensor
    """Reconstructed image ``(x y z 1 maps)`` in units of the normalized k-space."""

    scaling: float
    """Scaling factor the k-space data was divided by, 1.0 if no scaling was applied."""

    converged: bool
    """Whether the stopping criterion was met."""

    iterations: int
    """Number of ADMM iterations performed."""

    primal_residual: float
    """Final primal residual."""

    dual_residual: float
    """Final dual residual."""

    stop_reason: StopReason
    """Why the iterations stopped."""

    statistics: SamplingStatistics
    """Size and undersampling of the acquisition."""

    cg_divergences: int = 0
    """Number of x-updates in which the inner conjugate gradient solver diverged."""

    nrmse: list[float] = field(default_factory=list)
    """Normalized RMS error to the (scaled) reference image after each iteration, empty without reference."""


class BPSenseReconstruction(torch.nn.Module):
    r"""Basis pursuit denoising SENSE reconstruction.

    Solves

    .. math::

        \min_x \|T x\|_1 + \frac{\lambda}{2}\|x\|_2^2 \quad \text{s.t.} \quad \|P F S x - y\|_2 \leq \epsilon

    with the sensitivity maps :math:`S`, the Fourier transform :math:`F`, the sampling pattern :math:`P`
    and a sparsifying transform :math:`T` (wavelets or finite differences) using `admm`.

    With multiple sets of maps (ESPIRiT), one image per set is reconstructed.
    The k-space data is normalized with an estimated scaling factor, and the image is returned in the
    normalized units. Thus, the result does not depend on the overall scale of the data.
    """

    def __init__(
        self,
        config: BPSenseConfig | None = None,
        backend: Backend | None = None,
        progress: bool = False,
    ) -> None:
        """Initialize a BPSenseReconstruction.

        Parameters
        ----------
        config
            settings of the reconstruction. If None, the defaults are used.
        backend
            compute device. If None, the CPU is used.
        progress
            display a progress bar of the ADMM iterations
        """
        super().__init__()
        self.config = config if config is not None else BPSenseConfig()
        self.backend = backend if backend is not None else Backend()
        self.progress = progress

    def __call__(
        self,
        kspace: torch.Tensor,
        maps: torch.Tensor,
        pattern: torch.Tensor | None = None,
        truth: torch.Tensor | None = None,
        callback: Callable[[ADMMStatus], bool | None] | None = None,
    ) -> BPSenseResult:
        """Apply the reconstruction."""
        return super().__call__(kspace, maps, pattern, truth, callback)

    def forward(
        self,
        kspace: torch.Tensor,
        maps: torch.Tensor,
        pattern: torch.Tensor | None = None,
        truth: torch.Tensor | None = None,
        callback: Callable[[ADMMStatus], bool | None] | None = None,
    ) -> BPSenseResult:
        """Reconstruct an image.

        Parameters
        ----------
        kspace
            multi-coil k-space ``(x y z coils 1)``, centered, zero where not acquired
        maps
            sensitivity maps ``(x y z coils maps)``
        pattern
            sampling pattern, broadcastable to ``(x y z 1 1)``. If None, it is estimated from the data.
        truth
            reference image ``(x y z 1 maps)``. If given, the error to the reference divided by the
            scaling factor is recorded after each iteration.
        callback
            called after each ADMM iteration, see `admm`. Returning False stops the reconstruction.

        Returns
        -------
            the reconstructed image and information about the optimization

        Raises
        ------
        ValueError
            If the shapes of the inputs do not match, the pattern is invalid or no sparsifying transform
            can be applied.
        """
        config = self.config
        kspace = as_array(kspace)
        maps = as_array(maps)
        check_compatible(kspace.shape, maps.shape)

        spatial_shape = select_dims(kspace.shape, SPATIAL_DIMS)
        if pattern is None:
            pattern = estimate_pattern(kspace)
        else:
            pattern = self._check_pattern(as_array(pattern), spatial_shape)
        statistics = SamplingStatistics.from_pattern(pattern)

        kspace = self.backend.to_device(kspace).to(torch.complex64)
        maps = self.backend.to_device(maps).to(torch.complex64)
        pattern = self.backend.to_device(pattern).to(torch.float32)

        scaling = estimate_scaling(kspace) if config.scaling else 1.0
        if scaling != 0:
            kspace = kspace / scaling
        else:
            scaling = 1.0

        # centered FFT = fftmod @ FFT @ fftmod, so y = P Fc S x becomes ifftmod(y) = P F fftmod(S) x
        kspace = ifftmod(kspace)
        maps = fftmod(maps)

        encoding_op = EncodingOp(maps, pattern)
        data_consistency = L2BallIndicator(target=kspace * pattern, radius=config.eps)
        sparsity_op, sparsity = self._sparsifying_transform(encoding_op.image_shape)

        constraints: list[tuple[LinearOperator, ProximableFunctional]] = [
            (sparsity_op, sparsity),
            (encoding_op, data_consistency),
        ]
        projection: RealPartOp | None = None
        if config.real_value_constraint:
            projection = RealPartOp()
            constraints = [(g @ projection, f) for g, f in constraints]

        reference: torch.Tensor | None = None
        if truth is not None:
            reference = self.backend.to_device(as_array(truth)).to(torch.complex64) / scaling
            if reference.shape != encoding_op.image_shape:
                raise ValueError(
                    f'Reference image {tuple(reference.shape)} does not match the image {encoding_op.image_shape}'
                )
        errors: list[float] = []

        with tqdm(total=config.max_iterations, desc='ADMM', disable=not self.progress) as progressbar:

            def admm_callback(status: ADMMStatus) -> bool | None:
                if reference is not None:
                    errors.append(nrmse(status['solution'][0], reference))
                progressbar.update(1)
                progressbar.set_postfix(r=f"{status['primal_residual']:.2e}", s=f"{status['dual_residual']:.2e}")
                return callback(status) if callback is not None else None

            initial_value = torch.zeros(encoding_op.image_shape, dtype=torch.complex64, device=kspace.device)
            image, status = admm(
                constraints,
                initial_value,
                rho=config.rho,
                l2_weight=config.l2_weight,
                max_iterations=config.max_iterations,
                absolute_tolerance=config.absolute_tolerance,
                relative_tolerance=config.relative_tolerance,
                cg_max_iterations=config.cg_max_iterations,
                cg_tolerance=config.cg_tolerance,
                projection=projection,
                callback=admm_callback,
            )

        stop_reason = status['stop_reason'] or 'max_iterations_reached'
        if stop_reason == 'max_iterations_reached':
            warnings.warn(
                f'ADMM did not converge within {config.max_iterations} iterations: '
                f"primal residual {status['primal_residual']:.3g} (tolerance {status['primal_tolerance']:.3g}), "
                f"dual residual {status['dual_residual']:.3g} (tolerance {status['dual_tolerance']:.3g})",
                RuntimeWarning,
                stacklevel=external_stacklevel(),
            )

        return BPSenseResult(
            image=image,
            scaling=scaling,
            converged=stop_reason == 'converged',
            iterations=status['iteration_number'] + 1,
            primal_residual=status['primal_residual'],
            dual_residual=status['dual_residual'],
            stop_reason=stop_reason,
            statistics=statistics,
            cg_divergences=status['cg_divergences'],
            nrmse=errors,
        )

    @staticmethod
    def _check_pattern(pattern: torch.Tensor, spatial_shape: tuple[int, ...]) -> torch.Tensor:
        """Validate a supplied pattern and expand it to the spatial shape of the data."""
        if pattern.is_complex():
            raise ValueError('The sampling pattern must be real-valued.')
        if pattern.shape[COIL_DIM] != 1 or pattern.shape[MAPS_DIM] != 1:
            raise ValueError(f'The sampling pattern must not vary along coils or maps, got {tuple(pattern.shape)}')
        if any(p not in (1, n) for p, n in zip(pattern.shape, spatial_shape, strict=True)):
            raise ValueError(
                f'Dimensions of the pattern {tuple(pattern.shape)} do not match the k-space data {spatial_shape}'
            )
        if (pattern < 0).any():
            raise ValueError('The sampling pattern must be non-negative.')
        return pattern.expand(spatial_shape)

    def _sparsifying_transform(self, shape: tuple[int, ...]) -> tuple[LinearOperator, ProximableFunctional]:
        """Sparsifying operator and the functional applied to its output."""
        config = self.config
        if config.regularizer == 'tv':
            dim = active_dims(shape, SPATIAL_DIMS)
            if not dim:
                raise ValueError(f'Total variation requires a spatial dimension with more than one entry, got {shape}')
            return FiniteDifferenceOp(dim=dim, mode='forward', pad_mode='circular'), L21Norm(group_dim=0)
        wavelet_op = WaveletOp.from_block_size(shape, config.min_block_size, config.wavelet_name, SPATIAL_DIMS)
        wavelet_l1 = WaveletL1Norm(wavelet_op, random_shift=config.random_shift, seed=config.seed)
        return IdentityOp(), wavelet_l1


def bpsense(
    kspace: torch.Tensor,
    maps: torch.Tensor,
    pattern: torch.Tensor | None = None,
    *,
    config: BPSenseConfig | None = None,
    backend: Backend | None = None,
    truth: torch.Tensor | None = None,
    progress: bool = False,
    callback: Callable[[ADMMStatus], bool | None] | None = None,
) -> BPSenseResult:
    """Basis pursuit denoising SENSE reconstruction.

    Convenience function, see `BPSenseReconstruction`.

    Parameters
    ----------
    kspace
        multi-coil k-space ``(x y z coils 1)``
    maps
        sensitivity maps ``(x y z coils maps)``
    pattern
        sampling pattern. If None, it is estimated from the data.
    config
        settings of the reconstruction
    backend
        compute device
    truth
        reference image for the error history
    progress
        display a progress bar
    callback
        called after each ADMM iteration

    Returns
    -------
        the reconstructed image and information about the optimization
    """
    reconstruction = BPSenseReconstruction(config, backend, progress)
    return reconstruction(kspace, maps, pattern, truth, callback)
