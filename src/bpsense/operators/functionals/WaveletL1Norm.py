"""L1 norm of wavelet coefficients."""

from collections.abc import Sequence

import torch

from bpsense.operators.Functional import ProximableFunctional
from bpsense.operators.functionals.L1Norm import L1Norm
from bpsense.operators.WaveletOp import WaveletOp


class WaveletL1Norm(ProximableFunctional):
    r"""L1 norm of the wavelet coefficients of an image.

    :math:`f(x) = \|W x\|_1`.

    The proximal mapping is approximated by soft thresholding in the wavelet domain,
    :math:`W^H \mathrm{soft}(W x, \sigma)`. To avoid blocking artifacts from the fixed grid of the
    wavelet decomposition, the image can be cyclically shifted by a random amount before the transform and
    shifted back afterwards. The shift is drawn anew on each call of `prox`.
    """

    def __init__(
        self,
        wavelet: WaveletOp,
        weight: float = 1.0,
        random_shift: bool = True,
        seed: int | None = None,
    ) -> None:
        """Initialize the wavelet L1 norm.

        Parameters
        ----------
        wavelet
            the wavelet transform
        weight
            weight of the L1 norm
        random_shift
            apply a random cyclic shift in each prox evaluation
        seed
            seed of the random generator for the shifts. If None, a non-deterministic seed is used.
        """
        super().__init__()
        self.wavelet = wavelet
        self.l1 = L1Norm(weight=weight)
        self.random_shift = random_shift
        self.generator = torch.Generator()
        if seed is None:
            self.generator.seed()
        else:
            self.generator.manual_seed(seed)

    def draw_shift(self) -> tuple[int, ...]:
        """Draw a random cyclic shift for each wavelet dimension.

        Shifts are within the size of the coarsest scale blocks, i.e. ``[0, 2**level)``.
        """
        if not self.random_shift or self.wavelet.level == 0:
            return (0,) * len(self.wavelet.dim)
        shift = torch.randint(0, 2**self.wavelet.level, (len(self.wavelet.dim),), generator=self.generator)
        return tuple(shift.tolist())

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Apply forward of WaveletL1Norm, without shift.

        Note: Do not use. Instead, call the instance of the Operator as operator(x)"""
        return self.l1(*self.wavelet(x))

    def prox(
        self, x: torch.Tensor, sigma: torch.Tensor | float = 1.0, shift: Sequence[int] | None = None
    ) -> tuple[torch.Tensor,]:
        """Soft thresholding of the (shifted) wavelet coefficients.

        Parameters
        ----------
        x
            input image
        sigma
            scaling factor of the threshold
        shift
            cyclic shift along the wavelet dimensions. If None, a new shift is drawn
            (or no shift is used if random shifts are disabled).

        Returns
        -------
            thresholded image
        """
        if shift is None:
            shift = self.draw_shift()
        dim = self.wavelet.dim
        shifted = torch.roll(x, shifts=tuple(shift), dims=dim)
        (coefficients,) = self.wavelet(shifted)
        (coefficients,) = self.l1.prox(coefficients, sigma)
        (shifted,) = self.wavelet.adjoint(coefficients)
        return (torch.roll(shifted, shifts=tuple(-s for s in shift), dims=dim),)
