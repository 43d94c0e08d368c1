"""Functionals with proximal mappings."""

from bpsense.operators.functionals.L1Norm import L1Norm
from bpsense.operators.functionals.L21Norm import L21Norm
from bpsense.operators.functionals.L2BallIndicator import L2BallIndicator
from bpsense.operators.functionals.WaveletL1Norm import WaveletL1Norm

__all__ = ["L1Norm", "L21Norm", "L2BallIndicator", "WaveletL1Norm"]
