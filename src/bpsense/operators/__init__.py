"""Linear operators and functionals."""

from bpsense.operators.Operator import Operator
from bpsense.operators.LinearOperator import LinearOperator
from bpsense.operators.Functional import (
    ElementaryProximableFunctional,
    Functional,
    ProximableFunctional,
    ScaledProximableFunctional,
)
from bpsense.operators.IdentityOp import IdentityOp
from bpsense.operators.RealPartOp import RealPartOp
from bpsense.operators.SamplingOp import SamplingOp
from bpsense.operators.SensitivityOp import SensitivityOp
from bpsense.operators.FastFourierOp import FastFourierOp
from bpsense.operators.EncodingOp import EncodingOp
from bpsense.operators.FiniteDifferenceOp import FiniteDifferenceOp
from bpsense.operators.WaveletOp import WaveletOp, wavelet_level
from bpsense.operators import functionals

__all__ = [
    "ElementaryProximableFunctional",
    "EncodingOp",
    "FastFourierOp",
    "FiniteDifferenceOp",
    "Functional",
    "IdentityOp",
    "LinearOperator",
    "Operator",
    "ProximableFunctional",
    "RealPartOp",
    "SamplingOp",
    "ScaledProximableFunctional",
    "SensitivityOp",
    "WaveletOp",
    "functionals",
    "wavelet_level",
]
