"""Algorithms for reconstructions, optimization, sampling pattern and scaling estimation."""

from bpsense.algorithms import optimizers, reconstruction
from bpsense.algorithms.estimate_pattern import estimate_pattern
from bpsense.algorithms.estimate_scaling import estimate_scaling
__all__ = ["estimate_pattern", "estimate_scaling", "optimizers", "reconstruction"]
