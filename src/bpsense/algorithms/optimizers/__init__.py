"""Optimizers."""

from bpsense.algorithms.optimizers.OptimizerStatus import OptimizerStatus
from bpsense.algorithms.optimizers.cg import CGStatus, cg
from bpsense.algorithms.optimizers.admm import ADMMStatus, admm
__all__ = ["ADMMStatus", "CGStatus", "OptimizerStatus", "admm", "cg"]
