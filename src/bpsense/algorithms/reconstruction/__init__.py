"""Pre-built reconstruction algorithms."""

from bpsense.algorithms.reconstruction.BPSenseConfig import BPSenseConfig
from bpsense.algorithms.reconstruction.BPSenseReconstruction import (
    BPSenseReconstruction,
    BPSenseResult,
    SamplingStatistics,
    bpsense,
)
__all__ = ["BPSenseConfig", "BPSenseReconstruction", "BPSenseResult", "SamplingStatistics", "bpsense"]
