from bpsense._version import __version__
from bpsense import algorithms, data, operators, utils
from bpsense.algorithms.reconstruction import BPSenseConfig, BPSenseReconstruction, BPSenseResult, bpsense

__all__ = [
    "BPSenseConfig",
    "BPSenseReconstruction",
    "BPSenseResult",
    "__version__",
    "algorithms",
    "bpsense",
    "data",
    "operators",
    "utils"
]
