"""Utilities for reconstructions."""

from bpsense.utils.backend import Backend, BackendUnavailableError
from bpsense.utils.fftmod import fftmod, ifftmod
from bpsense.utils.nrmse import nrmse
from bpsense.utils.stacklevel import external_stacklevel

__all__ = ["Backend", "BackendUnavailableError", "external_stacklevel", "fftmod", "ifftmod", "nrmse"]
