"""Stack level for warnings issued deep inside the package."""

import os
import sys

import torch

import bpsense

_INTERNAL_DIRECTORIES = tuple(
    os.path.dirname(module.__file__) + os.sep for module in (bpsense, torch) if module.__file__ is not None
)


def external_stacklevel() -> int:
    """Stack level of the first caller outside of bpsense and torch.

    Passed as ``stacklevel`` to `warnings.warn`, the warning is attributed to the user's code, even if it is
    issued in the ``forward`` of a module, i.e. below the call machinery of `torch.nn.Module`.

    Returns
    -------
        stack level relative to the function calling `external_stacklevel`
    """
    frame = sys._getframe(1)
    level = 1
    while frame.f_back is not None and frame.f_code.co_filename.startswith(_INTERNAL_DIRECTORIES):
        frame = frame.f_back
        level += 1
    return level
