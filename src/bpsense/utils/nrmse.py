"""Normalized root mean squared error."""

import torch


def nrmse(image: torch.Tensor, reference: torch.Tensor) -> float:
    r"""Normalized root mean squared error.

    :math:`\|x - x_{ref}\|_2 / \|x_{ref}\|_2`

    Parameters
    ----------
    image
        image to assess
    reference
        reference image, broadcastable to the shape of image

    Returns
    -------
        the error, infinity if the reference is zero and the image is not
    """
    error = torch.linalg.vector_norm(image - reference)
    norm = torch.linalg.vector_norm(reference)
    if norm == 0:
        return 0.0 if error == 0 else float('inf')
    return (error / norm).item()
