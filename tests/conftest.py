"""PyTest fixtures for the bpsense package."""

import pytest
import torch
from bpsense.operators import FastFourierOp

from tests import RandomGenerator


def ellipse_phantom(n_x: int, n_y: int) -> torch.Tensor:
    """Piecewise constant image of three ellipses with shape ``(n_x n_y 1 1 1)``."""
    x = torch.linspace(-1, 1, n_x)[:, None]
    y = torch.linspace(-1, 1, n_y)[None, :]
    image = torch.zeros(n_x, n_y)
    for center_x, center_y, radius_x, radius_y, intensity in (
        (0.0, 0.0, 0.7, 0.9, 1.0),
        (0.2, -0.2, 0.2, 0.3, -0.5),
        (-0.3, 0.3, 0.15, 0.15, 0.5),
    ):
        inside = ((x - center_x) / radius_x) ** 2 + ((y - center_y) / radius_y) ** 2 <= 1
        image = image + intensity * inside
    return image.to(torch.complex64).reshape(n_x, n_y, 1, 1, 1)


def smooth_coil_maps(n_x: int, n_y: int, n_coils: int) -> torch.Tensor:
    """Smooth coil sensitivities with shape ``(n_x n_y 1 coils 1)``, normalized to a root-sum-of-squares of one."""
    x = torch.linspace(-1, 1, n_x)[:, None]
    y = torch.linspace(-1, 1, n_y)[None, :]
    maps = []
    for coil in range(n_coils):
        angle = 2 * torch.pi * coil / n_coils
        position_x, position_y = 1.5 * torch.cos(torch.tensor(angle)), 1.5 * torch.sin(torch.tensor(angle))
        magnitude = torch.exp(-((x - position_x) ** 2 + (y - position_y) ** 2) / 2)
        phase = angle + 0.5 * (x + y)
        maps.append(magnitude * torch.exp(1j * phase))
    maps_tensor = torch.stack(maps, dim=-1).to(torch.complex64)
    maps_tensor = maps_tensor / maps_tensor.abs().square().sum(dim=-1, keepdim=True).sqrt()
    return maps_tensor.reshape(n_x, n_y, 1, n_coils, 1)


def centered_kspace(image: torch.Tensor, maps: torch.Tensor) -> torch.Tensor:
    """Fully sampled multi-coil k-space of an image with the k-space center in the center of the array."""
    (kspace,) = FastFourierOp(dim=(0, 1, 2), centered=True)((maps * image).sum(dim=-1, keepdim=True))
    return kspace


@pytest.fixture
def phantom() -> torch.Tensor:
    """Image of shape (32 32 1 1 1)."""
    return ellipse_phantom(32, 32)


@pytest.fixture
def coil_maps() -> torch.Tensor:
    """Sensitivity maps of shape (32 32 1 4 1)."""
    return smooth_coil_maps(32, 32, 4)


@pytest.fixture
def undersampling_pattern() -> torch.Tensor:
    """Random phase encoding lines with a fully sampled center, shape (32 32 1 1 1)."""
    lines = RandomGenerator(seed=0).bool_tensor(32, probability=0.4)
    lines[12:20] = True
    return lines.to(torch.float32)[None, :].expand(32, 32).reshape(32, 32, 1, 1, 1)
