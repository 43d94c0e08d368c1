"""Array layout and loading and saving of data."""

from bpsense.data import dims
from bpsense.data.cfl import read_cfl, write_cfl
from bpsense.data.dims import (
    COIL_DIM,
    MAPS_DIM,
    N_DIMS,
    PHS1_DIM,
    PHS2_DIM,
    READ_DIM,
    SPATIAL_DIMS,
    as_array,
    check_compatible,
    select_dims,
)

__all__ = [
    "COIL_DIM",
    "MAPS_DIM",
    "N_DIMS",
    "PHS1_DIM",
    "PHS2_DIM",
    "READ_DIM",
    "SPATIAL_DIMS",
    "as_array",
    "check_compatible",
    "dims",
    "read_cfl",
    "select_dims",
    "write_cfl",
]
