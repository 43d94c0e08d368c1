"""Tests for reading and writing cfl arrays."""

import numpy as np
import pytest
import torch
from bpsense.data import read_cfl, write_cfl

from tests import RandomGenerator


def test_cfl_roundtrip(tmp_path) -> None:
    """Written arrays are read back unchanged."""
    array = RandomGenerator(seed=0).complex64_tensor(size=(6, 5, 4, 3, 2))
    write_cfl(tmp_path / 'array', array)
    assert (tmp_path / 'array.cfl').exists()
    assert (tmp_path / 'array.hdr').read_text() == '# Dimensions\n6 5 4 3 2\n'
    torch.testing.assert_close(read_cfl(tmp_path / 'array'), array)


def test_cfl_column_major(tmp_path) -> None:
    """The first dimension varies fastest in the data file."""
    array = torch.arange(6).to(torch.complex64).reshape(3, 2)
    write_cfl(tmp_path / 'array', array)
    data = np.fromfile(tmp_path / 'array.cfl', dtype=np.complex64)
    np.testing.assert_array_equal(data, np.array([0, 2, 4, 1, 3, 5], dtype=np.complex64))


def test_cfl_suffix(tmp_path) -> None:
    """The name can be given with or without suffix."""
    array = RandomGenerator(seed=1).complex64_tensor(size=(4, 4, 1, 2, 1))
    write_cfl(str(tmp_path / 'array.cfl'), array)
    torch.testing.assert_close(read_cfl(tmp_path / 'array.hdr'), array)


def test_cfl_fewer_dimensions(tmp_path) -> None:
    """Arrays with fewer dimensions are padded with singleton dimensions."""
    write_cfl(tmp_path / 'array', torch.ones(4, 3))
    assert (tmp_path / 'array.hdr').read_text() == '# Dimensions\n4 3 1 1 1\n'
    array = read_cfl(tmp_path / 'array')
    assert array.shape == (4, 3, 1, 1, 1)
    assert array.dtype == torch.complex64


def test_cfl_trailing_singleton_dimensions(tmp_path) -> None:
    """Headers with additional singleton dimensions are accepted."""
    data = np.arange(8, dtype=np.complex64)
    data.tofile(tmp_path / 'array.cfl')
    (tmp_path / 'array.hdr').write_text('# Dimensions\n2 2 1 2 1 1 1 1 1 1 1 1 1 1 1 1 \n# Command\nbart\n')
    array = read_cfl(tmp_path / 'array')
    assert array.shape == (2, 2, 1, 2, 1)
    assert array[1, 0, 0, 1, 0] == 5


def test_cfl_additional_dimensions(tmp_path) -> None:
    """Non-singleton dimensions beyond the maps dimension are rejected."""
    np.zeros(4, dtype=np.complex64).tofile(tmp_path / 'array.cfl')
    (tmp_path / 'array.hdr').write_text('# Dimensions\n1 1 1 1 1 4\n')
    with pytest.raises(ValueError, match='dimensions'):
        read_cfl(tmp_path / 'array')


def test_cfl_malformed_header(tmp_path) -> None:
    """A header without dimensions is rejected."""
    np.zeros(4, dtype=np.complex64).tofile(tmp_path / 'array.cfl')
    (tmp_path / 'array.hdr').write_text('4 1 1 1 1\n')
    with pytest.raises(ValueError, match='Dimensions'):
        read_cfl(tmp_path / 'array')


def test_cfl_wrong_size(tmp_path) -> None:
    """The size of the data file has to match the header."""
    np.zeros(3, dtype=np.complex64).tofile(tmp_path / 'array.cfl')
    (tmp_path / 'array.hdr').write_text('# Dimensions\n4 1 1 1 1\n')
    with pytest.raises(ValueError, match='holds 3 values'):
        read_cfl(tmp_path / 'array')


def test_cfl_missing_file(tmp_path) -> None:
    """Missing files raise an error."""
    with pytest.raises(FileNotFoundError):
        read_cfl(tmp_path / 'missing')
