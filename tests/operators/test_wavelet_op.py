"""Tests for Wavelet Operator."""

import pytest
import pywt
import torch
from bpsense.operators import WaveletOp, wavelet_level

from tests import RandomGenerator, dotproduct_adjointness_test, linear_operator_unitary_test, operator_isometry_test


@pytest.mark.parametrize(
    ('im_shape', 'domain_shape', 'dim'),
    [
        ((16, 16, 1, 1, 2), (16,), (0,)),
        ((32, 16, 1, 1, 2), (32, 16), (0, 1)),
        ((16, 16, 16, 1, 1), (16, 16, 16), (0, 1, 2)),
        ((20, 1, 30, 1, 1), (20, 30), (0, 2)),
    ],
)
@pytest.mark.parametrize('wavelet_name', ['haar', 'db4'])
def test_wavelet_op_isometry(im_shape, domain_shape, dim, wavelet_name) -> None:
    """Forward followed by adjoint is the identity and the norm is preserved."""
    random_generator = RandomGenerator(seed=0)
    img = random_generator.complex64_tensor(size=im_shape)
    wavelet_op = WaveletOp(domain_shape=domain_shape, dim=dim, wavelet_name=wavelet_name)
    linear_operator_unitary_test(wavelet_op, img)
    operator_isometry_test(wavelet_op, img)


@pytest.mark.parametrize(
    ('im_shape', 'domain_shape', 'dim'),
    [
        ((16, 16, 1, 1, 2), (16,), (0,)),
        ((32, 16, 1, 1, 2), (32, 16), (0, 1)),
        ((16, 16, 16, 1, 1), (16, 16, 16), (0, 1, 2)),
    ],
)
def test_wavelet_op_adjointness(im_shape, domain_shape, dim) -> None:
    """Test adjointness of the wavelet operator."""
    random_generator = RandomGenerator(seed=1)
    img = random_generator.complex64_tensor(size=im_shape)
    wavelet_op = WaveletOp(domain_shape=domain_shape, dim=dim)
    (coefficients,) = wavelet_op(img)
    v = random_generator.complex64_tensor(size=coefficients.shape)
    dotproduct_adjointness_test(wavelet_op, img, v)


def test_wavelet_op_odd_size() -> None:
    """Odd sizes are padded internally, the adjoint returns the original size."""
    random_generator = RandomGenerator(seed=2)
    img = random_generator.complex64_tensor(size=(17, 22, 1, 1, 1))
    wavelet_op = WaveletOp(domain_shape=(17, 22), dim=(0, 1), wavelet_name='db2', level=2)
    (coefficients,) = wavelet_op(img)
    assert wavelet_op.adjoint(coefficients)[0].shape == img.shape
    linear_operator_unitary_test(wavelet_op, img)


def test_wavelet_op_complex_real_shape() -> None:
    """Complex and real data result in coefficients of the same shape."""
    random_generator = RandomGenerator(seed=3)
    img_complex = random_generator.complex64_tensor(size=(16, 24, 1, 1, 2))
    wavelet_op = WaveletOp(domain_shape=(16, 24), dim=(0, 1))
    (coefficients_complex,) = wavelet_op(img_complex)
    (coefficients_real,) = wavelet_op(img_complex.real)
    assert coefficients_complex.shape == coefficients_real.shape
    torch.testing.assert_close(coefficients_complex.real, coefficients_real)


def test_wavelet_op_level_zero_is_identity() -> None:
    """Without decomposition levels, the operator does nothing."""
    img = RandomGenerator(seed=4).complex64_tensor(size=(8, 8, 1, 1, 1))
    wavelet_op = WaveletOp(domain_shape=(8, 8), dim=(0, 1), level=0)
    assert wavelet_op(img)[0] is img
    assert wavelet_op.adjoint(img)[0] is img


def test_wavelet_op_coefficient_count() -> None:
    """The number of stacked coefficients matches the sum of the pywt coefficient sizes."""
    wavelet_op = WaveletOp(domain_shape=(32, 16), dim=(0, 1), wavelet_name='db4', level=1)
    img = torch.zeros(32, 16, 1, 1, 1)
    (coefficients,) = wavelet_op(img)
    expected_shapes = [c.shape for c in pywt.wavedec2(img[:, :, 0, 0, 0].numpy(), 'db4', mode='zero', level=1)[1]]
    n_approximation = expected_shapes[0][0] * expected_shapes[0][1]
    assert coefficients.shape == (n_approximation * 4, 1, 1, 1)


def test_wavelet_op_wrong_dim() -> None:
    """Wavelet only works for 1D, 2D and 3D data."""
    with pytest.raises(ValueError, match='Only 1D, 2D and 3D wavelet'):
        WaveletOp(domain_shape=(4, 4, 4, 4), dim=(0, 1, 2, 3))


def test_wavelet_op_mismatch_dim_domain_shape() -> None:
    """Dimensions and shapes need to be of same length."""
    with pytest.raises(ValueError, match='Number of wavelet dimensions'):
        WaveletOp(domain_shape=(10, 20), dim=(0,))


@pytest.mark.parametrize(
    ('domain_shape', 'min_block_size', 'expected'),
    [
        ((128, 128), 16, 3),
        ((128, 64), 16, 2),
        ((64, 8), 16, 0),
        ((256,), 16, 4),
        ((128, 64), (8, 16), 2),
        ((128, 64), (32, 4), 2),
    ],
)
def test_wavelet_level(domain_shape, min_block_size, expected) -> None:
    """Level from the minimal block size, limited by the signal length."""
    assert wavelet_level(domain_shape, min_block_size, 'haar') == expected


def test_wavelet_level_limited_by_filter_length() -> None:
    """Long filters limit the number of levels."""
    assert wavelet_level((64,), 1, 'db4') == pywt.dwt_max_level(64, pywt.Wavelet('db4').dec_len)


def test_wavelet_op_from_block_size() -> None:
    """Only dimensions with more than one entry are transformed."""
    wavelet_op = WaveletOp.from_block_size((64, 32, 1, 1, 2), min_block_size=16, wavelet_name='haar')
    assert wavelet_op.dim == (0, 1)
    assert wavelet_op.level == 1
    img = RandomGenerator(seed=5).complex64_tensor(size=(64, 32, 1, 1, 2))
    linear_operator_unitary_test(wavelet_op, img)


def test_wavelet_op_from_block_size_no_dimension() -> None:
    """A single voxel cannot be transformed."""
    with pytest.raises(ValueError, match='No dimension'):
        WaveletOp.from_block_size((1, 1, 1, 4, 1))
