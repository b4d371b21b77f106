import numpy as np
import pytest

from parameters import ArrayConfig
from ula import (SYNTHESIS, STEERING, array_factor, arrival_rotators,
                 manifold, steering_phase, steering_vector)


def test_steering_phase_formula(array):
    th = 25.0
    expected = np.sin(np.deg2rad(th)) * np.arange(8) * 0.5 / array.wavelength
    assert np.allclose(steering_phase(array, th), expected)
    assert steering_phase(array, th)[0] == 0

def test_steering_phase_vectorized(array):
    th = np.array([-30, 0, 45])
    P = steering_phase(array, th)
    assert P.shape == (8, 3)
    for i, t in enumerate(th):
        assert np.allclose(P[:, i], steering_phase(array, t))

def test_broadside_has_no_phase(array):
    assert np.allclose(steering_vector(array, 0), np.ones(8))
    assert np.allclose(arrival_rotators(array, 0), np.ones(8))

def test_rotators_unit_modulus(array):
    for th in (-80, -12.5, 33, 90):
        assert np.allclose(np.abs(arrival_rotators(array, th)), 1)
        assert np.allclose(np.abs(steering_vector(array, th)), 1)

def test_synthesis_and_steering_are_conjugate(array):
    for th in (-45, 10, 60):
        assert np.allclose(steering_vector(array, th), arrival_rotators(array, th).conj())
        # mirroring about broadside conjugates the steering vector
        assert np.allclose(steering_vector(array, -th), steering_vector(array, th).conj())

def test_normalized_steering_vector(array):
    a = steering_vector(array, 17, normalized=True)
    assert np.isclose(np.linalg.norm(a), 1)

def test_manifold_columns(array):
    th = [10, 40, 60]
    A = manifold(array, th)
    assert A.shape == (8, 3)
    for i, t in enumerate(th):
        assert np.allclose(A[:, i], steering_vector(array, t))
    assert np.allclose(manifold(array, th, sign=SYNTHESIS), A.conj())
    assert np.allclose(manifold(array, th, sign=STEERING), A)
    with pytest.raises(ValueError):
        manifold(array, th, sign=0)

def test_half_wavelength_phase_step():
    array = ArrayConfig(num_antennas=4, spacing=0.5, frequency=1, speed=1)
    # endfire arrival at half-wavelength spacing rotates pi per antenna
    assert np.allclose(steering_vector(array, 90), [1, -1, 1, -1])

def test_array_factor_peaks_at_broadside(array):
    th, AF = array_factor(array, n=181)
    assert th.shape == AF.shape == (181,)
    assert th[np.argmax(np.abs(AF))] == 0
    assert np.isclose(np.abs(AF).max(), 1)
