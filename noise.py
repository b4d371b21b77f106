"""
@file noise.py
@brief Noise generator functions

Circularly-symmetric complex Gaussian noise for the array snapshots.
"""
import numpy as np


def complex_gaussian(shape, rng, power=1):
    """Generates circular complex Gaussian noise samples

    Real and imaginary parts are independent with variance power/2 each,
    so the total power of every sample is `power`.

    @param[in] shape Output shape (e.g. (Nsnapshots, M))
    @param[in] rng numpy.random.Generator
    @param[in] power Total noise power per sample (default 1)

    @retval Complex valued ndarray of the requested shape
    """
    if(power < 0):
        raise ValueError(f"Noise power must be non-negative, got {power}")
    if(power == 0):
        return np.zeros(shape, dtype=complex)
    return np.sqrt(power/2) * (rng.standard_normal(shape) + 1j*rng.standard_normal(shape))
