"""
@file ula.py
@brief Uniform linear array geometry

Steering phases and rotators for plane waves arriving at a ULA.

Two sign conventions are used on purpose. Arriving wavefronts are
synthesized with exp(+j*2*pi*phase) and candidate directions are scanned
with exp(-j*2*pi*phase). Snapshots are stored as rows, so the array
covariance S^H S has its signal subspace spanned by the conjugate of the
arriving wavefront, which is exactly the scanning steering vector.
"""
import numpy as np

SYNTHESIS = +1
STEERING = -1


def steering_phase(array, angle):
    """Per-antenna phase delay for a plane wave

    @param[in] array ArrayConfig
    @param[in] angle Angle of arrival in degrees (scalar or array-like of shape (K,))

    @retval Phase in cycles, shape (M,) for a scalar angle or (M,K) otherwise
    """
    angle = np.asarray(angle, dtype=float)
    k = np.arange(array.num_antennas)
    if(angle.ndim == 0):
        return np.sin(np.deg2rad(angle)) * k * array.spacing_wavelengths
    k = k.reshape(-1, 1)
    return k * np.sin(np.deg2rad(angle.ravel())) * array.spacing_wavelengths

def manifold(array, angles, sign=STEERING):
    """Get ULA array manifold (A matrix)

    @param[in] array ArrayConfig
    @param[in] angles Angles of arrival in degrees, shape (K,)
    @param[in] sign SYNTHESIS (+1) or STEERING (-1) rotation direction

    @retval Complex valued ndarray (M,K), one column per angle
    """
    if(sign not in (SYNTHESIS, STEERING)):
        raise ValueError(f"sign must be +1 or -1, got {sign}")
    phase = steering_phase(array, np.atleast_1d(angles))
    return np.exp(sign*1j*2*np.pi*phase)

def arrival_rotators(array, angle):
    """Phase rotators applied to a transmitted wavefront at each antenna

    @param[in] array ArrayConfig
    @param[in] angle Angle of arrival in degrees

    @retval Complex valued ndarray (M,)
    """
    return np.exp(1j*2*np.pi*steering_phase(array, float(angle)))

def steering_vector(array, angle, normalized=False):
    """Receive steering vector for a candidate direction

    @param[in] array ArrayConfig
    @param[in] angle Steering angle in degrees
    @param[in] normalized Scale to unit norm (default off, unit-modulus entries)

    @retval Complex valued ndarray (M,)
    """
    a = np.exp(-1j*2*np.pi*steering_phase(array, float(angle)))
    if(normalized):
        a = a / np.sqrt(array.num_antennas)
    return a

def array_factor(array, n=181):
    """Get ULA array factor

    @param[in] array ArrayConfig
    @param[in] n Number of points in AF

    @retval Angles for Array Factor in degrees - real valued ndarray (n,)
    @retval Array factor - complex valued ndarray (n,)
    """
    th = np.linspace(-90, 90, n)
    return th, (1/array.num_antennas)*np.sum(manifold(array, th), axis=0)
