"""
@file music.py
@brief MUSIC pseudospectrum scanner

Scans candidate arrival angles against the noise subspace of the array
covariance. Peaks of the pseudospectrum mark the source directions;
locating them is left to the consumer (see analysis.get_peaks).
"""
import logging
import warnings
from dataclasses import dataclass

import numpy as np

from parameters import NumericalDegeneracyWarning
from ula import manifold, STEERING

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MusicSpectrum:
    """MUSIC pseudospectrum over a scan grid

    @param angles Scanned angles in degrees, shape (n,)
    @param magnitude |1/(a^H Un Un^H a)| per angle, shape (n,)
    @param degenerate True where the denominator was clamped, shape (n,)
    """
    angles: np.ndarray
    magnitude: np.ndarray
    degenerate: np.ndarray

    def __post_init__(self):
        for name in ('angles', 'magnitude', 'degenerate'):
            a = np.array(getattr(self, name))
            a.flags.writeable = False
            object.__setattr__(self, name, a)
        if(not (self.angles.shape == self.magnitude.shape == self.degenerate.shape)):
            raise ValueError("Spectrum angles, magnitude and degenerate mask must share a shape")

    def __len__(self):
        return self.angles.size

    def __iter__(self):
        """Yield (angle, magnitude) pairs in scan order"""
        return zip(self.angles.tolist(), self.magnitude.tolist())

    def argmax_angle(self):
        """Angle of the spectrum maximum in degrees"""
        return self.angles[np.argmax(self.magnitude)]


def scan_grid(start=-90, stop=90, step=1):
    """Inclusive grid of scan angles

    @param[in] start First angle in degrees
    @param[in] stop Last angle in degrees (included when on the grid)
    @param[in] step Grid step in degrees

    @retval Angles in degrees - real valued ndarray
    """
    if(step <= 0):
        raise ValueError(f"Scan step must be positive, got {step}")
    n = int(np.floor((stop - start)/step + 1e-9)) + 1
    return start + step*np.arange(n)

def music_denominator(Un, A):
    """MUSIC cost a^H Un Un^H a for each steering vector

    Evaluated as the squared norm of the projection Un^H a, which is the
    same quantity and always real and non-negative.

    @param[in] Un Noise subspace eigenvectors (M, M-Nsignals)
    @param[in] A Steering vectors as columns (M, n)

    @retval Real valued ndarray (n,)
    """
    proj = Un.conj().T @ A
    return np.sum(np.abs(proj)**2, axis=0)

def music_spectrum(Un, array, angles=None, min_denominator=1e-12):
    """Compute the MUSIC pseudospectrum

    Angles where the denominator drops below min_denominator are clamped
    to it and flagged in the returned spectrum instead of producing
    infinite values.

    @param[in] Un Noise subspace eigenvectors (M, M-Nsignals)
    @param[in] array ArrayConfig
    @param[in] angles Scan angles in degrees (default -90..90, 1 degree step)
    @param[in] min_denominator Clamp level for vanishing denominators

    @retval MusicSpectrum
    """
    Un = np.asarray(Un)
    if(Un.ndim != 2 or Un.shape[0] != array.num_antennas):
        raise ValueError(
            f"Noise subspace shape {Un.shape} does not match {array.num_antennas} antennas")
    if(Un.shape[1] == 0):
        raise ValueError("Noise subspace is empty")
    th = scan_grid() if angles is None else np.atleast_1d(np.asarray(angles, dtype=float))

    A = manifold(array, th, sign=STEERING)
    denom = music_denominator(Un, A)

    degenerate = denom < min_denominator
    if(np.any(degenerate)):
        bad = th[degenerate]
        logger.warning("MUSIC denominator below %g at %d angle(s): %s",
                       min_denominator, bad.size, np.array2string(bad))
        warnings.warn(f"MUSIC denominator clamped at angles {bad.tolist()}",
                      NumericalDegeneracyWarning, stacklevel=2)
        denom = np.maximum(denom, min_denominator)

    Py = np.abs(1/denom)
    return MusicSpectrum(angles=th, magnitude=Py, degenerate=degenerate)
