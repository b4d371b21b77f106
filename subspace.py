"""
@file subspace.py
@brief Covariance and signal/noise subspace estimation
"""
import logging
from dataclasses import dataclass

import numpy as np
import scipy.linalg as sla

from parameters import ConfigurationError, EigendecompositionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Subspaces:
    """Eigendecomposition of an array covariance split into subspaces

    @param eigenvalues Real eigenvalues sorted ascending, shape (M,)
    @param eigenvectors Orthonormal eigenvectors as columns, same order, shape (M,M)
    @param num_sources Number of signal eigenvectors (largest eigenvalues)
    """
    eigenvalues: np.ndarray
    eigenvectors: np.ndarray
    num_sources: int

    @property
    def noise(self):
        """Noise subspace eigenvectors (M, M-Nsources)"""
        return self.eigenvectors[:, :self.eigenvectors.shape[1]-self.num_sources]

    @property
    def signal(self):
        """Signal subspace eigenvectors (M, Nsources)"""
        return self.eigenvectors[:, self.eigenvectors.shape[1]-self.num_sources:]

    def project(self, v):
        """Split a vector into its signal and noise subspace components

        @param[in] v Complex vector of shape (M,)

        @retval Signal subspace component (M,)
        @retval Noise subspace component (M,)
        """
        v = np.asarray(v)
        Es, En = self.signal, self.noise
        return Es @ (Es.conj().T @ v), En @ (En.conj().T @ v)


def sample_covariance(y, normalize=False):
    """Compute the array covariance from snapshots

    The reference computation is unnormalized (S^H S). Dividing by the
    number of snapshots scales every eigenvalue equally and leaves the
    eigenvectors and their order unchanged.

    @param[in] y Snapshots of shape (# samples, # antennas)
    @param[in] normalize Divide by the number of snapshots (default off)

    @retval Hermitian covariance matrix (M,M)
    """
    y = np.asarray(y)
    if(y.ndim != 2):
        raise ValueError(f"Snapshots must be a 2D array, got shape {y.shape}")
    Ryy = y.conj().T @ y
    if(normalize):
        Ryy = Ryy / y.shape[0]
    return Ryy

def eigendecompose(R, atol=1e-8):
    """Eigendecomposition of a Hermitian matrix, ascending eigenvalue order

    @param[in] R Hermitian matrix (M,M)
    @param[in] atol Absolute tolerance (relative to max |R|) for the Hermitian check

    @retval Eigenvalues - real valued ndarray (M,), ascending
    @retval Eigenvectors - complex valued ndarray (M,M), orthonormal columns
    """
    R = np.asarray(R)
    # check matrix is square
    if((R.ndim != 2) or (R.shape[0] != R.shape[1])):
        raise ValueError(f"Input matrix R is not square: shape {R.shape}")
    if(not np.all(np.isfinite(R))):
        raise EigendecompositionError("Covariance matrix has non-finite entries", matrix=R)
    scale = max(np.max(np.abs(R)), 1.0) if R.size else 1.0
    if(not np.allclose(R, R.conj().T, rtol=0, atol=atol*scale)):
        raise ValueError("Input matrix R is not Hermitian")

    try:
        D, U = sla.eigh(R)
    except (np.linalg.LinAlgError, ValueError) as e:
        raise EigendecompositionError(
            f"Eigendecomposition failed for {R.shape} matrix: {e}", matrix=R) from e

    # eigh returns real eigenvalues, sort explicitly to pin the order
    D = np.real(D)
    idx = np.argsort(D, kind='stable')
    return D[idx], U[:, idx]

def split_subspaces(Ryy, num_sources):
    """Eigendecompose a covariance and split it into signal/noise subspaces

    @param[in] Ryy Hermitian covariance matrix (M,M)
    @param[in] num_sources Presumed number of signals

    @retval Subspaces
    """
    M = np.shape(Ryy)[-1]
    if(num_sources >= M):
        raise ConfigurationError(
            f"{num_sources} sources leave no noise subspace with {M} antennas")
    if(num_sources < 0):
        raise ConfigurationError(f"Number of sources must be >= 0, got {num_sources}")

    D, U = eigendecompose(Ryy)
    logger.debug("Covariance eigenvalues: %s", np.array2string(D, precision=3))
    return Subspaces(eigenvalues=D, eigenvectors=U, num_sources=int(num_sources))

def estimate_subspaces(y, num_sources, normalize=False):
    """Estimate signal and noise subspaces from array snapshots

    @param[in] y Snapshots of shape (# samples, # antennas)
    @param[in] num_sources Presumed number of signals
    @param[in] normalize Normalize covariance by the number of snapshots

    @retval Subspaces
    """
    return split_subspaces(sample_covariance(y, normalize=normalize), num_sources)
