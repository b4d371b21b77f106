import numpy as np
import pytest

import subspace
from parameters import ConfigurationError, EigendecompositionError, SourceSpec
from snapshots import synthesize_snapshots
from subspace import (Subspaces, eigendecompose, estimate_subspaces,
                      sample_covariance, split_subspaces)
from ula import steering_vector


def _random_hermitian(rng, M):
    X = rng.standard_normal((M, M)) + 1j*rng.standard_normal((M, M))
    return X + X.conj().T

@pytest.fixture
def snapshots(array):
    sources = [SourceSpec(10, 10), SourceSpec(40, 10), SourceSpec(60, 10)]
    return synthesize_snapshots(array, sources, 100, np.random.default_rng(2))


def test_covariance_is_hermitian_psd(snapshots):
    Ryy = sample_covariance(snapshots)
    assert Ryy.shape == (8, 8)
    assert np.allclose(Ryy, Ryy.conj().T)
    assert np.allclose(Ryy, snapshots.conj().T @ snapshots)
    assert np.all(np.linalg.eigvalsh(Ryy) > -1e-9)

def test_covariance_normalization_keeps_eigenvectors(snapshots):
    D1, U1 = eigendecompose(sample_covariance(snapshots))
    D2, U2 = eigendecompose(sample_covariance(snapshots, normalize=True))
    assert np.allclose(D1/snapshots.shape[0], D2)
    # same subspaces up to per-column phase
    assert np.allclose(np.abs(np.sum(U1.conj()*U2, axis=0)), 1)

def test_covariance_rejects_vectors():
    with pytest.raises(ValueError):
        sample_covariance(np.ones(5))

@pytest.mark.parametrize("M", [2, 5, 8, 16])
def test_eigendecompose_sorted_orthonormal(M):
    R = _random_hermitian(np.random.default_rng(M), M)
    D, U = eigendecompose(R)
    assert D.dtype.kind == 'f'
    assert np.all(np.diff(D) >= 0)
    assert np.allclose(U.conj().T @ U, np.eye(M), atol=1e-10)
    assert np.allclose((U * D) @ U.conj().T, R)

def test_eigendecompose_degenerate_eigenvalues_orthonormal():
    # rank one -> M-1 repeated zero eigenvalues
    a = np.exp(1j*np.arange(6))
    D, U = eigendecompose(np.outer(a, a.conj()))
    assert np.allclose(D[:-1], 0, atol=1e-10)
    assert np.isclose(D[-1], 6)
    assert np.allclose(U.conj().T @ U, np.eye(6), atol=1e-10)

def test_eigendecompose_input_validation():
    with pytest.raises(ValueError):
        eigendecompose(np.ones((3, 4)))
    with pytest.raises(ValueError):
        eigendecompose(np.array([[1, 2j], [2j, 1]]))
    with pytest.raises(EigendecompositionError) as exc:
        eigendecompose(np.array([[np.nan, 0], [0, 1]]))
    assert exc.value.matrix.shape == (2, 2)

def test_eigendecompose_failure_is_fatal(monkeypatch):
    def fail(R):
        raise np.linalg.LinAlgError("did not converge")
    monkeypatch.setattr(subspace.sla, "eigh", fail)
    R = np.eye(3)
    with pytest.raises(EigendecompositionError) as exc:
        eigendecompose(R)
    assert exc.value.matrix is not None
    assert np.array_equal(exc.value.matrix, R)

def test_subspace_partition(snapshots):
    sub = estimate_subspaces(snapshots, 3)
    assert isinstance(sub, Subspaces)
    assert sub.signal.shape == (8, 3)
    assert sub.noise.shape == (8, 5)
    # signal subspace holds the largest eigenvalues
    assert np.allclose(sub.signal, sub.eigenvectors[:, -3:])
    assert sub.eigenvalues[-3:].min() > sub.eigenvalues[:5].max()

def test_subspace_boundaries(snapshots):
    sub = estimate_subspaces(snapshots, 7)
    assert sub.noise.shape == (8, 1)
    with pytest.raises(ConfigurationError):
        estimate_subspaces(snapshots, 8)
    with pytest.raises(ConfigurationError):
        split_subspaces(sample_covariance(snapshots), 9)
    with pytest.raises(ConfigurationError):
        estimate_subspaces(snapshots, -1)

@pytest.mark.parametrize("angle", [-70, -20, 0, 10, 33, 85])
def test_projection_conserves_energy(array, snapshots, angle):
    sub = estimate_subspaces(snapshots, 3)
    a = steering_vector(array, angle, normalized=True)
    a_s, a_n = sub.project(a)
    assert np.allclose(a_s + a_n, a)
    assert np.isclose(np.linalg.norm(a_s)**2 + np.linalg.norm(a_n)**2, 1)
    assert np.isclose(np.linalg.norm(a_s + a_n), 1)

def test_source_steering_vectors_lie_in_signal_subspace(array):
    sources = [SourceSpec(-20, 10), SourceSpec(30, 10)]
    y = synthesize_snapshots(array, sources, 200, np.random.default_rng(4), noise_power=0)
    sub = estimate_subspaces(y, 2)
    for source in sources:
        a = steering_vector(array, source.angle, normalized=True)
        a_s, a_n = sub.project(a)
        assert np.linalg.norm(a_n) < 1e-6
        assert np.isclose(np.linalg.norm(a_s), 1)
