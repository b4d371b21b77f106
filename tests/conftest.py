import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from parameters import ArrayConfig, SimulationConfig, SourceSpec


@pytest.fixture
def rng():
    return np.random.default_rng(1234)

@pytest.fixture
def array():
    """8 antenna ULA, 0.5 m spacing, 300 MHz carrier"""
    return ArrayConfig(num_antennas=8, spacing=0.5, frequency=300e6)

@pytest.fixture
def noiseless_config(array):
    def build(angles, snr_db=10, **kw):
        return SimulationConfig(
            array=kw.pop('array', array),
            sources=[SourceSpec(a, snr_db) for a in angles],
            num_snapshots=kw.pop('num_snapshots', 100),
            noise_power=0,
            seed=kw.pop('seed', 7),
            **kw,
        )
    return build
