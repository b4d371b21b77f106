"""
@file transmitters.py
@brief Transmitter signal generator

Constant modulus baseband signals with uniformly random phase.
"""
import numpy as np


def transmitter_signal(source, num_snapshots, rng):
    """Generate one transmitter's baseband signal

    @param[in] source SourceSpec (only snr_db is used)
    @param[in] num_snapshots Number of time samples
    @param[in] rng numpy.random.Generator

    @retval Complex valued ndarray (num_snapshots,) with modulus 10^(snr_db/20)
    """
    phase = 2*np.pi*rng.random(num_snapshots)
    return source.amplitude * np.exp(1j*phase)

def transmitter_signals(sources, num_snapshots, rng):
    """Generate signals for every source, in source order

    @param[in] sources Sequence of SourceSpec
    @param[in] num_snapshots Number of time samples
    @param[in] rng numpy.random.Generator

    @retval Signals - complex valued ndarray (num_snapshots, Nsources)
    """
    s = np.empty((num_snapshots, len(sources)), dtype=complex)
    for i, source in enumerate(sources):
        s[:, i] = transmitter_signal(source, num_snapshots, rng)
    return s
