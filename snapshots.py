"""
@file snapshots.py
@brief Snapshot synthesizer

Combines transmitter signals, arrival phase rotators and noise into the
matrix of array observations.
"""
import logging

import numpy as np

import noise as ns
from transmitters import transmitter_signals
from ula import manifold, SYNTHESIS

logger = logging.getLogger(__name__)


def synthesize_snapshots(array, sources, num_snapshots, rng, noise_power=1):
    """Generate array snapshots for a set of sources

    Transmitter phases are drawn first (in source order), then the noise.

    @param[in] array ArrayConfig
    @param[in] sources Ordered sequence of SourceSpec
    @param[in] num_snapshots Number of snapshots
    @param[in] rng numpy.random.Generator
    @param[in] noise_power Noise power per antenna per snapshot (0 disables noise)

    @retval Snapshots - read-only complex valued ndarray (num_snapshots, M)
    """
    angles = [source.angle for source in sources]
    s = transmitter_signals(sources, num_snapshots, rng)
    n = ns.complex_gaussian((num_snapshots, array.num_antennas), rng, power=noise_power)

    # (Nsnapshots,K) @ (K,M): every source adds its signal rotated per antenna
    A = manifold(array, angles, sign=SYNTHESIS)
    y = n + s @ A.T

    logger.debug("Synthesized %d snapshots x %d antennas from %d sources",
                 num_snapshots, array.num_antennas, len(sources))
    y.flags.writeable = False
    return y
