"""
@file parameters.py
@brief Simulation parameter structures and error types

Array, source and run parameters are validated once, when they are
built, so that a bad configuration never reaches the numerical stages.
"""
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

SPEED_OF_LIGHT = 2.9979e8       # meters/second


class ConfigurationError(ValueError):
    """Invalid simulation parameters (raised before any computation)"""


class NumericalDegeneracyWarning(RuntimeWarning):
    """MUSIC denominator vanished at one or more scanned angles"""


class EigendecompositionError(RuntimeError):
    """Eigendecomposition of a covariance matrix failed

    @param[in] message Error description
    @param[in] matrix Matrix that could not be decomposed
    """
    def __init__(self, message, matrix=None):
        super().__init__(message)
        self.matrix = matrix


def dB2lin(db):
    return 10**(db/10)

def lin2dB(db):
    return 10*np.log10(db)

def dB2amplitude(db):
    return 10**(db/20)


def _require_finite(name, value):
    try:
        finite = math.isfinite(value)
    except TypeError as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e
    if(not finite):
        raise ConfigurationError(f"{name} must be finite, got {value}")

def _require_count(name, value, minimum):
    _require_finite(name, value)
    if(int(value) != value or value < minimum):
        raise ConfigurationError(f"{name} must be an integer >= {minimum}, got {value}")
    return int(value)


@dataclass(frozen=True)
class ArrayConfig:
    """1-Dimensional Uniform Linear Array Description

    @param num_antennas Number of antennas (>= 2)
    @param spacing Inter-antenna spacing in meters
    @param frequency Carrier frequency in Hz
    @param speed Propagation speed in meters/second
    """
    num_antennas: int
    spacing: float
    frequency: float
    speed: float = SPEED_OF_LIGHT

    def __post_init__(self):
        num_antennas = _require_count('Antenna count', self.num_antennas, 2)
        for name in ('spacing', 'frequency', 'speed'):
            value = getattr(self, name)
            _require_finite(name, value)
            if(value <= 0):
                raise ConfigurationError(f"{name} must be positive, got {value}")
        object.__setattr__(self, 'num_antennas', num_antennas)

    @property
    def wavelength(self):
        return self.speed / self.frequency

    @property
    def spacing_wavelengths(self):
        """Antenna spacing normalized to the carrier wavelength"""
        return self.spacing / self.wavelength

    @property
    def positions(self):
        """Antenna positions along the array axis in meters, shape (M,)"""
        return np.arange(self.num_antennas) * self.spacing


@dataclass(frozen=True)
class SourceSpec:
    """Simulated transmitter

    @param angle Angle of arrival in degrees from broadside
    @param snr_db Received signal to noise ratio in dB
    """
    angle: float
    snr_db: float

    def __post_init__(self):
        _require_finite('angle', self.angle)
        _require_finite('snr_db', self.snr_db)
        if(not math.isfinite(self.power)):
            raise ConfigurationError(f"SNR {self.snr_db} dB overflows the signal power")

    @property
    def amplitude(self):
        return dB2amplitude(float(self.snr_db))

    @property
    def power(self):
        try:
            return dB2lin(float(self.snr_db))
        except OverflowError:
            return math.inf


@dataclass(frozen=True)
class SimulationConfig:
    """Parameters for a single simulation run

    All stages of a run read their inputs from this structure; nothing
    is kept at module level. A fixed seed makes the run reproducible.

    @param array Array geometry (ArrayConfig)
    @param sources Ordered sequence of SourceSpec
    @param num_snapshots Number of snapshots (> 0)
    @param scan_start First scanned angle in degrees
    @param scan_stop Last scanned angle in degrees (inclusive)
    @param scan_step Scan grid step in degrees
    @param seed Seed for numpy.random.default_rng (None for fresh entropy)
    @param noise_power Total noise power per antenna per snapshot (0 disables noise)
    @param normalize_covariance Divide the covariance by the snapshot count
    """
    array: ArrayConfig
    sources: tuple
    num_snapshots: int
    scan_start: float = -90.0
    scan_stop: float = 90.0
    scan_step: float = 1.0
    seed: Optional[int] = None
    noise_power: float = 1.0
    normalize_covariance: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'sources', tuple(self.sources))
        if(not isinstance(self.array, ArrayConfig)):
            raise ConfigurationError(f"array must be an ArrayConfig, got {type(self.array).__name__}")
        object.__setattr__(self, 'num_snapshots',
                           _require_count('Snapshot count', self.num_snapshots, 1))
        if(len(self.sources) == 0):
            raise ConfigurationError("At least one source is required")
        if(len(self.sources) >= self.array.num_antennas):
            raise ConfigurationError(
                f"{len(self.sources)} sources need more than {self.array.num_antennas} "
                "antennas (noise subspace would be empty)")
        for name in ('scan_start', 'scan_stop', 'scan_step', 'noise_power'):
            _require_finite(name, getattr(self, name))
        if(self.scan_step <= 0):
            raise ConfigurationError(f"Scan step must be positive, got {self.scan_step}")
        if(self.scan_start > self.scan_stop):
            raise ConfigurationError(
                f"Scan start {self.scan_start} is past scan stop {self.scan_stop}")
        if(self.noise_power < 0):
            raise ConfigurationError(f"Noise power must be >= 0, got {self.noise_power}")
        # covariance entries are bounded by the total received energy
        energy = (sum(s.power for s in self.sources) + self.noise_power) \
                    * self.array.num_antennas * self.num_snapshots
        if(not math.isfinite(energy)):
            raise ConfigurationError("Source powers overflow the array covariance")

    @property
    def num_sources(self):
        return len(self.sources)

    @classmethod
    def from_params(cls, params):
        """Build a configuration from a flat parameter dictionary

        Parameter dictionary is expected to consist of the following entries:
        - 'Nantennas' : int         Number of antennas
        - 'spacing' : float         Antenna spacing in meters
        - 'frequency' : float       Carrier frequency in Hz
        - 'speed' : float           Propagation speed in m/s (optional)
        - 'Nsnapshots' : int        Number of snapshots
        - 'angles' : array-like     Angles of arrival in degrees
        - 'snr_db' : array-like     SNR per source in dB (or a scalar for all)
        - 'scan' : tuple            (start, stop, step) in degrees (optional)
        - 'seed' : int              Random seed (optional)
        - 'noise_power' : float     Noise power (optional)
        - 'normalize' : bool        Normalize covariance (optional)

        Unrecognized entries are rejected.

        @param[in] params Dictionary of parameters (see details)

        @retval SimulationConfig
        """
        params = dict(params)
        try:
            array = ArrayConfig(
                num_antennas=params.pop('Nantennas'),
                spacing=params.pop('spacing'),
                frequency=params.pop('frequency'),
                speed=params.pop('speed', SPEED_OF_LIGHT),
            )
            angles = np.atleast_1d(np.asarray(params.pop('angles'), dtype=float))
            snr_db = np.broadcast_to(np.asarray(params.pop('snr_db'), dtype=float), angles.shape)
            num_snapshots = params.pop('Nsnapshots')
        except KeyError as e:
            raise ConfigurationError(f"Missing required parameter {e}") from e
        except ValueError as e:
            if(isinstance(e, ConfigurationError)):
                raise
            raise ConfigurationError(f"Malformed parameter: {e}") from e

        start, stop, step = params.pop('scan', (-90.0, 90.0, 1.0))
        seed = params.pop('seed', None)
        noise_power = params.pop('noise_power', 1.0)
        normalize = params.pop('normalize', False)
        if(params):
            raise ConfigurationError(f"Unrecognized parameters: {sorted(params)}")

        sources = [SourceSpec(float(a), float(s)) for a, s in zip(angles, snr_db)]
        return cls(
            array=array,
            sources=sources,
            num_snapshots=num_snapshots,
            scan_start=start,
            scan_stop=stop,
            scan_step=step,
            seed=seed,
            noise_power=noise_power,
            normalize_covariance=normalize,
        )
