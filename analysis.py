import sys
from dataclasses import replace

import numpy as np
import scipy.signal as ss
import scipy.optimize as so
import matplotlib.pyplot as plt

from parameters import SourceSpec
from simulation import run_simulation


def get_peaks(X, prom_threshold, Nmax=np.inf):
    """Get peaks of a vector using prominence

    @param[in] X vector to find peak in
    @param[in] prom_threshold Prominence threshold as a % of full scale
    @param[in] Nmax Maximum number of peaks to detect (default np.inf, no limit)

    @retval Peak indices sorted in descending prominence order
    """
    X = np.asarray(X)
    fullscale = abs(np.max(X)-np.min(X))
    peaks, properties = ss.find_peaks(X, prominence=(prom_threshold*fullscale))
    idx = np.argsort(properties['prominences'])[::-1]
    peaks = peaks[idx]
    return peaks[:int(min(peaks.size, Nmax))]

def estimate_angles(spectrum, Nsignals, prom_threshold=0.01):
    """Estimated arrival angles from a MUSIC spectrum

    @param[in] spectrum MusicSpectrum
    @param[in] Nsignals Maximum number of angles to return
    @param[in] prom_threshold Prominence threshold as a % of full scale

    @retval Angles in degrees of the most prominent peaks, sorted ascending
    """
    peaks = get_peaks(spectrum.magnitude, prom_threshold, Nsignals)
    return np.sort(spectrum.angles[peaks])

def bearing_errors(truth, estimate):
    """Absolute bearing errors after pairing estimates with truth angles

    Estimates are assigned to truth angles to minimize total error.
    Missing estimates give NaN errors.

    @param[in] truth True angles in degrees (N,)
    @param[in] estimate Estimated angles in degrees (<= N,)

    @retval Absolute errors in degrees ordered like truth (N,)
    """
    truth = np.asarray(truth, dtype=float)
    estimate = np.asarray(estimate, dtype=float)
    N = truth.size

    # arrange truth angles to minimize error
    cost = np.abs(truth[:,None] - estimate[None,:])
    # if too few bearings are resolved, augment cost with
    # unrealistic angle error (anything >180 is impossible)
    if(cost.shape[1] < N):
        cost = np.hstack((cost, np.full((N, N-cost.shape[1]), 360)))

    rowidx, colidx = so.linear_sum_assignment(cost)
    estimate = np.concatenate([estimate, np.full(N-estimate.size, np.nan)])

    err = np.full(N, np.nan)
    err[rowidx] = np.abs(truth[rowidx] - estimate[colidx])
    return err


class MUSICAnalyzer():
    """MUSIC Algorithm Performance Analyzer"""

    def __init__(self, config, Ntrials=20, prom_threshold=0.01, seed=None):
        """Initialize MUSIC analyzer

        @param[in] config Baseline SimulationConfig (array, sources, snapshots)
        @param[in] Ntrials Number of Monte-Carlo trials per point
        @param[in] prom_threshold Prominence threshold for peak finding as pct full scale
        @param[in] seed Seed for the trial random generator
        """
        self.config = config
        self.Ntrials = Ntrials
        self.prom_threshold = prom_threshold
        self.rng = np.random.default_rng(seed)

    def trial_errors(self, config):
        """Run Ntrials simulations of a configuration

        @param[in] config SimulationConfig

        @retval Absolute bearing errors (Ntrials, Nsignals), NaN for unresolved sources
        """
        truth = np.array([s.angle for s in config.sources])
        err = np.empty((self.Ntrials, config.num_sources))
        for t in range(self.Ntrials):
            result = run_simulation(config, rng=self.rng)
            estimate = estimate_angles(result.spectrum, config.num_sources, self.prom_threshold)
            err[t] = bearing_errors(truth, estimate)
        return err

    def _metrics_vs_param(self, configs, param, param_label, plot=False, plotscale='linear'):
        avg_err = np.empty(len(configs))
        std_err = np.empty(len(configs))
        resolved = np.empty(len(configs))

        for i, config in enumerate(configs):

            # progress bar
            nchars = 50
            nhashes = int(nchars*i/len(configs) + 1)
            sys.stdout.write("\033[K")
            print(f"{param[i]}: [" \
                    + nhashes*"#" + (nchars-nhashes-1)*"." + "]", end='\r')

            err = self.trial_errors(config)
            valid = ~np.isnan(err)
            resolved[i] = np.mean(valid)
            avg_err[i] = np.mean(err[valid]) if np.any(valid) else np.nan
            std_err[i] = np.std(err[valid]) if np.any(valid) else np.nan
        print()

        if(plot):
            plt.figure()
            plt.title(f"Bearing Estimate Error vs {param_label}")
            plt.xlabel(param_label)
            plt.ylabel("Error [deg]")
            plt.plot(param, avg_err, label="Expected Error")
            plt.scatter(param, avg_err, marker='.')
            plt.plot(param, std_err, label="Error Standard Deviation")
            plt.scatter(param, std_err, marker='.')
            plt.xscale(plotscale)
            plt.grid()
            plt.legend()

        return avg_err, std_err, resolved

    def metrics_vs_snr(self, snr_db, plot=False):
        """Gather bearing error metrics vs SNR (applied to every source)

        @param[in] snr_db Signal to noise ratios in dB (array-like)
        @param[in] plot Plotting switch (on/off)

        @retval Expected angle error (across Nsignals and trials) vs snr_db
        @retval Standard deviation of angle error vs snr_db
        @retval Fraction of sources resolved vs snr_db
        """
        snr_db = np.atleast_1d(np.asarray(snr_db, dtype=float))
        configs = [replace(self.config,
                           sources=[SourceSpec(s.angle, float(snr)) for s in self.config.sources])
                   for snr in snr_db]
        return self._metrics_vs_param(configs, snr_db, "SNR [dB]", plot=plot)

    def metrics_vs_nsamples(self, Nsamples, plot=False):
        """Gather bearing error metrics vs number of snapshots

        @param[in] Nsamples Number of snapshots per estimation (array-like)
        @param[in] plot Plotting switch (on/off)

        @retval Expected angle error (across Nsignals and trials) vs Nsamples
        @retval Standard deviation of angle error vs Nsamples
        @retval Fraction of sources resolved vs Nsamples
        """
        Nsamples = np.atleast_1d(np.asarray(Nsamples, dtype=int))
        configs = [replace(self.config, num_snapshots=int(n)) for n in Nsamples]
        return self._metrics_vs_param(configs, Nsamples, "Nsamples", plot=plot, plotscale='log')


if __name__ == "__main__":
    from simulation import reference_config

    an = MUSICAnalyzer(reference_config(), Ntrials=50, seed=0)
    an.metrics_vs_snr(np.linspace(-20, 20, 21), plot=True)
    an.metrics_vs_nsamples(np.logspace(1, 4, 10, dtype='int'), plot=True)
    plt.show()
