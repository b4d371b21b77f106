"""
@file plotting.py
@brief Visualization of MUSIC simulation outputs

Consumers of the pipeline artifacts; nothing in the simulation core
imports this module. Functions draw on the given (or a new) axis and
return it; call plt.show() afterwards.
"""
import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns

from parameters import lin2dB
from ula import array_factor


def plot_spectrum(spectrum, peaks=None, ax=None, title='MUSIC', label=''):
    """Forms the MUSIC spectrum plot

    Must call plt.show() AFTER calling this function

    @param[in] spectrum MusicSpectrum
    @param[in] peaks Peak indices in spectrum (optional)
    @param[in] ax Axis to plot on (optional)
    @param[in] title Title to display (optional)
    @param[in] label Line label (optional)

    @retval Axis the spectrum was drawn on
    """
    if(ax is None):
        fig, ax = plt.subplots()
    th = spectrum.angles
    ax.plot(th, lin2dB(spectrum.magnitude), label=label or 'Spectrum')
    if(peaks is not None and len(peaks) > 0):
        ylim = ax.get_ylim()
        for a in th[np.asarray(peaks)]:
            ax.vlines(a, *ylim, linestyle='--', color='k', label=f'{round(float(a), 2)} degrees')
    ax.set_title(title)
    ax.set_xlabel("Angle of Arrival [deg]")
    ax.set_ylabel("Magnitude [dB]")
    ax.grid(True)
    ax.legend()
    return ax

def plot_covariance(Ryy, eigenvalues, name='Array'):
    """Plot covariance and eigenvalue matrices side-by-side

    @param[in] Ryy Covariance matrix (M,M)
    @param[in] eigenvalues Covariance eigenvalues (M,)
    @param[in] name Name of the signal (str, to be used in title)

    @retval Figure
    @retval Axes (2,)
    """
    fig, ax = plt.subplots(1, 2)
    ax[0].set_title(name + " Covariance Matrix")
    sns.heatmap(np.abs(Ryy), ax=ax[0], annot=False)
    ax[1].set_title(name + " Covariance Eigenvalues")
    sns.heatmap(np.diag(np.abs(eigenvalues)), ax=ax[1], annot=False)
    return fig, ax

def plot_array_factor(array, n=181, polar=True):
    """Plot ULA Array Factor

    @param[in] array ArrayConfig
    @param[in] n Number of points in AF
    @param[in] polar Polar plot (on/off)

    @retval Axis the array factor was drawn on
    """
    th, AF = array_factor(array, n=n)
    if(polar):
        fig, ax = plt.subplots(subplot_kw={'projection' : 'polar'})
        ax.plot(np.deg2rad(th), np.abs(AF))
    else:
        fig, ax = plt.subplots()
        ax.set_xlabel("Angle of Arrival [deg]")
        ax.set_ylabel("Magnitude [linear]")
        ax.plot(th, np.abs(AF))
    ax.set_title("ULA Array Factor\n" + \
                 f"Nsensors: {array.num_antennas}\n" + \
                 f"Separation: {round(array.spacing_wavelengths, 3)}*lambda")
    ax.grid(True)
    return ax
