"""
Synthesis of continuous mass spectra from isotopolog masses and abundances.

Objects
-------
- Spectrum

Functions
---------
- synthesize_spectrum

"""

import numpy as np
import pandas as pd
from scipy.stats import norm
from typing import Optional, Tuple
from .. import _constants as c
from .. import validation as val
from ..utils import get_setting


class Spectrum:
    """
    Representation of a continuous mass spectrum.

    Attributes
    ----------
    mz: array
        m/z data
    spint: array
        Intensity data, as a sum of abundance weighted gaussian densities.
    charge: int
        Charge state used to compute the m/z values.

    """

    def __init__(self, mz: np.ndarray, spint: np.ndarray, charge: int = 1):
        self.mz = mz
        self.spint = spint
        self.charge = charge

    def __repr__(self):
        return "Spectrum(n_points={}, charge={})".format(self.mz.size, self.charge)

    def get_max(self) -> Tuple[float, float]:
        """
        Returns the m/z and intensity of the base peak.

        """
        index = np.argmax(self.spint)
        return self.mz[index], self.spint[index]

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame({c.MZ: self.mz, c.SPINT: self.spint})


def synthesize_spectrum(
    mass: np.ndarray,
    abundance: np.ndarray,
    charge: int = 1,
    mz: Optional[np.ndarray] = None,
    mz_step: Optional[float] = None,
    fwhm: Optional[float] = None,
    y_threshold: Optional[float] = None,
    mz_min: Optional[float] = None,
    mz_max: Optional[float] = None
) -> Spectrum:
    """
    Creates a spectrum as a sum of gaussian peaks, one for each isotopolog.

    Parameters
    ----------
    mass : array
        Exact mass of each isotopolog.
    abundance : array
        Abundance of each isotopolog.
    charge : int, default=1
        Charge state. Must be a non-zero integer. The m/z of each isotopolog is
        computed as ``mass / abs(charge)``.
    mz : array or None, default=None
        m/z grid used to evaluate the spectrum. If None, a grid is created
        using `mz_step`, `mz_min` and `mz_max`.
    mz_step : float or None, default=None
        Distance between consecutive grid points. If None, the value is taken
        from the settings.
    fwhm : float or None, default=None
        Full width at half maximum of each peak. If None, the value is taken
        from the settings.
    y_threshold : float or None, default=None
        Intensities lower than this value are set to zero. If None, the value
        is taken from the settings.
    mz_min : float or None, default=None
        Lower bound of the grid. If None, ``floor(min(mz)) - 1`` is used.
    mz_max : float or None, default=None
        Upper bound of the grid. If None, ``ceil(max(mz)) + 1`` is used.

    Returns
    -------
    Spectrum

    """
    mass = np.asarray(mass, dtype=float)
    abundance = np.asarray(abundance, dtype=float)
    if mass.size != abundance.size:
        msg = "mass and abundance must have the same size. Got {} and {}."
        raise ValueError(msg.format(mass.size, abundance.size))
    if mass.size == 0:
        msg = "At least one isotopolog is required to create a spectrum."
        raise ValueError(msg)

    defaults = get_setting("spectrum")
    params = {
        "charge": int(charge),
        "mz_step": defaults["mz_step"] if mz_step is None else mz_step,
        "fwhm": defaults["fwhm"] if fwhm is None else fwhm,
        "y_threshold": defaults["y_threshold"] if y_threshold is None else y_threshold,
        "mz_min": mz_min,
        "mz_max": mz_max,
    }
    params = val.validate_spectrum_params(params)

    peak_mz = mass / abs(params["charge"])
    if mz is None:
        mz = _make_mz_grid(peak_mz, params["mz_step"], params["mz_min"],
                           params["mz_max"])
    else:
        mz = np.asarray(mz, dtype=float)

    sigma = c.FWHM_TO_SIGMA * params["fwhm"]
    spint = np.zeros_like(mz)
    for mz_peak, p in zip(peak_mz, abundance):
        spint += p * norm.pdf(mz, loc=mz_peak, scale=sigma)

    spint[spint < params["y_threshold"]] = 0.0
    return Spectrum(mz, spint, params["charge"])


def _make_mz_grid(
    peak_mz: np.ndarray,
    mz_step: float,
    mz_min: Optional[float],
    mz_max: Optional[float]
) -> np.ndarray:
    if mz_min is None:
        mz_min = np.floor(peak_mz.min()) - 1
    if mz_max is None:
        mz_max = np.ceil(peak_mz.max()) + 1
    if mz_min >= mz_max:
        msg = "mz_min must be lower than mz_max. Got {} and {}."
        raise ValueError(msg.format(mz_min, mz_max))
    n = int(np.ceil((mz_max - mz_min) / mz_step))
    return mz_min + np.arange(n) * mz_step
