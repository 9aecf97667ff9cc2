# -*- coding: utf-8 -*-
"""
Tools to compute the isotopic fine structure of a molecule.

The significant isotopologs of a molecule are enumerated by a depth-first
recursion over the minor isotopes of each element in the composition. Each
isotopolog probability is obtained from its parent using the multinomial
recurrence, and branches are pruned when the probability falls below a
cutoff relative to the monoisotopic probability. Probabilities are
propagated as logarithms, so the pruning still works for large molecules
where the monoisotopic probability is lower than the smallest float.

Objects
-------
- IsotopologDistribution

Functions
---------
- compute_distribution
- compute_distributions

"""

import logging
import math
import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from typing import List, NamedTuple, Optional, Sequence, Union
from .composition import ElementComposition
from .spectrum import Spectrum, synthesize_spectrum
from .. import _constants as c
from .. import validation as val
from ..utils import get_progress_bar, get_setting

logger = logging.getLogger(__file__)


class _Channel:
    """
    A minor isotope of an element in the composition.

    Attributes
    ----------
    label : str
        Isotope label, e.g. "13C".
    n_max : int
        Number of atoms of the element in the composition.
    delta : float
        Mass difference with the reference isotope.
    p : float
        Abundance of the isotope.
    p_ref : float
        Abundance of the reference isotope.
    same_element : bool
        True if a previous channel belongs to the same element.

    """

    __slots__ = ("label", "n_max", "delta", "p", "p_ref", "same_element")

    def __init__(self, label: str, n_max: int, delta: float, p: float,
                 p_ref: float, same_element: bool):
        self.label = label
        self.n_max = n_max
        self.delta = delta
        self.p = p
        self.p_ref = p_ref
        self.same_element = same_element


class _EnumerationContext:
    """
    Stores the scratch state of a single enumeration.

    """

    def __init__(self, channels: List[_Channel], log_cutoff: float):
        self.channels = channels
        self.log_cutoff = log_cutoff
        self.counts = [0] * len(channels)
        self.mass = list()
        self.abundance = list()
        self.labels = list()

    def add_isotopolog(self, mass: float, log_prob: float):
        prob = math.exp(log_prob)
        if prob == 0.0:
            return
        tokens = list()
        for ch, k in zip(self.channels, self.counts):
            if k > 0:
                tokens.append("({}){}".format(ch.label, k))
        self.mass.append(mass)
        self.abundance.append(prob)
        self.labels.append(" ".join(tokens))


class BriefDistribution(NamedTuple):
    """
    Isotopologs required to reach the coverage of a distribution.

    """
    mass: np.ndarray
    abundance: np.ndarray
    cumulative: np.ndarray
    labels: np.ndarray


class IsotopologDistribution:
    """
    Isotopologs of a molecule sorted by decreasing abundance.

    Attributes
    ----------
    composition : ElementComposition
        A copy of the composition used to compute the distribution.
    cutoff : float
        Cutoff value, relative to the monoisotopic probability.
    coverage : float
        Target cumulative abundance used to compute `coverage_count`.
    mass : array
        Exact mass of each isotopolog.
    abundance : array
        Probability of each isotopolog.
    cumulative : array
        Cumulative sum of `abundance`.
    labels : array
        Minor isotopes of each isotopolog, e.g. "(13C)2 (18O)1". The
        monoisotopic isotopolog has an empty label.
    coverage_count : int
        Number of isotopologs required to reach `coverage`.
    centroid_mass : array
        Abundance-weighted mass of isotopologs with the same nominal mass.
    centroid_abundance : array
        Summed abundance of isotopologs with the same nominal mass.
    centroid_population : array
        Number of isotopologs with the same nominal mass.
    monoisotopic_mass : float
    average_mass : float
    monoisotopic_probability : float

    """

    def __init__(
        self,
        composition: ElementComposition,
        cutoff: float,
        coverage: float,
        mass: np.ndarray,
        abundance: np.ndarray,
        labels: np.ndarray,
        monoisotopic_probability: float
    ):
        self.composition = composition
        self.cutoff = cutoff
        self.coverage = coverage
        self.monoisotopic_mass = composition.get_monoisotopic_mass()
        self.average_mass = composition.get_average_mass()
        self.monoisotopic_probability = monoisotopic_probability

        order = sorted(range(mass.size), key=lambda k: (-abundance[k], labels[k]))
        self.mass = mass[order]
        self.abundance = abundance[order]
        self.labels = labels[order]
        self.cumulative = np.cumsum(self.abundance)

        n = self.mass.size
        count = np.searchsorted(self.cumulative, coverage, side="left") + 1
        self.coverage_count = int(min(count, n))

        centroids = _compute_centroids(self.mass, self.abundance)
        self.centroid_mass, self.centroid_abundance, self.centroid_population = centroids

    def __repr__(self):
        msg = "IsotopologDistribution({}, n_isotopologs={})"
        return msg.format(self.composition.get_composition_str(), self.n_isotopologs)

    @property
    def n_isotopologs(self) -> int:
        return self.mass.size

    def get_brief(self) -> BriefDistribution:
        """
        Returns the first `coverage_count` isotopologs.

        """
        n = self.coverage_count
        return BriefDistribution(
            self.mass[:n], self.abundance[:n], self.cumulative[:n], self.labels[:n]
        )

    def to_dataframe(self, brief: bool = False) -> pd.DataFrame:
        """
        Creates a DataFrame with the mass, abundance, cumulative abundance and
        label of each isotopolog.

        Parameters
        ----------
        brief : bool, default=False
            If True, only the isotopologs required to reach the coverage are
            included.

        """
        if brief:
            mass, abundance, cumulative, labels = self.get_brief()
        else:
            mass, abundance = self.mass, self.abundance
            cumulative, labels = self.cumulative, self.labels
        df = pd.DataFrame({
            c.MASS: mass,
            c.ABUNDANCE: abundance,
            c.CUMULATIVE: cumulative,
            c.LABEL: labels,
        })
        return df

    def centroids_to_dataframe(self) -> pd.DataFrame:
        df = pd.DataFrame({
            c.MASS: self.centroid_mass,
            c.ABUNDANCE: self.centroid_abundance,
            c.CUMULATIVE: np.cumsum(self.centroid_abundance),
            c.POPULATION: self.centroid_population,
        })
        return df

    def make_spectrum(self, **kwargs) -> Spectrum:
        """
        Creates a continuous spectrum from the isotopologs.

        Parameters
        ----------
        kwargs :
            Parameters passed to :py:func:`oligomass.chem.synthesize_spectrum`.

        Returns
        -------
        Spectrum

        """
        return synthesize_spectrum(self.mass, self.abundance, **kwargs)


def compute_distribution(
    composition: Union[ElementComposition, str],
    cutoff: Optional[float] = None,
    coverage: Optional[float] = None
) -> IsotopologDistribution:
    """
    Computes the significant isotopologs of a molecule.

    Parameters
    ----------
    composition : ElementComposition or str
        Elemental composition of the molecule. Strings are parsed using the
        default table of isotopes.
    cutoff : float or None, default=None
        Isotopologs with a probability lower than ``cutoff`` times the
        monoisotopic probability are pruned, unless the probability is still
        increasing. Must be in [0, 1]. If None, the value is taken from the
        settings.
    coverage : float or None, default=None
        Cumulative abundance used to compute the brief subset of isotopologs.
        If None, the value is taken from the settings.

    Returns
    -------
    IsotopologDistribution

    Examples
    --------
    >>> import oligomass as om
    >>> dist = om.chem.compute_distribution("C 6 H 12 O 6")
    >>> dist.monoisotopic_mass
    180.06338810...

    """
    if not isinstance(composition, ElementComposition):
        composition = ElementComposition(composition)

    defaults = get_setting("distribution")
    params = {
        "cutoff": defaults["cutoff"] if cutoff is None else cutoff,
        "coverage": defaults["coverage"] if coverage is None else coverage,
    }
    params = val.validate_distribution_params(params)
    cutoff = params["cutoff"]
    coverage = params["coverage"]

    channels, log_mono_p = _make_channels(composition)
    logger.debug(
        "%s: %d channels, monoisotopic log-probability %.6g.",
        composition, len(channels), log_mono_p
    )

    log_cutoff = _safe_log(cutoff) + log_mono_p
    context = _EnumerationContext(channels, log_cutoff)
    mono_mass = composition.get_monoisotopic_mass()
    if channels:
        _add_isotopes(context, 0, 0, mono_mass, log_mono_p)
    else:
        context.add_isotopolog(mono_mass, log_mono_p)
    logger.debug("%s: %d isotopologs.", composition, len(context.mass))
    if not context.mass:
        msg = "Isotopolog probabilities of {} are lower than the smallest float."
        raise ValueError(msg.format(composition))

    result = IsotopologDistribution(
        composition.copy(),
        cutoff,
        coverage,
        np.array(context.mass, dtype=float),
        np.array(context.abundance, dtype=float),
        np.array(context.labels, dtype=object),
        math.exp(log_mono_p)
    )
    return result


def compute_distributions(
    compositions: Sequence[Union[ElementComposition, str]],
    cutoff: Optional[float] = None,
    coverage: Optional[float] = None,
    n_jobs: Optional[int] = None,
    verbose: bool = False
) -> List[IsotopologDistribution]:
    """
    Computes the isotopolog distribution of several molecules.

    Parameters
    ----------
    compositions : sequence of ElementComposition or str
    cutoff : float or None, default=None
    coverage : float or None, default=None
    n_jobs: int or None, default=None
        Number of jobs to run in parallel. ``None`` means 1 unless in a
        :obj:`joblib.parallel_backend` context. ``-1`` means using all
        processors.
    verbose : bool, default=False
        If ``True``, displays a progress bar.

    Returns
    -------
    List[IsotopologDistribution]

    """
    worker = delayed(compute_distribution)
    iterator = compositions
    if verbose:
        bar = get_progress_bar()
        iterator = bar(compositions, total=len(compositions))
    results = Parallel(n_jobs=n_jobs)(worker(x, cutoff, coverage) for x in iterator)
    return results


def _make_channels(composition: ElementComposition):
    """
    Creates a channel for each significant minor isotope in the composition.

    Returns
    -------
    channels : List[_Channel]
    log_mono_p : float
        Natural logarithm of the probability of the monoisotopic isotopolog.

    """
    channels = list()
    log_mono_p = 0.0
    for element, n in composition:
        if n == 0:
            continue
        reference = element.get_monoisotope()
        log_mono_p += n * math.log(reference.abundance)
        for rank, isotope in enumerate(element.isotopes[1:element.n_significant]):
            ch = _Channel(
                str(isotope),
                n,
                isotope.m - reference.m,
                isotope.abundance,
                reference.abundance,
                rank > 0
            )
            channels.append(ch)
    return channels, log_mono_p


def _add_isotopes(context: _EnumerationContext, d: int, used: int,
                  mass: float, log_prob: float):
    """
    Enumerates the substitution counts of the channel `d`.

    Parameters
    ----------
    context : _EnumerationContext
    d : int
        Channel index.
    used : int
        Atoms of the element already substituted in previous channels.
    mass : float
        Mass of the parent isotopolog.
    log_prob : float
        Natural logarithm of the probability of the parent isotopolog.

    """
    ch = context.channels[d]
    if not ch.same_element:
        used = 0
    available = ch.n_max - used
    is_last = d == len(context.channels) - 1
    last_log_prob = -math.inf
    for i in range(available + 1):
        if (log_prob <= context.log_cutoff) and (log_prob <= last_log_prob):
            break
        context.counts[d] = i
        if is_last:
            context.add_isotopolog(mass, log_prob)
        else:
            _add_isotopes(context, d + 1, used + i, mass, log_prob)
        mass += ch.delta
        last_log_prob = log_prob
        log_prob += _safe_log((available - i) * ch.p / (ch.p_ref * (i + 1)))
    context.counts[d] = 0


def _safe_log(x: float) -> float:
    return math.log(x) if x > 0 else -math.inf

def _compute_centroids(mass: np.ndarray, abundance: np.ndarray):
    """
    Merges isotopologs with the same nominal mass.

    Returns
    -------
    centroid_mass : array
    centroid_abundance : array
    centroid_population : array

    """
    bins = np.floor(mass - mass.min() + 0.5).astype(int)
    population = np.bincount(bins)
    centroid_abundance = np.bincount(bins, weights=abundance)
    weighted_mass = np.bincount(bins, weights=mass * abundance)
    non_empty = population > 0
    population = population[non_empty]
    centroid_abundance = centroid_abundance[non_empty]
    centroid_mass = weighted_mass[non_empty] / centroid_abundance
    return centroid_mass, centroid_abundance, population
