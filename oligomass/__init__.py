"""
oligomass
=========

A package to compute the isotopic fine structure of molecules and to find
oligomer compositions compatible with a mass value.

Provides
    1. An isotopolog enumerator that computes the isotopic distribution of a
       molecule from its elemental composition.
    2. A spectrum synthesizer that creates continuous spectra from isotopolog
       distributions.
    3. A combinatorial mass search over the stoichiometric ranges of monomers.
    4. Tables of isotopes, monomers and derivatives.

"""

__version__ = "0.1.0"

from . import chem
from . import utils
from . import validation
from .chem import (
    ElementComposition,
    TableOfIsotopes,
    compute_distribution,
    compute_distributions,
    synthesize_spectrum
)
from .monomers import MonomerTable, get_default_monomer_table
from .search import SearchConfiguration, SearchDimension, find_compositions

SETTINGS = utils.get_settings()
