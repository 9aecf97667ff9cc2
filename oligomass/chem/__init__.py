"""
Chemistry
=========

Provides:

1. A TableOfIsotopes with element, pseudo-element and isotope information.
2. An ElementComposition object to compute the mass of elemental compositions.
3. An isotopolog enumerator that computes the isotopic fine structure of a molecule.
4. A spectrum synthesizer that creates continuous spectra from isotopolog distributions.

Objects
-------
- TableOfIsotopes
- ElementComposition
- IsotopologDistribution
- Spectrum

Functions
---------
- get_default_table
- compute_distribution
- compute_distributions
- synthesize_spectrum

Constants
---------
- EM : electron mass

"""

from .atoms import EM, Element, Isotope, TableOfIsotopes, get_default_table
from .composition import ElementComposition
from .isotopologs import IsotopologDistribution, compute_distribution, compute_distributions
from .spectrum import Spectrum, synthesize_spectrum
