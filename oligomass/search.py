# -*- coding: utf-8 -*-
"""
Functions to find oligomer compositions compatible with a mass value.

The search space is the cartesian product of the stoichiometric range of each
monomer. It is traversed depth-first, keeping a running total mass, and each
branch is abandoned as soon as the running total exceeds the target mass by
more than the tolerance.

Objects
-------
- SearchDimension
- MassSearchResult
- SearchConfiguration

Functions
---------
- find_compositions

"""

import logging
import numpy as np
import pandas as pd
from collections import Counter
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple
from . import _constants as c
from . import validation as val
from .chem import ElementComposition
from .exceptions import InvalidSearchBounds
from .monomers import MonomerTable, get_default_monomer_table
from .utils import get_setting

logger = logging.getLogger(__file__)


class SearchDimension(NamedTuple):
    """
    Stoichiometric range of a monomer.

    Attributes
    ----------
    name : str
        Monomer name.
    minimum : int
        Minimum number of residues, inclusive.
    maximum : int
        Maximum number of residues, inclusive.
    monoisotopic_increment : float
        Monoisotopic mass added by each residue.
    average_increment : float
        Average mass added by each residue.

    """
    name: str
    minimum: int
    maximum: int
    monoisotopic_increment: float
    average_increment: float

    def get_increment(self, mass_form: str) -> float:
        if mass_form == c.AVERAGE:
            return self.average_increment
        return self.monoisotopic_increment


class MassSearchResult:
    """
    Compositions found in a mass search.

    Attributes
    ----------
    coefficients : array
        Number of residues of each dimension. Each row is a hit, sorted in the
        order in which they were found.
    errors : array
        Signed difference between the mass of each hit and the target.
    names : List[str]
        Name of each dimension.
    mass_form : str
    target : float
    tolerance : float

    """

    def __init__(self, coefficients: np.ndarray, errors: np.ndarray,
                 names: List[str], mass_form: str, target: float,
                 tolerance: float):
        self.coefficients = coefficients
        self.errors = errors
        self.names = names
        self.mass_form = mass_form
        self.target = target
        self.tolerance = tolerance

    def __repr__(self):
        msg = "MassSearchResult(target={}, tolerance={}, n_hits={})"
        return msg.format(self.target, self.tolerance, self.n_hits)

    @property
    def n_hits(self) -> int:
        return self.errors.size

    def get_masses(self) -> np.ndarray:
        return self.target + self.errors

    def get_composition_str(self, k: int) -> str:
        """
        Creates a string representation of the k-th hit, e.g. "Hex 2 HexNAc 1".
        Dimensions with zero residues are omitted.

        """
        row = self.coefficients[k]
        tokens = ["{} {}".format(n, x) for n, x in zip(self.names, row) if x > 0]
        return " ".join(tokens)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Creates a DataFrame with one row for each hit and one column for each
        dimension, plus the mass and error of each hit.

        """
        df = pd.DataFrame(self.coefficients, columns=self.names)
        df[c.MASS] = self.get_masses()
        df[c.ERROR] = self.errors
        return df


class _SearchContext:
    """
    Stores the scratch state of a single search.

    """

    def __init__(self, target: float, tolerance: float, n_dimensions: int,
                 active: List[int], minimum: List[int], maximum: List[int],
                 increment: List[float]):
        self.target = target
        self.tolerance = tolerance
        self.active = active
        self.minimum = minimum
        self.maximum = maximum
        self.increment = increment
        self.current = np.zeros(n_dimensions, dtype=int)
        for k, d in enumerate(active):
            self.current[d] = minimum[k]
        self.hits = list()
        self.errors = list()

    def add_hit(self, error: float):
        self.hits.append(self.current.copy())
        self.errors.append(error)


def find_compositions(
    target: float,
    tolerance: float,
    dimensions: Sequence[SearchDimension],
    mass_form: Optional[str] = None,
    end_mass: float = 0.0,
    legacy_upper_bound: Optional[bool] = None
) -> MassSearchResult:
    """
    Finds all combinations of residues with a mass compatible with a target.

    Parameters
    ----------
    target : float
        Target mass. Must be a positive number.
    tolerance : float
        Search tolerance. Must be a positive number. Hits satisfy
        ``abs(mass - target) < tolerance``.
    dimensions : sequence of SearchDimension
        Stoichiometric range and mass increment of each monomer. Dimensions
        with ``maximum == 0`` are not searched and their coefficient is zero in
        all hits.
    mass_form : {"monoisotopic", "average"} or None, default=None
        Mass used for each residue. If None, the value is taken from the
        settings.
    end_mass : float, default=0.0
        Mass added to all compositions, e.g. the mass of the end groups.
    legacy_upper_bound : bool or None, default=None
        If True, each dimension is searched up to ``maximum + 1``. If None,
        the value is taken from the settings.

    Returns
    -------
    MassSearchResult

    Raises
    ------
    InvalidSearchBounds : if a dimension has invalid bounds or a non-positive
        mass increment.

    Examples
    --------
    >>> import oligomass as om
    >>> hexose = om.SearchDimension("Hex", 2, 8, 162.0528, 162.1406)
    >>> result = om.find_compositions(342.0, 0.5, [hexose], end_mass=18.0106)
    >>> result.get_composition_str(0)
    'Hex 2'

    """
    defaults = get_setting("search")
    params = {
        "target": target,
        "tolerance": tolerance,
        "mass_form": defaults["mass_form"] if mass_form is None else mass_form,
        "end_mass": end_mass,
        "legacy_upper_bound": (
            defaults["legacy_upper_bound"] if legacy_upper_bound is None
            else legacy_upper_bound
        ),
    }
    params = val.validate_search_params(params)
    target = params["target"]
    tolerance = params["tolerance"]
    mass_form = params["mass_form"]
    legacy_upper_bound = params["legacy_upper_bound"]

    for dim in dimensions:
        _validate_dimension(dim, mass_form)

    active = [k for k, dim in enumerate(dimensions) if dim.maximum > 0]
    minimum = [int(dimensions[k].minimum) for k in active]
    maximum = [int(dimensions[k].maximum) for k in active]
    if legacy_upper_bound:
        maximum = [x + 1 for x in maximum]
    increment = [dimensions[k].get_increment(mass_form) for k in active]
    logger.debug(
        "Searching %s mass %f +/- %f in %d dimensions.",
        mass_form, target, tolerance, len(active)
    )

    context = _SearchContext(target, tolerance, len(dimensions), active,
                             minimum, maximum, increment)
    total = params["end_mass"] + sum(k * x for k, x in zip(minimum, increment))
    if active:
        _combine_monomers(context, 0, total)
    elif abs(total - target) < tolerance:
        context.add_hit(total - target)
    logger.debug("Found %d hits.", len(context.errors))

    names = [dim.name for dim in dimensions]
    if context.hits:
        coefficients = np.vstack(context.hits)
    else:
        coefficients = np.zeros((0, len(dimensions)), dtype=int)
    errors = np.array(context.errors, dtype=float)
    return MassSearchResult(coefficients, errors, names, mass_form, target,
                            tolerance)


def _combine_monomers(context: _SearchContext, d: int, total: float):
    """
    Enumerates the number of residues of the active dimension `d`.

    """
    dim_index = context.active[d]
    inc = context.increment[d]
    is_last = d == len(context.active) - 1
    for i in range(context.minimum[d], context.maximum[d] + 1):
        context.current[dim_index] = i
        error = total - context.target
        if is_last:
            if abs(error) < context.tolerance:
                context.add_hit(error)
        else:
            _combine_monomers(context, d + 1, total)
        if error > context.tolerance:
            break
        total += inc
    context.current[dim_index] = context.minimum[d]


def _validate_dimension(dimension: SearchDimension, mass_form: str):
    increment_key = "{}_increment".format(mass_form)
    params = {
        "name": dimension.name,
        "minimum": dimension.minimum,
        "maximum": dimension.maximum,
        increment_key: dimension.get_increment(mass_form),
    }
    validator = val.ValidatorWithLowerThan(val.search_dimension_schema())
    val.validate(params, validator, exception=InvalidSearchBounds)


class SearchConfiguration:
    """
    Creates search dimensions for oligomers of derivatized monomers.

    Attributes
    ----------
    monomer_table : MonomerTable
    derivative : Derivative
    end_structure : str
    reducing_end : ElementComposition
    non_reducing_end : ElementComposition
    incremental_compositions : List[ElementComposition]
        Composition of each derivatized residue.

    Methods
    -------
    search
    get_dimensions
    get_element_composition
    get_end_mass
    to_dataframe

    Examples
    --------
    >>> import oligomass as om
    >>> config = om.SearchConfiguration({"Hex": (2, 8)})
    >>> result = config.search(342.0, 0.5)
    >>> result.get_composition_str(0)
    'Hex 2'

    """

    def __init__(
        self,
        bounds: Dict[str, Tuple[int, int]],
        derivative: str = "H",
        end_structure: str = c.REDUCING,
        monomer_table: Optional[MonomerTable] = None
    ):
        """
        SearchConfiguration constructor.

        Parameters
        ----------
        bounds : Dict[str, Tuple[int, int]]
            A mapping from monomer abbreviations to the minimum and maximum
            number of residues.
        derivative : str, default="H"
            Abbreviation of the derivative. "H" is used for non derivatized
            oligomers.
        end_structure : {"reducing", "alditol", "derivatized"}
            Structure of the reducing end.
        monomer_table : MonomerTable or None, default=None
            Table used to resolve abbreviations. If None, the default monomer
            table is used.

        """
        if monomer_table is None:
            monomer_table = get_default_monomer_table()
        self.monomer_table = monomer_table
        self.derivative = monomer_table.get_derivative(derivative)
        self.end_structure = end_structure
        self.reducing_end, self.non_reducing_end = \
            monomer_table.make_end_compositions(self.derivative, end_structure)

        self.monomers = list()
        self.incremental_compositions = list()
        self._bounds = list()
        for abbrev, (lb, ub) in bounds.items():
            monomer = monomer_table.get_monomer(abbrev)
            composition = monomer_table.get_incremental_composition(
                monomer, self.derivative)
            self.monomers.append(monomer)
            self.incremental_compositions.append(composition)
            self._bounds.append((lb, ub))

    def __repr__(self):
        names = ", ".join(m.abbrev for m in self.monomers)
        msg = "SearchConfiguration({}, derivative={}, end_structure={})"
        return msg.format(names, self.derivative.abbrev, self.end_structure)

    def get_dimensions(self) -> List[SearchDimension]:
        dimensions = list()
        for monomer, composition, (lb, ub) in zip(
                self.monomers, self.incremental_compositions, self._bounds):
            dim = SearchDimension(
                monomer.abbrev,
                lb,
                ub,
                composition.get_monoisotopic_mass(),
                composition.get_average_mass()
            )
            dimensions.append(dim)
        return dimensions

    def get_end_mass(self, mass_form: str = c.MONOISOTOPIC) -> float:
        """
        Computes the mass of the reducing and non-reducing end groups.

        """
        if mass_form == c.AVERAGE:
            return (self.reducing_end.get_average_mass() +
                    self.non_reducing_end.get_average_mass())
        elif mass_form == c.MONOISOTOPIC:
            return (self.reducing_end.get_monoisotopic_mass() +
                    self.non_reducing_end.get_monoisotopic_mass())
        else:
            msg = "mass_form must be one of {}. Got {}."
            raise ValueError(msg.format(c.MASS_FORMS, mass_form))

    def search(self, target: float, tolerance: float,
               mass_form: Optional[str] = None,
               legacy_upper_bound: Optional[bool] = None) -> MassSearchResult:
        """
        Finds oligomer compositions compatible with a target mass.

        Parameters
        ----------
        target : float
        tolerance : float
        mass_form : {"monoisotopic", "average"} or None, default=None
            If None, the value is taken from the settings.
        legacy_upper_bound : bool or None, default=None
            See :py:func:`find_compositions`.

        Returns
        -------
        MassSearchResult

        """
        if mass_form is None:
            mass_form = get_setting("search", "mass_form")
        end_mass = self.get_end_mass(mass_form)
        return find_compositions(
            target,
            tolerance,
            self.get_dimensions(),
            mass_form=mass_form,
            end_mass=end_mass,
            legacy_upper_bound=legacy_upper_bound
        )

    def get_element_composition(self, coefficients: Sequence[int]) -> ElementComposition:
        """
        Computes the elemental composition of an oligomer, including the end
        groups.

        Parameters
        ----------
        coefficients : sequence of int
            Number of residues of each monomer, e.g. a row of
            :py:attr:`MassSearchResult.coefficients`.

        Returns
        -------
        ElementComposition

        """
        if len(coefficients) != len(self.monomers):
            msg = "Expected {} coefficients. Got {}."
            raise ValueError(msg.format(len(self.monomers), len(coefficients)))

        total = Counter(self.reducing_end.to_dict())
        total.update(self.non_reducing_end.to_dict())
        for k, composition in zip(coefficients, self.incremental_compositions):
            for symbol, n in composition.to_dict().items():
                total[symbol] += int(k) * n
        return ElementComposition(dict(total), table=self.monomer_table.table)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Creates a DataFrame with the bounds, mass increments and incremental
        composition of each monomer.

        """
        rows = list()
        for dim, composition in zip(self.get_dimensions(),
                                    self.incremental_compositions):
            row = dim._asdict()
            row["composition"] = composition.get_composition_str()
            rows.append(row)
        return pd.DataFrame(rows)
