"""
Tools for working with Isotopes and Elements.

Objects
-------
- Isotope
- Element
- TableOfIsotopes

Functions
---------
- get_default_table

Constants
---------
- EM: Mass of the electron.

"""
import json
import logging
import numpy as np
import os.path
import pandas as pd
from typing import Dict, Final, Iterator, List, Optional, Sequence
from .. import _constants as c
from ..exceptions import UnknownElementSymbol
from ..utils import get_setting


EM: Final[float] = 0.00054858  # electron mass
_ABUNDANCE_SUM_TOLERANCE: Final[float] = 1e-3

logger = logging.getLogger(__file__)


class Isotope:
    """
    Representation of an Isotope.

    Attributes
    ----------
    z: int
        Atomic number
    n: int
        Neutron number
    a: int
        Mass number
    m: float
        Exact mass.
    defect: float
        Difference between the exact mass and mass number.
    abundance: float
        Relative abundance of the isotope.
    symbol: str
        Symbol of the chemical element.

    """

    __slots__ = ("z", "n", "a", "m", "defect", "abundance", "symbol")

    def __init__(self, z: int, a: int, m: float, abundance: float, symbol: str):
        self.z = z
        self.n = a - z
        self.a = a
        self.m = m
        self.defect = m - a
        self.abundance = abundance
        self.symbol = symbol

    def __str__(self):
        return "{}{}".format(self.a, self.symbol)

    def __repr__(self):
        return "Isotope({})".format(str(self))


class Element:
    """
    Representation of a chemical element or a pseudo-element.

    Isotopes are sorted by decreasing abundance. The first isotope is used as
    the reference isotope. Only the first `n_significant` isotopes are used to
    compute average masses and isotopic distributions.

    Pseudo-elements are elements with non-natural abundances (e.g. 13C
    enriched carbon). They share isotopes with their natural counterpart, but
    they are different elements.

    Attributes
    ----------
    symbol : str
        Element symbol. Pseudo-elements use a "*" prefix, e.g. "*C".
    name : str
        Element name.
    z : int
        Atomic number.
    isotopes : List[Isotope]
        Isotopes sorted by decreasing abundance.
    n_significant : int
        Number of isotopes considered in computations.
    is_pseudo : bool
        True for pseudo-elements.

    """

    def __init__(
        self,
        symbol: str,
        name: str,
        z: int,
        isotopes: Sequence[Isotope],
        n_significant: Optional[int] = None,
        is_pseudo: bool = False
    ):
        if not isotopes:
            msg = "{} must have at least one isotope.".format(symbol)
            raise ValueError(msg)

        if n_significant is None:
            n_significant = len(isotopes)

        if (n_significant < 1) or (n_significant > len(isotopes)):
            msg = "The number of significant isotopes of {} must be between 1 and {}. Got {}."
            raise ValueError(msg.format(symbol, len(isotopes), n_significant))

        # stable sort, isotopes with equal abundance keep the input order
        self.isotopes = sorted(isotopes, key=lambda x: x.abundance, reverse=True)
        if self.isotopes[0].abundance <= 0.0:
            msg = "The reference isotope of {} must have a positive abundance."
            raise ValueError(msg.format(symbol))

        self.symbol = symbol
        self.name = name
        self.z = z
        self.n_significant = n_significant
        self.is_pseudo = is_pseudo

        total = sum(x.abundance for x in self.isotopes[:n_significant])
        if abs(total - 1.0) > _ABUNDANCE_SUM_TOLERANCE:
            logger.warning(
                "The abundance of the significant isotopes of %s sum %.6f.",
                symbol, total
            )

    def __repr__(self):
        return "Element({})".format(self.symbol)

    def __str__(self):  # pragma: no cover
        return self.symbol

    def get_masses(self) -> np.ndarray:
        """
        Returns the exact mass of the significant isotopes, sorted by abundance.

        """
        return np.array([x.m for x in self.isotopes[:self.n_significant]])

    def get_abundances(self) -> np.ndarray:
        """
        Returns the abundance of the significant isotopes, sorted by abundance.

        """
        return np.array([x.abundance for x in self.isotopes[:self.n_significant]])

    def get_monoisotope(self) -> Isotope:
        """
        Returns the reference isotope, i.e. the most abundant isotope.

        """
        return self.isotopes[0]

    @property
    def monoisotopic_mass(self) -> float:
        return self.isotopes[0].m

    @property
    def nominal_mass(self) -> int:
        return self.isotopes[0].a

    @property
    def average_mass(self) -> float:
        significant = self.isotopes[:self.n_significant]
        return sum(x.m * x.abundance for x in significant)


class TableOfIsotopes:
    """
    Repository of elements and pseudo-elements.

    The order of the elements in the table defines the canonical order used
    by positional coefficient arrays.

    Methods
    -------
    get_element
    get_elements
    get_symbols
    get_names
    with_abundances
    to_dataframe
    from_json

    Examples
    --------
    >>> import oligomass as om
    >>> table = om.chem.get_default_table()
    >>> carbon = table.get_element("C")

    """

    def __init__(self, elements: Sequence[Element]):
        self._symbol_to_element: Dict[str, Element] = dict()
        for el in elements:
            if el.symbol in self._symbol_to_element:
                msg = "Element {} is defined more than once.".format(el.symbol)
                raise ValueError(msg)
            self._symbol_to_element[el.symbol] = el

    def __repr__(self):
        return "TableOfIsotopes({})".format(", ".join(self.get_symbols()))

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._symbol_to_element

    def __iter__(self) -> Iterator[Element]:
        return iter(self._symbol_to_element.values())

    def __len__(self) -> int:
        return len(self._symbol_to_element)

    def get_element(self, symbol: str) -> Element:
        """
        Returns an Element using its symbol.

        Parameters
        ----------
        symbol : str

        Returns
        -------
        Element

        Raises
        ------
        UnknownElementSymbol : if the symbol is not defined in the table.

        Examples
        --------
        >>> import oligomass as om
        >>> table = om.chem.get_default_table()
        >>> enriched_carbon = table.get_element("*C")

        """
        try:
            return self._symbol_to_element[symbol]
        except KeyError:
            msg = "{} is not defined in the table of isotopes.".format(symbol)
            raise UnknownElementSymbol(msg)

    def get_elements(self, pseudo_only: bool = False) -> List[Element]:
        elements = list(self._symbol_to_element.values())
        if pseudo_only:
            elements = [x for x in elements if x.is_pseudo]
        return elements

    def get_symbols(self) -> List[str]:
        return list(self._symbol_to_element)

    def get_names(self) -> List[str]:
        return [x.name for x in self._symbol_to_element.values()]

    def with_abundances(
        self,
        symbol: str,
        abundances: Sequence[float],
        n_significant: Optional[int] = None
    ) -> "TableOfIsotopes":
        """
        Creates a new table where the isotope abundances of an element are
        replaced. The current table is not modified.

        Parameters
        ----------
        symbol : str
            Element symbol.
        abundances : sequence of float
            New abundances, following the current isotope order of the
            element. Missing values are set to zero.
        n_significant : int or None, default=None
            New number of significant isotopes. If None, the current value is
            used.

        Returns
        -------
        TableOfIsotopes

        Examples
        --------
        >>> import oligomass as om
        >>> table = om.chem.get_default_table()
        >>> enriched = table.with_abundances("*C", [0.991, 0.009])

        """
        element = self.get_element(symbol)
        n_isotopes = len(element.isotopes)
        if len(abundances) > n_isotopes:
            msg = "{} has {} isotopes. Got {} abundance values."
            raise ValueError(msg.format(symbol, n_isotopes, len(abundances)))
        if min(abundances) < 0.0:
            msg = "Abundance values must be non-negative."
            raise ValueError(msg)

        padded = list(abundances) + [0.0] * (n_isotopes - len(abundances))
        isotopes = [
            Isotope(x.z, x.a, x.m, p, x.symbol)
            for x, p in zip(element.isotopes, padded)
        ]
        if n_significant is None:
            n_significant = element.n_significant
        new_element = Element(
            element.symbol,
            element.name,
            element.z,
            isotopes,
            n_significant=n_significant,
            is_pseudo=element.is_pseudo
        )
        elements = [new_element if x.symbol == symbol else x for x in self]
        return TableOfIsotopes(elements)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Creates a DataFrame with one row for each significant isotope.

        """
        rows = list()
        for el in self:
            for rank, isotope in enumerate(el.isotopes[:el.n_significant]):
                rows.append({
                    "symbol": el.symbol,
                    "name": el.name,
                    "z": el.z,
                    "pseudo": el.is_pseudo,
                    "rank": rank,
                    "isotope": str(isotope),
                    "mass": isotope.m,
                    "abundance": isotope.abundance,
                })
        return pd.DataFrame(rows)

    @staticmethod
    def from_json(path: str) -> "TableOfIsotopes":
        """
        Creates a table of isotopes from a JSON file.

        Parameters
        ----------
        path : str
            Path to a JSON file. Each key is an element symbol and each value
            is an object with the fields `name`, `z`, `pseudo`,
            `n_significant` and `isotopes`, a list of objects with the fields
            `a`, `m` and `abundance`.

        Returns
        -------
        TableOfIsotopes

        """
        with open(path, "r") as fin:
            isotope_data = json.load(fin)

        elements = list()
        for symbol, data in isotope_data.items():
            isotope_symbol = symbol.lstrip("*")
            isotopes = [
                Isotope(data["z"], x["a"], x["m"], x["abundance"], isotope_symbol)
                for x in data["isotopes"]
            ]
            element = Element(
                symbol,
                data["name"],
                data["z"],
                isotopes,
                n_significant=data.get("n_significant"),
                is_pseudo=data.get("pseudo", False)
            )
            elements.append(element)
        logger.debug("Loaded %d elements from %s.", len(elements), path)
        return TableOfIsotopes(elements)


def get_default_table() -> TableOfIsotopes:
    """
    Reference the default TableOfIsotopes object.

    The table is loaded from the file set in the `isotope_table` setting. If
    the setting is not defined, the file distributed with the package is
    used.

    Examples
    --------
    >>> import oligomass as om
    >>> table = om.chem.get_default_table()

    """
    if _DefaultTable.instance is None:
        path = get_setting("isotope_table")
        if path is None:
            this_dir, _ = os.path.split(__file__)
            path = os.path.join(this_dir, c.ISOTOPE_TABLE_FILENAME)
        _DefaultTable.instance = TableOfIsotopes.from_json(path)
    return _DefaultTable.instance


class _DefaultTable:
    instance = None
