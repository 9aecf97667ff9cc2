"""
Monomers, derivatives and end groups used to build oligomer compositions.

Compositions of monomers are given for the anhydro form, i.e. the residue
found in a polymer. `e_sites` and `a_sites` are the number of etherification
and acylation sites of each residue in a polymer.

Objects
-------
- MonomerType
- Derivative
- MonomerTable

Functions
---------
- get_default_monomer_table

"""

import json
import logging
import pandas as pd
from typing import Dict, List, Optional, Sequence, Tuple, Union
from . import _constants as c
from .chem import ElementComposition, TableOfIsotopes, get_default_table
from .exceptions import UnknownMonomer
from .utils import get_package_file, get_setting

logger = logging.getLogger(__file__)


class MonomerType:
    """
    A residue of an oligomer.

    Attributes
    ----------
    name : str
    abbrev : str
        Abbreviation used to reference the monomer.
    composition : ElementComposition
        Composition of the anhydro residue.
    e_sites : int
        Number of etherification sites.
    a_sites : int
        Number of acylation sites.
    monoisotopic_increment : float
    average_increment : float

    """

    def __init__(self, name: str, abbrev: str, composition: ElementComposition,
                 e_sites: int, a_sites: int):
        self.name = name
        self.abbrev = abbrev
        self.composition = composition
        self.e_sites = e_sites
        self.a_sites = a_sites
        self.monoisotopic_increment = composition.get_monoisotopic_mass()
        self.average_increment = composition.get_average_mass()

    def __repr__(self):
        return "MonomerType({})".format(self.abbrev)

    def get_sites(self, derivative: "Derivative") -> int:
        """
        Number of sites available for a derivative.

        """
        if derivative.type == c.ACYL:
            return self.a_sites
        return self.e_sites


class Derivative:
    """
    A group that replaces the hydrogen atom of a hydroxyl group.

    Attributes
    ----------
    name : str
    abbrev : str
    composition : ElementComposition
    type : {"e", "a"}
        "e" for ether derivatives and "a" for acyl derivatives.
    monoisotopic_increment : float
    average_increment : float

    """

    def __init__(self, name: str, abbrev: str, composition: ElementComposition,
                 type: str):
        if type not in c.DERIVATIVE_TYPES:
            msg = "Derivative type must be one of {}. Got {}."
            raise ValueError(msg.format(c.DERIVATIVE_TYPES, type))
        self.name = name
        self.abbrev = abbrev
        self.composition = composition
        self.type = type
        self.monoisotopic_increment = composition.get_monoisotopic_mass()
        self.average_increment = composition.get_average_mass()

    def __repr__(self):
        return "Derivative({})".format(self.abbrev)


class MonomerTable:
    """
    Repository of monomer types and derivatives.

    Methods
    -------
    get_monomer
    get_derivative
    get_monomers
    get_derivatives
    get_incremental_composition
    make_end_compositions
    to_dataframe
    from_json

    Examples
    --------
    >>> import oligomass as om
    >>> monomer_table = om.get_default_monomer_table()
    >>> monomer_table.get_incremental_composition("Hex", "Me")
    ElementComposition(C 9 H 16 O 5)

    """

    def __init__(self, monomers: Sequence[MonomerType],
                 derivatives: Sequence[Derivative], table: TableOfIsotopes):
        self.table = table
        self._monomers: Dict[str, MonomerType] = _index_by_abbrev(monomers)
        self._derivatives: Dict[str, Derivative] = _index_by_abbrev(derivatives)

    def __repr__(self):
        msg = "MonomerTable(n_monomers={}, n_derivatives={})"
        return msg.format(len(self._monomers), len(self._derivatives))

    def get_monomer(self, abbrev: str) -> MonomerType:
        try:
            return self._monomers[abbrev]
        except KeyError:
            msg = "{} is not a valid monomer abbreviation.".format(abbrev)
            raise UnknownMonomer(msg)

    def get_derivative(self, abbrev: str) -> Derivative:
        try:
            return self._derivatives[abbrev]
        except KeyError:
            msg = "{} is not a valid derivative abbreviation.".format(abbrev)
            raise UnknownMonomer(msg)

    def get_monomers(self) -> List[MonomerType]:
        return list(self._monomers.values())

    def get_derivatives(self) -> List[Derivative]:
        return list(self._derivatives.values())

    def get_incremental_composition(
        self,
        monomer: Union[str, MonomerType],
        derivative: Union[str, Derivative]
    ) -> ElementComposition:
        """
        Computes the composition of a derivatized residue.

        For each site, a hydrogen atom is replaced by the derivative. Ether
        derivatives use the etherification sites of the monomer and acyl
        derivatives use the acylation sites. A negative number of sites
        removes derivatives and restores hydrogen atoms.

        Parameters
        ----------
        monomer : str or MonomerType
            Monomer abbreviation or object.
        derivative : str or Derivative
            Derivative abbreviation or object.

        Returns
        -------
        ElementComposition

        """
        if isinstance(monomer, str):
            monomer = self.get_monomer(monomer)
        if isinstance(derivative, str):
            derivative = self.get_derivative(derivative)

        n_sites = monomer.get_sites(derivative)
        composition = monomer.composition.copy()
        if n_sites >= 0:
            for _ in range(n_sites):
                composition.remove_atoms("H", 1)
                composition.add_composition_atoms(derivative.composition)
        else:
            for _ in range(-n_sites):
                composition.add_atoms("H", 1)
                composition.remove_composition_atoms(derivative.composition)
        return composition

    def make_end_compositions(
        self,
        derivative: Union[str, Derivative],
        end_structure: str = c.REDUCING
    ) -> Tuple[ElementComposition, ElementComposition]:
        """
        Creates the compositions of the end groups of a derivatized oligomer.

        Parameters
        ----------
        derivative : str or Derivative
            Derivative abbreviation or object.
        end_structure : {"reducing", "alditol", "derivatized"}
            Structure of the reducing end. "reducing" is a free reducing end
            (H 1 O 1). "alditol" is a reduced end with two derivatized sites.
            "derivatized" is a reducing end where the hydroxyl group is
            derivatized.

        Returns
        -------
        reducing_end : ElementComposition
        non_reducing_end : ElementComposition

        """
        if isinstance(derivative, str):
            derivative = self.get_derivative(derivative)

        if end_structure == c.REDUCING:
            reducing_end = ElementComposition("H 1 O 1", table=self.table)
        elif end_structure == c.ALDITOL:
            reducing_end = ElementComposition("H 1 O 1", table=self.table)
            reducing_end.add_composition_atoms(derivative.composition)
            reducing_end.add_composition_atoms(derivative.composition)
        elif end_structure == c.DERIVATIZED:
            reducing_end = ElementComposition("O 1", table=self.table)
            reducing_end.add_composition_atoms(derivative.composition)
        else:
            msg = "end_structure must be one of {}. Got {}."
            raise ValueError(msg.format(c.END_STRUCTURES, end_structure))
        non_reducing_end = derivative.composition.copy()
        return reducing_end, non_reducing_end

    def to_dataframe(self) -> pd.DataFrame:
        """
        Creates a DataFrame with one row for each monomer and derivative.

        """
        rows = list()
        for m in self._monomers.values():
            rows.append({
                "kind": "monomer",
                "name": m.name,
                "abbrev": m.abbrev,
                "monoisotopic_increment": m.monoisotopic_increment,
                "average_increment": m.average_increment,
                "e_sites": m.e_sites,
                "a_sites": m.a_sites,
                "type": None,
                "composition": m.composition.get_composition_str()
            })
        for d in self._derivatives.values():
            rows.append({
                "kind": "derivative",
                "name": d.name,
                "abbrev": d.abbrev,
                "monoisotopic_increment": d.monoisotopic_increment,
                "average_increment": d.average_increment,
                "e_sites": None,
                "a_sites": None,
                "type": d.type,
                "composition": d.composition.get_composition_str()
            })
        return pd.DataFrame(rows)

    @staticmethod
    def from_json(path: str, table: Optional[TableOfIsotopes] = None) -> "MonomerTable":
        """
        Creates a monomer table from a JSON file.

        Parameters
        ----------
        path : str
            Path to a JSON file with the fields `monomers` and `derivatives`.
        table : TableOfIsotopes or None, default=None
            Table used to resolve element symbols. If None, the default table
            is used.

        Returns
        -------
        MonomerTable

        """
        if table is None:
            table = get_default_table()

        with open(path, "r") as fin:
            data = json.load(fin)

        monomers = list()
        for x in data["monomers"]:
            composition = ElementComposition(x["composition"], table=table)
            monomer = MonomerType(x["name"], x["abbrev"], composition,
                                  x["e_sites"], x["a_sites"])
            monomers.append(monomer)

        derivatives = list()
        for x in data["derivatives"]:
            composition = ElementComposition(x["composition"], table=table)
            derivative = Derivative(x["name"], x["abbrev"], composition, x["type"])
            derivatives.append(derivative)
        logger.debug(
            "Loaded %d monomers and %d derivatives from %s.",
            len(monomers), len(derivatives), path
        )
        return MonomerTable(monomers, derivatives, table)


def get_default_monomer_table() -> MonomerTable:
    """
    Reference the default MonomerTable object.

    The table is loaded from the file set in the `monomer_table` setting. If
    the setting is not defined, the file distributed with the package is
    used.

    """
    if _DefaultMonomerTable.instance is None:
        path = get_setting("monomer_table")
        if path is None:
            path = get_package_file(c.MONOMER_TABLE_FILENAME)
        _DefaultMonomerTable.instance = MonomerTable.from_json(path)
    return _DefaultMonomerTable.instance


class _DefaultMonomerTable:
    instance = None


def _index_by_abbrev(items) -> dict:
    index = dict()
    for x in items:
        if x.abbrev in index:
            msg = "{} is defined more than once.".format(x.abbrev)
            raise ValueError(msg)
        index[x.abbrev] = x
    return index
