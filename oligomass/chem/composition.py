"""
Tools for working with elemental compositions.

Objects
-------

- ElementComposition

"""


import numbers
from typing import Dict, Iterator, List, Optional, Sequence, Tuple
from .atoms import Element, TableOfIsotopes, get_default_table
from ..exceptions import InvalidComposition, MalformedFormulaString


class ElementComposition:
    """
    Represents an elemental composition as an ordered mapping from elements to
    non-negative integer coefficients.

    Elements are kept in insertion order. Elements with a zero coefficient are
    not stored.

    Attributes
    ----------
    table: TableOfIsotopes
        Table used to resolve element symbols.

    Methods
    -------
    add_composition_atoms
    remove_composition_atoms
    add_atoms
    remove_atoms
    get_coefficient
    get_monoisotopic_mass
    get_average_mass
    get_composition_str
    copy
    to_dict

    Examples
    --------
    >>> ElementComposition("C 6 H 12 O 6")
    ElementComposition(C 6 H 12 O 6)
    >>> ElementComposition(["C 6", "H 12", "O 6"])
    ElementComposition(C 6 H 12 O 6)
    >>> ElementComposition(["C", "H", "O"], [6, 12, 6])
    ElementComposition(C 6 H 12 O 6)
    >>> ElementComposition({"C": 6, "H": 12, "O": 6})
    ElementComposition(C 6 H 12 O 6)

    Positional coefficients follow the element order of the table:

    >>> ElementComposition([2, 0, 0, 0, 1])
    ElementComposition(H 2 O 1)

    """

    def __init__(self, *args, table: Optional[TableOfIsotopes] = None):
        if table is None:
            table = get_default_table()
        self.table = table
        self._coefficients: Dict[str, int] = dict()

        if len(args) == 0:
            pairs = list()
        elif len(args) == 1:
            pairs = _parse_single_argument(args[0], table)
        elif len(args) == 2:
            symbols, coefficients = args
            if len(symbols) != len(coefficients):
                msg = "The number of symbols and coefficients must be equal. Got {} and {}."
                raise InvalidComposition(msg.format(len(symbols), len(coefficients)))
            pairs = list(zip(symbols, coefficients))
        else:
            msg = "ElementComposition takes at most two positional arguments."
            raise InvalidComposition(msg)

        seen = set()
        for symbol, coefficient in pairs:
            if symbol in seen:
                msg = "{} is repeated in the composition.".format(symbol)
                raise InvalidComposition(msg)
            seen.add(symbol)
            self._set(symbol, _validate_coefficient(coefficient))

    def __repr__(self):
        return "ElementComposition({})".format(self.get_composition_str())

    def __str__(self):
        return self.get_composition_str()

    def __len__(self) -> int:
        return len(self._coefficients)

    def __iter__(self) -> Iterator[Tuple[Element, int]]:
        for symbol, coefficient in self._coefficients.items():
            yield self.table.get_element(symbol), coefficient

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._coefficients

    def __eq__(self, other: "ElementComposition"):
        if not isinstance(other, ElementComposition):
            return NotImplemented
        return self._coefficients == other._coefficients

    def __add__(self, other: "ElementComposition") -> "ElementComposition":
        if not isinstance(other, ElementComposition):
            msg = "sum operation is defined only for ElementComposition objects"
            raise TypeError(msg)
        result = self.copy()
        result.add_composition_atoms(other)
        return result

    def __sub__(self, other: "ElementComposition") -> "ElementComposition":
        if not isinstance(other, ElementComposition):
            msg = "subtraction operation is defined only for ElementComposition objects"
            raise TypeError(msg)
        result = self.copy()
        result.remove_composition_atoms(other)
        return result

    def _set(self, symbol: str, coefficient: int):
        # raises UnknownElementSymbol for symbols not in the table
        self.table.get_element(symbol)
        if coefficient > 0:
            self._coefficients[symbol] = coefficient
        else:
            self._coefficients.pop(symbol, None)

    def add_composition_atoms(self, other: "ElementComposition"):
        """
        Adds the atoms of other composition. Coefficients of shared elements
        are summed and new elements are appended.

        """
        for symbol, coefficient in other._coefficients.items():
            self._set(symbol, self._coefficients.get(symbol, 0) + coefficient)

    def remove_composition_atoms(self, other: "ElementComposition"):
        """
        Removes the atoms of other composition. Coefficients are clamped at
        zero and elements that are not in the composition are ignored.

        """
        for symbol, coefficient in other._coefficients.items():
            if symbol in self._coefficients:
                remainder = self._coefficients[symbol] - coefficient
                self._set(symbol, max(remainder, 0))

    def add_atoms(self, symbol: str, n: int) -> int:
        """
        Adds `n` atoms of an element.

        Parameters
        ----------
        symbol : str
        n : int
            Non-negative number of atoms.

        Returns
        -------
        int : the new coefficient of the element.

        """
        n = _validate_coefficient(n)
        count = self._coefficients.get(symbol, 0) + n
        self._set(symbol, count)
        return count

    def remove_atoms(self, symbol: str, n: int) -> int:
        """
        Removes `n` atoms of an element. The stored coefficient is clamped at
        zero.

        Parameters
        ----------
        symbol : str
        n : int
            Non-negative number of atoms.

        Returns
        -------
        int : the difference between the previous coefficient and `n`. It may
        be negative.

        """
        n = _validate_coefficient(n)
        remainder = self._coefficients.get(symbol, 0) - n
        self._set(symbol, max(remainder, 0))
        return remainder

    def get_coefficient(self, symbol: str) -> int:
        self.table.get_element(symbol)
        return self._coefficients.get(symbol, 0)

    def get_symbols(self) -> List[str]:
        return list(self._coefficients)

    def get_monoisotopic_mass(self) -> float:
        """
        Computes the monoisotopic mass, using the reference isotope of each
        element.

        Examples
        --------
        >>> ElementComposition("H 2 O 1").get_monoisotopic_mass()
        18.010564684

        """
        return sum(el.monoisotopic_mass * k for el, k in self)

    def get_average_mass(self) -> float:
        """
        Computes the average mass, using the significant isotopes of each
        element.

        """
        return sum(el.average_mass * k for el, k in self)

    def get_composition_str(self) -> str:
        """
        Serializes the composition as symbol-coefficient pairs separated by
        blanks, e.g. "C 6 H 12 O 6".

        """
        tokens = ["{} {}".format(k, v) for k, v in self._coefficients.items()]
        return " ".join(tokens)

    def copy(self, table: Optional[TableOfIsotopes] = None) -> "ElementComposition":
        """
        Creates a new composition from the string representation.

        Parameters
        ----------
        table : TableOfIsotopes or None, default=None
            Table used to resolve symbols in the new composition. If None, the
            table of the current composition is used.

        """
        if table is None:
            table = self.table
        return ElementComposition(self.get_composition_str(), table=table)

    def to_dict(self) -> Dict[str, int]:
        return dict(self._coefficients)


def _validate_coefficient(coefficient) -> int:
    if isinstance(coefficient, bool) or not isinstance(coefficient, numbers.Integral):
        msg = "Coefficients must be integers. Got {}.".format(coefficient)
        raise InvalidComposition(msg)
    if coefficient < 0:
        msg = "Coefficients must be non-negative. Got {}.".format(coefficient)
        raise InvalidComposition(msg)
    return int(coefficient)


def _is_integer_str(token: str) -> bool:
    return token.lstrip("+-").isdigit()


def _parse_single_argument(arg, table: TableOfIsotopes) -> List[Tuple[str, int]]:
    if isinstance(arg, str):
        tokens = arg.split()
        if tokens and all(_is_integer_str(x) for x in tokens):
            return _parse_positional([int(x) for x in tokens], table)
        return _parse_composition_str(arg)
    elif isinstance(arg, dict):
        return list(arg.items())
    elif isinstance(arg, ElementComposition):
        return list(arg.to_dict().items())

    try:
        values = list(arg)
    except TypeError:
        msg = "Cannot create a composition from {}.".format(arg)
        raise InvalidComposition(msg)

    if all(isinstance(x, str) for x in values):
        pairs = list()
        for x in values:
            pairs.extend(_parse_composition_str(x))
        return pairs
    elif all(isinstance(x, numbers.Integral) for x in values):
        return _parse_positional(values, table)
    else:
        msg = "Composition lists must contain only strings or only integers."
        raise InvalidComposition(msg)


def _parse_composition_str(composition: str) -> List[Tuple[str, int]]:
    """
    Parse a string of symbol-coefficient pairs separated by blanks into a list
    of (symbol, coefficient) tuples.

    """
    tokens = composition.split()
    if len(tokens) % 2:
        msg = "Expected symbol-coefficient pairs. Got {!r}.".format(composition)
        raise MalformedFormulaString(msg)

    pairs = list()
    for symbol, coefficient in zip(tokens[::2], tokens[1::2]):
        if not _is_integer_str(coefficient):
            msg = "{!r} is not a valid coefficient for {}.".format(coefficient, symbol)
            raise MalformedFormulaString(msg)
        pairs.append((symbol, int(coefficient)))
    return pairs


def _parse_positional(
    coefficients: Sequence[int],
    table: TableOfIsotopes
) -> List[Tuple[str, int]]:
    symbols = table.get_symbols()
    if len(coefficients) > len(symbols):
        msg = "The table has {} elements. Got {} coefficients."
        raise InvalidComposition(msg.format(len(symbols), len(coefficients)))
    return [(s, k) for s, k in zip(symbols, coefficients) if k != 0]
