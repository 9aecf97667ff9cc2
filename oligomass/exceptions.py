"""Exceptions raised by oligomass."""


class InvalidComposition(ValueError):
    """Exception raised when an element composition has repeated elements, negative or mismatched coefficients."""


class UnknownElementSymbol(ValueError):
    """Exception raised when a symbol is not defined in a table of isotopes."""


class MalformedFormulaString(ValueError):
    """Exception raised when a composition string cannot be parsed."""


class InvalidSearchBounds(ValueError):
    """Exception raised when a search dimension has invalid bounds or a non-positive mass increment."""


class UnknownMonomer(ValueError):
    """Exception raised when a monomer or derivative abbreviation is not defined in a monomer table."""


class InvalidSettings(ValueError):
    """Exception raised when the settings file contains invalid values."""
