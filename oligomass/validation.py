"""
Validation functions for isotopolog distributions, spectra, mass searches
and settings.
"""


import cerberus
import numbers
from typing import Type
from . import _constants as c


def validate(params: dict, validator: cerberus.Validator,
             exception: Type[Exception] = ValueError) -> dict:
    """
    Function used to validate parameters.

    Parameters
    ----------
    params: dict
    validator: cerberus.Validator
    exception: Exception subclass, default=ValueError
        Exception type raised when the validation fails.

    Returns
    -------
    dict: Validated and normalized parameters. numpy scalars are converted to
    int or float.

    Raises
    ------
    ValueError: if any of the parameters are invalid.
    """
    params = {k: _to_builtin(v) for k, v in params.items()}
    normalized = validator.normalized(params)
    if normalized is None or not validator.validate(normalized):
        msg = ""
        for field, e_msgs in validator.errors.items():
            for e_msg in e_msgs:
                msg += "{}: {}\n".format(field, e_msg)
        raise exception(msg)
    return normalized


def _to_builtin(x):
    if isinstance(x, bool):
        return x
    elif isinstance(x, numbers.Integral):
        return int(x)
    elif isinstance(x, numbers.Real):
        return float(x)
    return x


class ValidatorWithLowerThan(cerberus.Validator):
    def _validate_lower_than(self, other, field, value):
        """
        Tests if a value is lower than the value of other field.

        The rule's arguments are validated against this schema:
        {"type": "string"}
        """
        if (other not in self.document) or (self.document[other] is None):
            return False
        if value >= self.document[other]:
            msg = "{} must be lower than {}".format(field, other)
            self._error(field, msg)

    def _validate_lower_or_equal(self, other, field, value):
        """
        Tests if a value is lower or equal than the value of other field.

        The rule's arguments are validated against this schema:
        {"type": "string"}
        """
        if (other not in self.document) or (self.document[other] is None):
            return False
        if value > self.document[other]:
            msg = "{}, must be lower or equal than {}".format(field, other)
            self._error(field, msg)

    def _validate_is_positive(self, is_positive, field, value):
        """
        Tests if a value is positive

        The rule's arguments are validated against this schema:
        {"type": "boolean"}
        """
        if is_positive and (value is not None) and (value <= 0):
            msg = "Must be a positive number"
            self._error(field, msg)


def distribution_schema() -> dict:
    schema = {
        "cutoff": {"type": "number", "min": 0.0, "max": 1.0},
        "coverage": {"type": "number", "min": 0.0},
    }
    return schema


def validate_distribution_params(params: dict) -> dict:
    validator = ValidatorWithLowerThan(distribution_schema())
    return validate(params, validator)


def spectrum_schema() -> dict:
    schema = {
        "charge": {"type": "integer", "forbidden": [0]},
        "mz_step": {"type": "number", "is_positive": True, "nullable": True},
        "fwhm": {"type": "number", "is_positive": True},
        "y_threshold": {"type": "number", "min": 0.0},
        "mz_min": {"type": "number", "nullable": True,
                   "lower_than": "mz_max"},
        "mz_max": {"type": "number", "nullable": True},
    }
    return schema


def validate_spectrum_params(params: dict) -> dict:
    validator = ValidatorWithLowerThan(spectrum_schema())
    return validate(params, validator)


def search_schema() -> dict:
    schema = {
        "target": {"type": "number", "is_positive": True},
        "tolerance": {"type": "number", "is_positive": True},
        "mass_form": {"type": "string", "allowed": c.MASS_FORMS},
        "end_mass": {"type": "number", "min": 0.0},
        "legacy_upper_bound": {"type": "boolean"},
    }
    return schema


def validate_search_params(params: dict) -> dict:
    validator = ValidatorWithLowerThan(search_schema())
    return validate(params, validator)


def search_dimension_schema() -> dict:
    schema = {
        "name": {"type": "string", "empty": False},
        "minimum": {"type": "integer", "min": 0, "lower_or_equal": "maximum"},
        "maximum": {"type": "integer", "min": 0},
        "monoisotopic_increment": {"type": "number", "is_positive": True},
        "average_increment": {"type": "number", "is_positive": True},
    }
    return schema


def settings_schema() -> dict:
    distribution = distribution_schema()
    spectrum = {k: v for k, v in spectrum_schema().items()
                if k in ["mz_step", "fwhm", "y_threshold"]}
    spectrum["mz_step"] = {"type": "number", "is_positive": True}
    search = {
        "mass_form": {"type": "string", "allowed": c.MASS_FORMS},
        "legacy_upper_bound": {"type": "boolean"},
    }
    schema = {
        "distribution": {"type": "dict", "schema": distribution},
        "spectrum": {"type": "dict", "schema": spectrum},
        "search": {"type": "dict", "schema": search},
        "isotope_table": {"type": "string", "nullable": True},
        "monomer_table": {"type": "string", "nullable": True},
    }
    return schema
