from oligomass.validation import *
from oligomass.exceptions import InvalidSearchBounds
import numpy as np
import pytest


@pytest.fixture
def example_validator():
    schema = {
        "positive_number": {"is_positive": True},
        "a": {"lower_than": "b"},
        "b": {"lower_or_equal": "c"},
        "c": {"type": "number"},
    }
    return ValidatorWithLowerThan(schema)


def test_is_positive_positive_number(example_validator):
    params = {"positive_number": 5}
    validate(params, example_validator)
    assert True


def test_is_positive_zero(example_validator):
    params = {"positive_number": 0}
    with pytest.raises(ValueError):
        validate(params, example_validator)


def test_is_positive_negative_number(example_validator):
    params = {"positive_number": -1}
    with pytest.raises(ValueError):
        validate(params, example_validator)


def test_lower_than_valid(example_validator):
    # a must be lower than b
    params = {"a": 5, "b": 6}
    validate(params, example_validator)
    assert True


def test_lower_than_invalid(example_validator):
    # a must be lower than b
    params = {"a": 5, "b": 4}
    with pytest.raises(ValueError):
        validate(params, example_validator)


def test_lower_than_invalid_equal(example_validator):
    # a must be lower than b
    params = {"a": 5, "b": 5}
    with pytest.raises(ValueError):
        validate(params, example_validator)


def test_lower_or_equal_valid(example_validator):
    # b must be lower or equal than c
    params = {"b": 5, "c": 7}
    validate(params, example_validator)
    assert True


def test_lower_or_equal_valid_equal(example_validator):
    # b must be lower or equal than c
    params = {"b": 5, "c": 5}
    validate(params, example_validator)
    assert True


def test_lower_or_equal_invalid(example_validator):
    # b must be lower or equal than c
    params = {"b": 8, "c": 7}
    with pytest.raises(ValueError):
        validate(params, example_validator)


def test_validate_custom_exception(example_validator):
    params = {"positive_number": -1}
    with pytest.raises(InvalidSearchBounds):
        validate(params, example_validator, exception=InvalidSearchBounds)


def test_validate_distribution_params_valid():
    params = {"cutoff": 1e-5, "coverage": 0.999}
    assert validate_distribution_params(params) == params


@pytest.mark.parametrize(
    "params",
    [
        {"cutoff": -1e-5, "coverage": 0.999},
        {"cutoff": 1.1, "coverage": 0.999},
        {"cutoff": 1e-5, "coverage": -0.1},
        {"cutoff": "1e-5", "coverage": 0.999},
    ]
)
def test_validate_distribution_params_invalid(params):
    with pytest.raises(ValueError):
        validate_distribution_params(params)


def test_validate_spectrum_params_valid():
    params = {"charge": -2, "mz_step": 0.01, "fwhm": 0.1, "y_threshold": 0.0,
              "mz_min": None, "mz_max": None}
    validate_spectrum_params(params)
    assert True


def test_validate_search_params_valid():
    params = {"target": 342.0, "tolerance": 0.5, "mass_form": "average",
              "end_mass": 0.0, "legacy_upper_bound": False}
    validate_search_params(params)
    assert True


def test_search_dimension_schema_minimum_greater_than_maximum():
    validator = ValidatorWithLowerThan(search_dimension_schema())
    params = {"name": "Hex", "minimum": 4, "maximum": 2,
              "monoisotopic_increment": 162.05}
    with pytest.raises(ValueError):
        validate(params, validator)


def test_settings_schema_invalid_section():
    validator = ValidatorWithLowerThan(settings_schema())
    params = {"distribution": {"cutoff": 2.0}}
    with pytest.raises(ValueError):
        validate(params, validator)


def test_validate_numpy_scalars_are_converted():
    params = {"cutoff": np.float32(1e-5), "coverage": np.float64(0.999)}
    normalized = validate_distribution_params(params)
    assert type(normalized["cutoff"]) is float
    assert type(normalized["coverage"]) is float


def test_search_dimension_schema_numpy_integers():
    validator = ValidatorWithLowerThan(search_dimension_schema())
    params = {"name": "Hex", "minimum": np.int64(0), "maximum": np.int32(4),
              "monoisotopic_increment": np.float64(162.05)}
    normalized = validate(params, validator)
    assert type(normalized["maximum"]) is int
