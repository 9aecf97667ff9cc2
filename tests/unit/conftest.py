from oligomass import utils
from oligomass.chem import ElementComposition, get_default_table
from oligomass.monomers import get_default_monomer_table
import pytest


@pytest.fixture
def table():
    return get_default_table()


@pytest.fixture
def monomer_table():
    return get_default_monomer_table()


@pytest.fixture
def glucose():
    return ElementComposition("C 6 H 12 O 6")


@pytest.fixture
def clear_settings_cache():
    utils.get_settings.cache_clear()
    yield
    utils.get_settings.cache_clear()
