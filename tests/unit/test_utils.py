from oligomass import utils
from oligomass.exceptions import InvalidSettings
import json
import os
import pytest


@pytest.fixture
def user_settings_path(tmp_path, monkeypatch, clear_settings_cache):
    path = tmp_path / "settings.json"
    monkeypatch.setenv("OLIGOMASS_SETTINGS", str(path))
    return path


def test_get_package_file():
    path = utils.get_package_file("settings.json")
    assert os.path.isfile(path)


def test_get_settings_defaults(tmp_path, monkeypatch, clear_settings_cache):
    monkeypatch.setenv("OLIGOMASS_SETTINGS", str(tmp_path / "missing.json"))
    settings = utils.get_settings()
    assert settings["distribution"]["cutoff"] == 1e-5
    assert settings["distribution"]["coverage"] == 0.999
    assert settings["spectrum"]["fwhm"] == 0.1
    assert settings["search"]["legacy_upper_bound"] is False
    assert settings["isotope_table"] is None


def test_get_settings_path_missing_file(tmp_path, monkeypatch):
    monkeypatch.setenv("OLIGOMASS_SETTINGS", str(tmp_path / "missing.json"))
    assert utils.get_settings_path() is None


def test_get_settings_user_file_is_merged(user_settings_path):
    user_settings_path.write_text(json.dumps({"distribution": {"cutoff": 1e-3}}))
    settings = utils.get_settings()
    assert settings["distribution"]["cutoff"] == 1e-3
    # values not defined in the user file keep their defaults
    assert settings["distribution"]["coverage"] == 0.999
    assert utils.get_setting("distribution", "cutoff") == 1e-3


def test_get_settings_invalid_json(user_settings_path):
    user_settings_path.write_text("{cutoff: ")
    with pytest.raises(InvalidSettings):
        utils.get_settings()


def test_get_settings_invalid_value(user_settings_path):
    user_settings_path.write_text(json.dumps({"spectrum": {"fwhm": -1.0}}))
    with pytest.raises(InvalidSettings):
        utils.get_settings()


def test_get_settings_unknown_key(user_settings_path):
    user_settings_path.write_text(json.dumps({"plot": {"theme": "dark"}}))
    with pytest.raises(InvalidSettings):
        utils.get_settings()


def test_get_setting_returns_a_copy():
    section = utils.get_setting("distribution")
    section["cutoff"] = 0.5
    assert utils.get_setting("distribution", "cutoff") != 0.5


def test_get_progress_bar():
    bar = utils.get_progress_bar()
    assert list(bar(range(3))) == [0, 1, 2]
