# -*- coding: utf-8 -*-
"""
Settings management and functions used in different modules.

Functions
---------
get_settings
get_settings_path
get_package_file
get_progress_bar

"""

import json
import logging
import os.path
from copy import deepcopy
from functools import lru_cache
from typing import Optional
import tqdm
from . import _constants as c
from . import validation as val
from .exceptions import InvalidSettings

logger = logging.getLogger(__file__)


def get_package_file(filename: str) -> str:
    """
    Returns the path to a data file distributed with the package.

    """
    this_dir, _ = os.path.split(__file__)
    return os.path.join(this_dir, filename)


def get_settings_path() -> Optional[str]:
    """
    Returns the path of the user settings file, or None if it doesn't exist.

    The path is taken from the OLIGOMASS_SETTINGS environment variable. If it
    is not set, ``~/.oligomass/settings.json`` is used.

    """
    path = os.environ.get(c.SETTINGS_ENV_VAR)
    if path is None:
        home = os.path.expanduser("~")
        path = os.path.join(home, c.SETTINGS_DIR, c.SETTINGS_FILENAME)
    if os.path.isfile(path):
        return path
    return None


@lru_cache(maxsize=None)
def get_settings() -> dict:
    """
    Loads the package settings.

    Default values are read from the settings file distributed with the
    package and updated with the values in the user settings file, if it
    exists.

    Returns
    -------
    settings : dict

    Raises
    ------
    InvalidSettings : if the merged settings are not valid.

    """
    with open(get_package_file(c.SETTINGS_FILENAME), "r") as fin:
        settings = json.load(fin)

    user_path = get_settings_path()
    if user_path is not None:
        logger.debug("Loading user settings from %s", user_path)
        with open(user_path, "r") as fin:
            try:
                user_settings = json.load(fin)
            except json.JSONDecodeError as e:
                msg = "{} is not a valid JSON file: {}".format(user_path, e)
                raise InvalidSettings(msg)
        settings = _merge_settings(settings, user_settings)

    validator = val.ValidatorWithLowerThan(val.settings_schema())
    return val.validate(settings, validator, exception=InvalidSettings)


def get_setting(section: str, key: Optional[str] = None):
    """
    Returns a copy of a setting value.

    Parameters
    ----------
    section : str
        A top level key of the settings, e.g. "distribution".
    key : str or None, default=None
        A key inside the section. If None, the whole section is returned.

    """
    value = get_settings()[section]
    if key is not None:
        value = value[key]
    return deepcopy(value)


def _merge_settings(default: dict, user: dict) -> dict:
    merged = deepcopy(default)
    for k, v in user.items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            merged[k].update(v)
        else:
            merged[k] = v
    return merged


def get_progress_bar():
    return tqdm.tqdm
