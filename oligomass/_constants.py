from typing import Final, List

# mass forms
MONOISOTOPIC: Final[str] = "monoisotopic"
AVERAGE: Final[str] = "average"
MASS_FORMS: Final[List[str]] = [MONOISOTOPIC, AVERAGE]

# derivative types
ETHER: Final[str] = "e"
ACYL: Final[str] = "a"
DERIVATIVE_TYPES: Final[List[str]] = [ETHER, ACYL]

# reducing end structures
REDUCING: Final[str] = "reducing"
ALDITOL: Final[str] = "alditol"
DERIVATIZED: Final[str] = "derivatized"
END_STRUCTURES: Final[List[str]] = [REDUCING, ALDITOL, DERIVATIZED]

# gaussian peak shape
FWHM_TO_SIGMA: Final[float] = 0.4247

# data and settings files
ISOTOPE_TABLE_FILENAME: Final[str] = "isotopes.json"
MONOMER_TABLE_FILENAME: Final[str] = "monomers.json"
SETTINGS_FILENAME: Final[str] = "settings.json"
SETTINGS_DIR: Final[str] = ".oligomass"
SETTINGS_ENV_VAR: Final[str] = "OLIGOMASS_SETTINGS"

# data frame columns
MASS: Final[str] = "mass"
ABUNDANCE: Final[str] = "abundance"
CUMULATIVE: Final[str] = "cumulative"
LABEL: Final[str] = "label"
POPULATION: Final[str] = "population"
MZ: Final[str] = "mz"
SPINT: Final[str] = "spint"
ERROR: Final[str] = "error"
