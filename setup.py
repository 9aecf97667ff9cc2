PACKAGE_NAME = "oligomass"
VERSION = "0.1.0"
LICENSE = 'BSD (3-clause)'
AUTHOR = "oligomass developers"
AUTHOR_EMAIL = ""
MAINTAINER = AUTHOR
MAINTAINER_EMAIL = AUTHOR_EMAIL
URL = ""
DESCRIPTION = "Isotopic fine structure and oligomer composition search from mass values"

with open("README.md") as fin:
    LONG_DESCRIPTION = fin.read()
LONG_DESCRIPTION_CONTENT_TYPE = "text/markdown"

CLASSIFIERS = [
    "License :: OSI Approved :: BSD License",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
    "Topic :: Scientific/Engineering :: Chemistry",
]

PYTHON_REQUIRES = ">=3.9"

INSTALL_REQUIRES = [
    "Cerberus>=1.3",
    "joblib>=1.1",
    "numpy>=1.22",
    "pandas>=1.4.1",
    "scipy>=1.8",
    "tqdm>=4.0",
]

EXTRAS_REQUIRE = {
    "test": ["pytest"],
}

if __name__ == "__main__":
    from setuptools import setup, find_packages
    from sys import version_info

    if version_info[:2] < (3, 9):
        msg = "oligomass requires Python >= 3.9."
        raise RuntimeError(msg)

    setup(name=PACKAGE_NAME,
          version=VERSION,
          author=AUTHOR,
          author_email=AUTHOR_EMAIL,
          maintainer=MAINTAINER,
          maintainer_email=MAINTAINER_EMAIL,
          license=LICENSE,
          description=DESCRIPTION,
          long_description=LONG_DESCRIPTION,
          long_description_content_type=LONG_DESCRIPTION_CONTENT_TYPE,
          url=URL,
          classifiers=CLASSIFIERS,
          packages=find_packages(include=["oligomass", "oligomass.*"]),
          python_requires=PYTHON_REQUIRES,
          install_requires=INSTALL_REQUIRES,
          extras_require=EXTRAS_REQUIRE,
          package_data={"oligomass": ["*.json", "chem/*.json"]},
          include_package_data=True,
          tests_require=["pytest"],)
