"""Sphinx configuration for the reviewr-templates API reference."""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

import reviewr_templates  # noqa: E402

project = "Reviewr Templates"
author = "Reviewr Templates contributors"
copyright = f"{date.today():%Y}, {author}"
release = reviewr_templates.__version__
version = ".".join(release.split(".")[:2])

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.napoleon",
    "sphinx.ext.intersphinx",
    "sphinx_autodoc_typehints",
]

autosummary_generate = True
autodoc_member_order = "bysource"
autodoc_typehints = "description"
autodoc_default_options = {
    "members": True,
    "show-inheritance": True,
}

napoleon_google_docstring = True
napoleon_numpy_docstring = False

rst_epilog = """
.. |data_dir_env| replace:: ``REVIEWR_TEMPLATES_DATA_DIR``
.. |manifest| replace:: ``manifest.json``
"""

exclude_patterns = ["_build"]

html_theme = "furo"
html_title = f"Reviewr Templates {release}"

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "click": ("https://click.palletsprojects.com/en/stable/", None),
    "requests": ("https://requests.readthedocs.io/en/latest/", None),
}
