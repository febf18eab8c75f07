"""Sphinx configuration for the stde_jax API reference."""

from __future__ import annotations

import os
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

project = "stde-jax"
author = "stde_jax contributors"
copyright = f"{date.today().year}, {author}"  # noqa: A001

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.napoleon",
    "sphinx.ext.mathjax",
    "sphinx.ext.intersphinx",
]
exclude_patterns = ["_build"]
autosummary_generate = True
# plotting imports matplotlib lazily; it is an optional extra
autodoc_mock_imports = ["matplotlib"]

html_theme = os.environ.get("SPHINX_THEME", "furo")

intersphinx_mapping = {}
if os.environ.get("READTHEDOCS") == "True":
    intersphinx_mapping = {
        "numpy": ("https://numpy.org/doc/stable", None),
        "jax": ("https://jax.readthedocs.io/en/latest", None),
    }
