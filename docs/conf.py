# Sphinx configuration for the mediaproxy API reference.

import os
import sys

sys.path.insert(0, os.path.abspath(".."))

project = "mediaproxy"
author = "mediaproxy contributors"
release = "0.1.0"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",  # Google style docstrings
    "myst_parser",  # README.md
]

source_suffix = {
    ".rst": "restructuredtext",
    ".md": "markdown",
}

autodoc_default_options = {
    "members": True,
    "member-order": "bysource",
    "imported-members": True,
}
napoleon_numpy_docstring = False

html_theme = "sphinx_rtd_theme"
